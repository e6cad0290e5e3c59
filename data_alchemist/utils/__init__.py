"""Shared helpers."""

from .log_config import configure_structured_logging

__all__ = ["configure_structured_logging"]
