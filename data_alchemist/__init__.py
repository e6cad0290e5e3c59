"""Data Alchemist: clean, validate and configure resource-allocation inputs."""

__version__ = "0.1.0"
