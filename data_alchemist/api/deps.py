from __future__ import annotations

from functools import lru_cache

from ..services import AIService, Workspace


# In-memory workspace shared by all requests, for demo purposes
_WORKSPACE = Workspace()


def get_workspace() -> Workspace:
    return _WORKSPACE


def reset_workspace() -> Workspace:
    global _WORKSPACE
    _WORKSPACE = Workspace()
    return _WORKSPACE


@lru_cache(maxsize=1)
def get_ai_service() -> AIService:
    return AIService()
