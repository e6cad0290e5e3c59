from __future__ import annotations

from fastapi import APIRouter, Depends

from ..config import get_settings
from ..services import AIService
from .deps import get_ai_service


router = APIRouter(tags=["health"])


@router.get("/health")
async def health(ai: AIService = Depends(get_ai_service)) -> dict:
    settings = get_settings()
    return {
        "status": "ok",
        "environment": settings.environment,
        "ai_api_key": ai.api_key_status(),
    }
