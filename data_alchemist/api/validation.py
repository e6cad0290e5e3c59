from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..models import Correction
from ..services import AIService, EditError, EntityNotFoundError, Workspace, summarize
from .deps import get_ai_service, get_workspace


router = APIRouter(prefix="/validation", tags=["validation"])


@router.get("")
async def get_validation(workspace: Workspace = Depends(get_workspace)) -> dict:
    return {
        "issues": [i.model_dump(mode="json") for i in workspace.issues],
        "summary": summarize(workspace.issues, workspace.total_records).model_dump(),
    }


@router.post("/corrections")
async def suggest_corrections(
    workspace: Workspace = Depends(get_workspace),
    ai: AIService = Depends(get_ai_service),
) -> dict:
    """Ask the AI service for one fix per issue (local fallback on failure)."""

    corrections, source = await ai.suggest_corrections(workspace.issues, workspace.collections())
    return {
        "source": source,
        "issues": len(workspace.issues),
        "corrections": [c.model_dump(mode="json") for c in corrections],
    }


@router.post("/corrections/apply")
async def apply_correction(correction: Correction, workspace: Workspace = Depends(get_workspace)) -> dict:
    try:
        updated = workspace.apply_correction(correction)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except EditError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "records": [r.to_record() for r in updated],
        "issues": [i.model_dump(mode="json") for i in workspace.issues],
        "summary": summarize(workspace.issues, workspace.total_records).model_dump(),
    }
