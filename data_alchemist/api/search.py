from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..config import get_settings
from ..services import AIService, Workspace, local_search
from .deps import get_ai_service, get_workspace


router = APIRouter(tags=["search"])


class SearchRequest(BaseModel):
    query: str
    use_ai: bool = True


@router.post("/search")
async def search(
    request: SearchRequest,
    workspace: Workspace = Depends(get_workspace),
    ai: AIService = Depends(get_ai_service),
) -> dict:
    """Search across clients, workers and tasks."""

    records = workspace.all_records()
    if request.use_ai:
        results, source = await ai.search_data(request.query, records)
    else:
        results = local_search(request.query, records, get_settings().instant_search_limit)
        source = "local"
    return {"query": request.query, "source": source, "results": results}
