from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from ..services import ExportBlockedError, Workspace, build_workbook, rules_config_json
from ..services.export import RULES_FILE_NAME, WORKBOOK_FILE_NAME
from .deps import get_workspace


router = APIRouter(prefix="/export", tags=["export"])

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/workbook")
async def export_workbook(force: bool = False, workspace: Workspace = Depends(get_workspace)) -> Response:
    try:
        content = build_workbook(workspace, force=force)
    except ExportBlockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return Response(
        content=content,
        media_type=XLSX_MIME,
        headers={"Content-Disposition": f'attachment; filename="{WORKBOOK_FILE_NAME}"'},
    )


@router.get("/rules-config")
async def export_rules_config(workspace: Workspace = Depends(get_workspace)) -> Response:
    return Response(
        content=rules_config_json(workspace),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{RULES_FILE_NAME}"'},
    )
