from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from ..config import get_settings
from ..models import EntityType
from ..services import (
    EditError,
    EntityNotFoundError,
    IngestionError,
    UnsupportedFileError,
    Workspace,
    ingest_file,
    load_sample_data,
    summarize,
)
from .deps import get_workspace


router = APIRouter(prefix="/datasets", tags=["datasets"])


class CellEdit(BaseModel):
    field: str
    value: Any = None


def _validation_payload(workspace: Workspace) -> dict:
    return {
        "issues": [i.model_dump(mode="json") for i in workspace.issues],
        "summary": summarize(workspace.issues, workspace.total_records).model_dump(),
    }


@router.post("/samples")
async def load_samples(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Load the bundled sample clients, workers and tasks."""

    try:
        data = load_sample_data(get_settings().samples_dir)
    except IngestionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    workspace.load_all(data)
    return {"counts": {t.value: len(workspace.collection(t)) for t in EntityType}, **_validation_payload(workspace)}


@router.post("/{entity_type}")
async def upload_dataset(
    entity_type: EntityType,
    file: UploadFile = File(...),
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    """Upload a CSV or Excel file for one entity type."""

    content = await file.read()
    try:
        records = ingest_file(file.filename or "", content, entity_type)
    except UnsupportedFileError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IngestionError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    workspace.load(entity_type, records)
    return {"entity_type": entity_type.value, "records": len(records), **_validation_payload(workspace)}


@router.get("/{entity_type}")
async def list_dataset(entity_type: EntityType, workspace: Workspace = Depends(get_workspace)) -> dict:
    rows = workspace.collection(entity_type)
    return {"entity_type": entity_type.value, "items": [r.to_record() for r in rows]}


@router.patch("/{entity_type}/{row}")
async def edit_cell(
    entity_type: EntityType,
    row: int,
    edit: CellEdit,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    try:
        updated = workspace.edit_cell(entity_type, row, edit.field, edit.value)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except EditError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"record": updated.to_record(), **_validation_payload(workspace)}
