from __future__ import annotations

import io
import json
from typing import Any, Dict, List

import pandas as pd
import structlog

from ..models import ENTITY_MODELS, Entity, EntityType
from .workspace import Workspace


logger = structlog.get_logger(__name__)

WORKBOOK_FILE_NAME = "data-alchemist-export.xlsx"
RULES_FILE_NAME = "rules-config.json"

SHEET_NAMES = {
    EntityType.CLIENTS: "Clients",
    EntityType.WORKERS: "Workers",
    EntityType.TASKS: "Tasks",
}
# Comma-joined on export; the remaining list/dict fields are written as JSON text.
JOINED_FIELDS = {"RequestedTaskIDs", "Skills", "RequiredSkills"}
JSON_TEXT_FIELDS = {"AvailableSlots", "PreferredPhases", "AttributesJSON"}


class ExportBlockedError(Exception):
    """Raised when exporting while validation errors remain."""


def _flatten(record: Dict[str, Any]) -> Dict[str, Any]:
    row = dict(record)
    for key, value in record.items():
        if key in JOINED_FIELDS:
            row[key] = ",".join(value)
        elif key in JSON_TEXT_FIELDS:
            row[key] = json.dumps(value)
    return row


def sheet_frame(rows: List[Entity], entity_type: EntityType) -> pd.DataFrame:
    columns = ENTITY_MODELS[entity_type].columns()
    return pd.DataFrame([_flatten(r.to_record()) for r in rows], columns=columns)


def ensure_exportable(workspace: Workspace, force: bool = False) -> None:
    errors = sum(1 for i in workspace.issues if i.type == "error")
    if errors and not force:
        raise ExportBlockedError(f"Fix {errors} validation error(s) before export")


def build_workbook(workspace: Workspace, force: bool = False) -> bytes:
    """Write Clients/Workers/Tasks sheets to an in-memory xlsx file."""

    ensure_exportable(workspace, force)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for entity_type, sheet in SHEET_NAMES.items():
            sheet_frame(workspace.collection(entity_type), entity_type).to_excel(writer, sheet_name=sheet, index=False)
    logger.info("workbook_exported", records=workspace.total_records)
    return buffer.getvalue()


def build_rules_config(workspace: Workspace) -> Dict[str, Any]:
    return {
        "rules": [rule.model_dump() for rule in workspace.rules],
        "priorityWeights": workspace.priority_weights.model_dump(by_alias=True),
    }


def rules_config_json(workspace: Workspace) -> str:
    return json.dumps(build_rules_config(workspace), indent=2)
