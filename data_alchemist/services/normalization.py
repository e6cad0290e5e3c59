"""
Record normalization
====================

Converts raw spreadsheet rows (column name -> cell value) into typed entities.
Cells arrive as text from CSV and as mixed types from Excel, so every coercion
accepts both.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Dict, Iterable, List, Optional

from ..models import ENTITY_MODELS, ID_PREFIXES, Entity, EntityType


LIST_FIELDS = {"RequestedTaskIDs", "Skills", "RequiredSkills"}
SLOT_FIELDS = {"AvailableSlots"}
PHASE_FIELDS = {"PreferredPhases"}
INT_FIELDS = {"PriorityLevel", "QualificationLevel", "Duration", "MaxLoadPerPhase", "MaxConcurrent"}
JSON_FIELDS = {"AttributesJSON"}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

TEXT_DEFAULTS: Dict[EntityType, Dict[str, str]] = {
    EntityType.CLIENTS: {"ClientName": "Unknown", "GroupTag": "Default"},
    EntityType.WORKERS: {"WorkerName": "Unknown", "WorkerGroup": "Default"},
    EntityType.TASKS: {"TaskName": "Unknown", "Category": "General"},
}


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_int(value: Any, default: Optional[int] = 1) -> Optional[int]:
    """Parse the leading integer of a cell.

    Blank cells take ``default``; non-numeric text yields ``None``.
    "3", "3.0" and "3 days" all give 3.
    """
    if is_blank(value):
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    m = _LEADING_INT.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def split_list(value: Any) -> List[str]:
    """Split a comma separated cell into trimmed, non-empty strings."""
    if is_blank(value):
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if not is_blank(v)]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _int_members(values: Iterable[Any]) -> List[int]:
    result = []
    for v in values:
        if isinstance(v, bool):
            continue
        if isinstance(v, int):
            result.append(v)
        elif isinstance(v, float) and v.is_integer():
            result.append(int(v))
    return result


def parse_slots(value: Any) -> List[int]:
    """Parse "[1, 2, 3]" (JSON) or "1,2,3" into a list of ints."""
    if is_blank(value):
        return []
    if isinstance(value, (list, tuple)):
        return _int_members(parse_int(v, default=None) if isinstance(v, str) else v for v in value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _int_members([value])
    text = str(value).strip()
    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            return []
        return _int_members(parsed) if isinstance(parsed, list) else []
    slots = []
    for part in text.split(","):
        n = parse_int(part, default=None)
        if n is not None:
            slots.append(n)
    return slots


def parse_phases(value: Any) -> List[int]:
    """Parse a phase range ("1-3" -> [1, 2, 3]) or a slot-style list."""
    if isinstance(value, str) and "-" in value:
        text = value.strip().strip("[]")
        bounds = text.split("-")
        if len(bounds) != 2:
            return []
        start = parse_int(bounds[0], default=None)
        end = parse_int(bounds[1], default=None)
        if start is None or end is None or start > end:
            return []
        return list(range(start, end + 1))
    return parse_slots(value)


def parse_attributes(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def coerce_field_value(field: str, value: Any) -> Any:
    """Coerce an edited or suggested cell value into the field's type.

    Integer fields fall back to 1 when the value is not a number.
    """
    if field in LIST_FIELDS:
        return split_list(value)
    if field in SLOT_FIELDS:
        return parse_slots(value)
    if field in PHASE_FIELDS:
        return parse_phases(value)
    if field in INT_FIELDS:
        n = parse_int(value, default=None)
        return 1 if n is None else n
    if field in JSON_FIELDS:
        return parse_attributes(value)
    return "" if value is None else str(value).strip()


def _text(value: Any, default: str) -> str:
    if is_blank(value):
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_row(row: Dict[str, Any], entity_type: EntityType, index: int) -> Entity:
    """Normalize one raw row; ``index`` is its 0-based position."""
    model = ENTITY_MODELS[entity_type]
    id_column = model.id_column
    defaults = TEXT_DEFAULTS[entity_type]
    values: Dict[str, Any] = {}
    for column in model.columns():
        raw = row.get(column)
        if column == id_column:
            values[column] = _text(raw, f"{ID_PREFIXES[entity_type]}{index + 1}")
        elif column in LIST_FIELDS:
            values[column] = split_list(raw)
        elif column in SLOT_FIELDS:
            values[column] = parse_slots(raw)
        elif column in PHASE_FIELDS:
            values[column] = parse_phases(raw)
        elif column in INT_FIELDS:
            values[column] = parse_int(raw)
        elif column in JSON_FIELDS:
            values[column] = parse_attributes(raw)
        else:
            values[column] = _text(raw, defaults.get(column, ""))
    return model.model_validate(values)


def normalize_records(rows: Iterable[Dict[str, Any]], entity_type: EntityType) -> List[Entity]:
    entity_type = EntityType(entity_type)
    return [normalize_row(row, entity_type, i) for i, row in enumerate(rows)]
