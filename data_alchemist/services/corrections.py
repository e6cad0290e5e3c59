from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..models import Correction, Entity, EntityType, ValidationIssue


Collections = Mapping[EntityType, Sequence[Entity]]


def _record_at(collections: Optional[Collections], issue: ValidationIssue) -> Optional[Dict[str, Any]]:
    if not collections:
        return None
    rows = collections.get(issue.entity_type) or []
    if 0 <= issue.row < len(rows):
        return rows[issue.row].to_record()
    return None


def _unique_id(base: str, taken: set) -> str:
    candidate = f"{base}_updated"
    n = 2
    while candidate in taken:
        candidate = f"{base}_updated{n}"
        n += 1
    return candidate


def _clamp_level(value: Any) -> int:
    if value is None:
        return 1
    return max(1, min(5, int(value)))


def fallback_corrections(
    issues: Sequence[ValidationIssue],
    collections: Optional[Collections] = None,
) -> List[Correction]:
    """Deterministic fixes used when the AI service is unavailable.

    Issues without a safe automatic value (warnings, unknown tasks with no
    record to edit) get ``suggested_value=None`` and the suggestion text in
    ``reason``; they are fixed by hand.
    """

    taken: Dict[EntityType, set] = {}
    if collections:
        for entity_type, rows in collections.items():
            taken[entity_type] = {r.entity_id for r in rows}

    unknown_tasks: Dict[int, set] = {}
    for issue in issues:
        if issue.code == "unknown_task":
            unknown_tasks.setdefault(issue.row, set()).add(issue.value)

    corrections: List[Correction] = []
    for issue in issues:
        record = _record_at(collections, issue)
        field = issue.field or "unknown"
        current = record.get(field) if record and field in record else None
        suggested: Any = None

        if issue.code == "duplicate_id":
            ids = taken.setdefault(issue.entity_type, set())
            suggested = _unique_id(issue.entity_id, ids)
            ids.add(suggested)
            current = issue.entity_id
        elif issue.code in ("priority_range", "qualification_range"):
            suggested = _clamp_level(current)
        elif issue.code in ("duration_range", "max_load_range", "max_concurrent_range"):
            suggested = 1
        elif issue.code == "unknown_task" and record is not None:
            bad = unknown_tasks.get(issue.row, {issue.value})
            suggested = [t for t in record.get("RequestedTaskIDs", []) if t not in bad]

        reason = issue.message
        if suggested is None:
            reason = f"{issue.message}. {issue.suggestion or 'Fix manually'}"

        corrections.append(Correction(
            entity_id=issue.entity_id,
            entity_type=issue.entity_type,
            row=issue.row,
            field=field,
            current_value=current,
            suggested_value=suggested,
            reason=reason,
        ))
    return corrections


def corrections_from_payload(
    items: Sequence[Any],
    issues: Sequence[ValidationIssue],
) -> List[Correction]:
    """Convert the AI service's JSON array into Correction objects.

    Entity type and row are recovered from the matching issue when possible.
    """

    corrections: List[Correction] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        entity_id = item.get("entityId") or item.get("entity_id")
        field = item.get("field")
        if not entity_id or not field:
            continue
        entity_id = str(entity_id)
        match = next(
            (i for i in issues if i.entity_id == entity_id and i.field == field),
            next((i for i in issues if i.entity_id == entity_id), None),
        )
        corrections.append(Correction(
            entity_id=entity_id,
            entity_type=match.entity_type if match else None,
            row=match.row if match else None,
            field=str(field),
            current_value=item.get("currentValue", item.get("current_value")),
            suggested_value=item.get("suggestedValue", item.get("suggested_value")),
            reason=str(item.get("reason") or ""),
        ))
    return corrections
