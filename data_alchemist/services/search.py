from __future__ import annotations

import json
import operator
import re
from typing import Any, Callable, Dict, List, Optional, Sequence


_OPS: Dict[str, Callable[[int, int], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    "=": operator.eq,
}

# (pattern, record must have this ID column, numeric column)
_NUMERIC_FILTERS = [
    (re.compile(r"duration\s*([><=])\s*(\d+)"), "TaskID", "Duration"),
    (re.compile(r"priority\s*([><=])\s*(\d+)"), "ClientID", "PriorityLevel"),
    (re.compile(r"qualification\s*([><=])\s*(\d+)"), "WorkerID", "QualificationLevel"),
]
_SKILL_PATTERN = re.compile(r"skills?\s+(.+)")


def record_text(record: Dict[str, Any]) -> str:
    return json.dumps(record, default=str).lower()


def substring_search(query: str, records: Sequence[Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
    """Plain case-insensitive match against each record's JSON text."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [r for r in records if needle in record_text(r)][:limit]


def _numeric_match(query: str, record: Dict[str, Any]) -> Optional[bool]:
    for pattern, id_column, column in _NUMERIC_FILTERS:
        if id_column not in record or record.get(column) is None:
            continue
        m = pattern.search(query)
        if m:
            try:
                value = int(record[column])
            except (TypeError, ValueError):
                return False
            return _OPS[m.group(1)](value, int(m.group(2)))
    return None


def _skill_match(query: str, record: Dict[str, Any]) -> Optional[bool]:
    skills = None
    if "WorkerID" in record and isinstance(record.get("Skills"), list):
        skills = record["Skills"]
    elif "TaskID" in record and isinstance(record.get("RequiredSkills"), list):
        skills = record["RequiredSkills"]
    if skills is None:
        return None
    m = _SKILL_PATTERN.search(query)
    if not m:
        return None
    wanted = m.group(1).strip()
    return any(wanted in str(skill).lower() for skill in skills)


def matches(query: str, record: Dict[str, Any]) -> bool:
    q = query.strip().lower()
    if not q:
        return False
    if q in record_text(record):
        return True
    numeric = _numeric_match(q, record)
    if numeric is not None:
        return numeric
    skill = _skill_match(q, record)
    if skill is not None:
        return skill
    return False


def local_search(query: str, records: Sequence[Dict[str, Any]], limit: int = 10) -> List[Dict[str, Any]]:
    """Instant search: substring, numeric comparisons and skill lookups.

    Examples: "duration > 2", "priority = 5", "skills python".
    """
    if not query.strip():
        return []
    return [r for r in records if matches(query, r)][:limit]
