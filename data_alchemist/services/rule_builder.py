from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from ..models import RULE_TYPES, Rule


_TASK_ID = re.compile(r"\b([A-Za-z]+\d+)\b")
_CO_RUN_HINT = re.compile(r"\b(together|co-?run|same time|simultaneous(?:ly)?)\b", re.IGNORECASE)
_LOAD_LIMIT = re.compile(
    r"(?P<group>[\w-]+)\s+workers?\b.*?\bmax(?:imum)?\s+(?:of\s+)?(?P<n>\d+)\s+(?:tasks?|slots?)\s+per\s+phase",
    re.IGNORECASE,
)
_PHASE_WINDOW = re.compile(
    r"\btask\s+(?P<task>[A-Za-z]+\d+)\b.*?\bphases?\s+(?P<start>\d+)\s*(?:-|to)\s*(?P<end>\d+)",
    re.IGNORECASE,
)


def parse_rule_text(description: str) -> Optional[Rule]:
    """Recognize a few common rule phrasings without the AI service.

    "Tasks T1 and T2 should run together"       -> coRun
    "GroupA workers max 2 tasks per phase"      -> loadLimit
    "Task T3 only in phases 2-4"                -> phaseWindow
    """
    text = description.strip()
    if not text:
        return None

    m = _LOAD_LIMIT.search(text)
    if m:
        group = m.group("group")
        limit = int(m.group("n"))
        return Rule(
            type="loadLimit",
            name=f"{group} load limit",
            description=text,
            config={"workerGroup": group, "maxSlotsPerPhase": limit},
        )

    m = _PHASE_WINDOW.search(text)
    if m:
        start, end = int(m.group("start")), int(m.group("end"))
        if start <= end:
            return Rule(
                type="phaseWindow",
                name=f"{m.group('task')} phase window",
                description=text,
                config={"taskId": m.group("task"), "allowedPhases": list(range(start, end + 1))},
            )

    if _CO_RUN_HINT.search(text):
        task_ids = [t for t in _TASK_ID.findall(text) if t[0].upper() == "T"]
        if len(task_ids) >= 2:
            return Rule(
                type="coRun",
                name=f"Co-run {', '.join(task_ids)}",
                description=text,
                config={"tasks": task_ids},
            )
    return None


def custom_rule(description: str) -> Rule:
    return Rule(type="custom", name="Custom Rule", description=description, config={})


def _coerce_config(config: Any) -> Dict[str, Any]:
    if isinstance(config, dict):
        return config
    if isinstance(config, str):
        try:
            parsed = json.loads(config)
        except json.JSONDecodeError:
            return {"value": config}
        return parsed if isinstance(parsed, dict) else {"value": parsed}
    if config is None:
        return {}
    return {"value": config}


def rule_from_payload(payload: Dict[str, Any], description: str) -> Rule:
    """Build a Rule from the AI service's JSON object."""
    rule_type = payload.get("type")
    if rule_type not in RULE_TYPES:
        rule_type = "custom"
    return Rule(
        type=rule_type,
        name=str(payload.get("name") or "Custom Rule"),
        description=str(payload.get("description") or description),
        config=_coerce_config(payload.get("config")),
        active=True,
    )
