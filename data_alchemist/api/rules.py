from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..models import PriorityWeights
from ..services import AIService, RuleNotFoundError, Workspace
from .deps import get_ai_service, get_workspace


router = APIRouter(prefix="/rules", tags=["rules"])


class RuleRequest(BaseModel):
    description: str = Field(min_length=1)


class RuleToggle(BaseModel):
    active: bool


def _rules_payload(workspace: Workspace) -> dict:
    return {
        "rules": [r.model_dump() for r in workspace.rules],
        "priorityWeights": workspace.priority_weights.model_dump(by_alias=True),
        "weightTotal": workspace.priority_weights.total,
    }


@router.get("")
async def list_rules(workspace: Workspace = Depends(get_workspace)) -> dict:
    return _rules_payload(workspace)


@router.post("")
async def create_rule(
    request: RuleRequest,
    workspace: Workspace = Depends(get_workspace),
    ai: AIService = Depends(get_ai_service),
) -> dict:
    """Convert a plain-English description into a rule and store it."""

    description = request.description.strip()
    if not description:
        raise HTTPException(status_code=400, detail="Rule description is empty")
    rule = await ai.convert_to_rule(description)
    workspace.add_rule(rule)
    return rule.model_dump()


@router.put("/weights")
async def set_weights(weights: PriorityWeights, workspace: Workspace = Depends(get_workspace)) -> dict:
    workspace.set_priority_weights(weights)
    return _rules_payload(workspace)


@router.patch("/{rule_id}")
async def toggle_rule(rule_id: str, toggle: RuleToggle, workspace: Workspace = Depends(get_workspace)) -> dict:
    try:
        rule = workspace.set_rule_active(rule_id, toggle.active)
    except RuleNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Rule {rule_id} not found") from exc
    return rule.model_dump()


@router.delete("/{rule_id}")
async def delete_rule(rule_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    try:
        workspace.remove_rule(rule_id)
    except RuleNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Rule {rule_id} not found") from exc
    return _rules_payload(workspace)
