from __future__ import annotations

import uuid
from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field


RuleType = Literal["coRun", "loadLimit", "phaseWindow", "slotRestriction", "custom"]
RULE_TYPES = ("coRun", "loadLimit", "phaseWindow", "slotRestriction", "custom")


def new_rule_id() -> str:
    return f"rule-{uuid.uuid4().hex[:12]}"


class Rule(BaseModel):
    """Business rule authored in natural language. Exported, never executed."""

    id: str = Field(default_factory=new_rule_id)
    type: RuleType = "custom"
    name: str = "Custom Rule"
    description: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True


class PriorityWeights(BaseModel):
    """Relative importance sliders shown on the Rules tab (0-50 each)."""

    model_config = ConfigDict(populate_by_name=True)

    priority_level: int = Field(default=30, ge=0, le=50, alias="priorityLevel")
    task_fulfillment: int = Field(default=25, ge=0, le=50, alias="taskFulfillment")
    fairness: int = Field(default=20, ge=0, le=50, alias="fairness")
    workload_balance: int = Field(default=15, ge=0, le=50, alias="workloadBalance")
    skill_match: int = Field(default=10, ge=0, le=50, alias="skillMatch")

    @property
    def total(self) -> int:
        return (
            self.priority_level
            + self.task_fulfillment
            + self.fairness
            + self.workload_balance
            + self.skill_match
        )
