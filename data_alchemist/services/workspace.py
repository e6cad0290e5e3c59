from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from ..models import (
    ENTITY_MODELS,
    Client,
    Correction,
    Entity,
    EntityType,
    PriorityWeights,
    Rule,
    Task,
    ValidationIssue,
    ValidationSummary,
    Worker,
)
from .normalization import coerce_field_value
from .validation import summarize, validate_data


logger = structlog.get_logger(__name__)


class EditError(Exception):
    """Raised when a cell edit or correction cannot be applied."""


class EntityNotFoundError(EditError):
    """Raised when the targeted record does not exist."""


class RuleNotFoundError(KeyError):
    """Raised when a rule id does not exist."""


@dataclass
class Workspace:
    """Everything one user session works on. Lives in memory only."""

    clients: List[Client] = field(default_factory=list)
    workers: List[Worker] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    priority_weights: PriorityWeights = field(default_factory=PriorityWeights)

    def collection(self, entity_type: Union[EntityType, str]) -> List[Entity]:
        return getattr(self, EntityType(entity_type).value)

    def collections(self) -> Dict[EntityType, List[Entity]]:
        return {t: self.collection(t) for t in EntityType}

    @property
    def total_records(self) -> int:
        return len(self.clients) + len(self.workers) + len(self.tasks)

    def revalidate(self) -> List[ValidationIssue]:
        self.issues = validate_data(self.clients, self.workers, self.tasks)
        return self.issues

    def _replace(self, entity_type: EntityType, records: Sequence[Any]) -> None:
        model = ENTITY_MODELS[entity_type]
        rows = [r if isinstance(r, model) else model.model_validate(r) for r in records]
        setattr(self, entity_type.value, rows)
        logger.info("collection_loaded", entity_type=entity_type.value, records=len(rows))

    def load(self, entity_type: Union[EntityType, str], records: Sequence[Any]) -> List[ValidationIssue]:
        """Replace one collection and revalidate against the other two."""
        self._replace(EntityType(entity_type), records)
        return self.revalidate()

    def load_all(self, data: Dict[EntityType, Sequence[Any]]) -> List[ValidationIssue]:
        for entity_type, records in data.items():
            self._replace(EntityType(entity_type), records)
        return self.revalidate()

    def summary(self) -> Dict[str, Any]:
        validation: ValidationSummary = summarize(self.issues, self.total_records)
        return {
            "clients": len(self.clients),
            "workers": len(self.workers),
            "tasks": len(self.tasks),
            "rules": len(self.rules),
            "priority_weight_total": self.priority_weights.total,
            "validation": validation.model_dump(),
        }

    def all_records(self) -> List[Dict[str, Any]]:
        """Clients, workers and tasks flattened to column-name dicts."""
        return [r.to_record() for t in EntityType for r in self.collection(t)]

    # Editing

    def _set_field(self, entity_type: EntityType, row: int, column: str, value: Any) -> Entity:
        rows = self.collection(entity_type)
        if not 0 <= row < len(rows):
            raise EntityNotFoundError(f"No {entity_type.value} row {row}")
        model = ENTITY_MODELS[entity_type]
        try:
            attribute = model.attribute_for(column)
        except KeyError as exc:
            raise EditError(f"Unknown field {column} for {entity_type.value}") from exc
        column = model.model_fields[attribute].alias or attribute
        updated = rows[row].model_copy(update={attribute: coerce_field_value(column, value)})
        rows[row] = updated
        return updated

    def edit_cell(self, entity_type: Union[EntityType, str], row: int, column: str, value: Any) -> Entity:
        entity_type = EntityType(entity_type)
        updated = self._set_field(entity_type, row, column, value)
        logger.info("cell_edited", entity_type=entity_type.value, row=row, field=column)
        self.revalidate()
        return updated

    def _locate(self, entity_id: str) -> Optional[EntityType]:
        for entity_type in EntityType:
            if any(r.entity_id == entity_id for r in self.collection(entity_type)):
                return entity_type
        return None

    def apply_correction(self, correction: Correction) -> List[Entity]:
        """Apply a suggested fix.

        A correction with a row targets exactly that record; otherwise every
        record with the ID in the first collection holding it is updated.
        Corrections without a suggested value are manual and rejected.
        """
        if correction.suggested_value is None:
            raise EditError(f"No automatic fix for {correction.entity_id} {correction.field}")
        if correction.entity_type is not None and correction.row is not None:
            updated = [self._set_field(correction.entity_type, correction.row, correction.field, correction.suggested_value)]
        else:
            entity_type = correction.entity_type or self._locate(correction.entity_id)
            if entity_type is None:
                raise EntityNotFoundError(f"Unknown entity {correction.entity_id}")
            rows = [i for i, r in enumerate(self.collection(entity_type)) if r.entity_id == correction.entity_id]
            if not rows:
                raise EntityNotFoundError(f"Unknown entity {correction.entity_id}")
            updated = [self._set_field(entity_type, i, correction.field, correction.suggested_value) for i in rows]
        logger.info("correction_applied", entity_id=correction.entity_id, field=correction.field)
        self.revalidate()
        return updated

    # Rules

    def add_rule(self, rule: Rule) -> Rule:
        self.rules.append(rule)
        logger.info("rule_added", rule_id=rule.id, rule_type=rule.type)
        return rule

    def get_rule(self, rule_id: str) -> Rule:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        raise RuleNotFoundError(rule_id)

    def remove_rule(self, rule_id: str) -> Rule:
        rule = self.get_rule(rule_id)
        self.rules = [r for r in self.rules if r.id != rule_id]
        return rule

    def set_rule_active(self, rule_id: str, active: bool) -> Rule:
        rule = self.get_rule(rule_id)
        rule.active = active
        return rule

    def set_priority_weights(self, weights: Union[PriorityWeights, Dict[str, int]]) -> PriorityWeights:
        if not isinstance(weights, PriorityWeights):
            weights = PriorityWeights.model_validate(weights)
        self.priority_weights = weights
        return weights
