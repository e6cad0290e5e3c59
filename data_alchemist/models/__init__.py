"""Pydantic models for uploaded records, validation output and rules."""

from .entities import ENTITY_MODELS, ID_PREFIXES, Client, Entity, EntityType, Task, Worker
from .rules import RULE_TYPES, PriorityWeights, Rule, new_rule_id
from .validation import Correction, ValidationIssue, ValidationSummary

__all__ = [
    "ENTITY_MODELS",
    "ID_PREFIXES",
    "Client",
    "Entity",
    "EntityType",
    "Task",
    "Worker",
    "RULE_TYPES",
    "PriorityWeights",
    "Rule",
    "new_rule_id",
    "Correction",
    "ValidationIssue",
    "ValidationSummary",
]
