from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .entities import EntityType


class ValidationIssue(BaseModel):
    """A single problem found in the uploaded data."""

    id: str
    type: Literal["error", "warning"] = "error"
    entity_type: EntityType
    entity_id: str
    row: int = Field(ge=0, description="0-based row index in its collection")
    field: Optional[str] = None
    value: Any = None
    code: str
    message: str
    suggestion: Optional[str] = None


class Correction(BaseModel):
    """A proposed fix for one field of one record."""

    entity_id: str
    entity_type: Optional[EntityType] = None
    row: Optional[int] = Field(default=None, ge=0)
    field: str
    current_value: Any = None
    suggested_value: Any = None
    reason: str = ""


class ValidationSummary(BaseModel):
    total_records: int
    error_count: int
    warning_count: int
    status: Literal["Has Errors", "Has Warnings", "All Valid"]
    data_quality: int = Field(ge=0, le=100)
    quality_label: str
