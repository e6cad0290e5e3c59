from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"


class Entity(BaseModel):
    """Base for uploaded records. Aliases are the spreadsheet column names."""

    model_config = ConfigDict(populate_by_name=True)

    id_column: ClassVar[str] = ""

    @property
    def entity_id(self) -> str:
        return getattr(self, self.attribute_for(self.id_column))

    @classmethod
    def columns(cls) -> List[str]:
        return [f.alias or name for name, f in cls.model_fields.items()]

    @classmethod
    def attribute_for(cls, column: str) -> str:
        """Map a column name (alias) to the model attribute name."""
        for name, f in cls.model_fields.items():
            if (f.alias or name) == column or name == column:
                return name
        raise KeyError(column)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Client(Entity):
    """A customer requesting tasks."""

    id_column: ClassVar[str] = "ClientID"

    client_id: str = Field(alias="ClientID")
    client_name: str = Field(default="Unknown", alias="ClientName")
    priority_level: Optional[int] = Field(default=1, alias="PriorityLevel")
    requested_task_ids: List[str] = Field(default_factory=list, alias="RequestedTaskIDs")
    group_tag: str = Field(default="Default", alias="GroupTag")
    attributes_json: Dict[str, Any] = Field(default_factory=dict, alias="AttributesJSON")


class Worker(Entity):
    """A person who can be allocated to tasks."""

    id_column: ClassVar[str] = "WorkerID"

    worker_id: str = Field(alias="WorkerID")
    worker_name: str = Field(default="Unknown", alias="WorkerName")
    skills: List[str] = Field(default_factory=list, alias="Skills")
    available_slots: List[int] = Field(default_factory=list, alias="AvailableSlots")
    max_load_per_phase: Optional[int] = Field(default=1, alias="MaxLoadPerPhase")
    worker_group: str = Field(default="Default", alias="WorkerGroup")
    qualification_level: Optional[int] = Field(default=1, alias="QualificationLevel")


class Task(Entity):
    """A unit of work clients can request."""

    id_column: ClassVar[str] = "TaskID"

    task_id: str = Field(alias="TaskID")
    task_name: str = Field(default="Unknown", alias="TaskName")
    category: str = Field(default="General", alias="Category")
    duration: Optional[int] = Field(default=1, alias="Duration")
    required_skills: List[str] = Field(default_factory=list, alias="RequiredSkills")
    preferred_phases: List[int] = Field(default_factory=list, alias="PreferredPhases")
    max_concurrent: Optional[int] = Field(default=1, alias="MaxConcurrent")


ENTITY_MODELS: Dict[EntityType, Type[Entity]] = {
    EntityType.CLIENTS: Client,
    EntityType.WORKERS: Worker,
    EntityType.TASKS: Task,
}

ID_PREFIXES: Dict[EntityType, str] = {
    EntityType.CLIENTS: "C",
    EntityType.WORKERS: "W",
    EntityType.TASKS: "T",
}
