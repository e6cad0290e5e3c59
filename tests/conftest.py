from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, List

import pytest

from data_alchemist.config import AppSettings
from data_alchemist.models import EntityType
from data_alchemist.services import AIService, Workspace, normalize_records


CLIENT_ROWS = [
    {"ClientID": "C1", "ClientName": "Acme", "PriorityLevel": "3", "RequestedTaskIDs": "T1,T2", "GroupTag": "GroupA",
     "AttributesJSON": '{"location": "NY"}'},
    {"ClientID": "C2", "ClientName": "Globex", "PriorityLevel": "5", "RequestedTaskIDs": "T2", "GroupTag": "GroupB",
     "AttributesJSON": ""},
]
WORKER_ROWS = [
    {"WorkerID": "W1", "WorkerName": "Alice", "Skills": "python, data", "AvailableSlots": "[1,2,3]",
     "MaxLoadPerPhase": "2", "WorkerGroup": "GroupA", "QualificationLevel": "4"},
    {"WorkerID": "W2", "WorkerName": "Bob", "Skills": "react", "AvailableSlots": "2,4",
     "MaxLoadPerPhase": "1", "WorkerGroup": "GroupB", "QualificationLevel": "3"},
]
TASK_ROWS = [
    {"TaskID": "T1", "TaskName": "Cleanup", "Category": "Analytics", "Duration": "2", "RequiredSkills": "python",
     "PreferredPhases": "1-3", "MaxConcurrent": "2"},
    {"TaskID": "T2", "TaskName": "Dashboard", "Category": "Frontend", "Duration": "3", "RequiredSkills": "React",
     "PreferredPhases": "[2,4]", "MaxConcurrent": "1"},
]


class FakeCompletions:
    """Stands in for ``client.chat.completions``; replies are consumed in order."""

    def __init__(self, replies: List[Any]):
        self.replies = list(replies)
        self.calls: List[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeAIClient:
    def __init__(self, *replies: Any):
        self.completions = FakeCompletions(list(replies))
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def settings(monkeypatch) -> AppSettings:
    """Settings with no API key, isolated from the developer's .env."""
    for name in ("GEMINI_API_KEY", "AI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    return AppSettings(_env_file=None)


@pytest.fixture
def clients():
    return normalize_records(CLIENT_ROWS, EntityType.CLIENTS)


@pytest.fixture
def workers():
    return normalize_records(WORKER_ROWS, EntityType.WORKERS)


@pytest.fixture
def tasks():
    return normalize_records(TASK_ROWS, EntityType.TASKS)


@pytest.fixture
def workspace(clients, workers, tasks) -> Workspace:
    ws = Workspace()
    ws.load_all({EntityType.CLIENTS: clients, EntityType.WORKERS: workers, EntityType.TASKS: tasks})
    return ws


@pytest.fixture
def make_ai(settings):
    """Build an AIService wired to a fake client that returns ``replies`` in order."""

    def _make(*replies: Any):
        client = FakeAIClient(*replies)
        return AIService(settings, client=client), client.completions

    return _make
