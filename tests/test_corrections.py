from __future__ import annotations

from data_alchemist.models import Client, EntityType, Task, Worker
from data_alchemist.services import validate_data
from data_alchemist.services.corrections import corrections_from_payload, fallback_corrections


def _collections(clients=(), workers=(), tasks=()):
    return {EntityType.CLIENTS: list(clients), EntityType.WORKERS: list(workers), EntityType.TASKS: list(tasks)}


class TestFallbackCorrections:
    def test_duplicate_ids_get_unique_suffixes(self):
        clients = [Client(ClientID="C1"), Client(ClientID="C1"), Client(ClientID="C1"), Client(ClientID="C1_updated")]
        collections = _collections(clients)
        issues = validate_data(clients, [], [])
        fixes = fallback_corrections(issues, collections)
        assert [f.suggested_value for f in fixes] == ["C1_updated2", "C1_updated3"]
        assert [f.row for f in fixes] == [1, 2]
        assert fixes[0].current_value == "C1"

    def test_levels_are_clamped(self):
        clients = [Client(ClientID="C1", PriorityLevel=9)]
        workers = [Worker(WorkerID="W1", AvailableSlots=[1], QualificationLevel=None)]
        issues = validate_data(clients, workers, [])
        fixes = fallback_corrections(issues, _collections(clients, workers))
        assert [(f.field, f.current_value, f.suggested_value) for f in fixes] == [
            ("PriorityLevel", 9, 5),
            ("QualificationLevel", None, 1),
        ]

    def test_non_positive_numbers_become_one(self):
        tasks = [Task(TaskID="T1", Duration=0, MaxConcurrent=-3)]
        issues = validate_data([], [], tasks)
        fixes = fallback_corrections(issues, _collections(tasks=tasks))
        assert [(f.field, f.suggested_value) for f in fixes] == [("Duration", 1), ("MaxConcurrent", 1)]

    def test_unknown_tasks_removed_together(self):
        clients = [Client(ClientID="C1", RequestedTaskIDs=["T1", "T8", "T9"])]
        tasks = [Task(TaskID="T1")]
        issues = validate_data(clients, [], tasks)
        fixes = fallback_corrections(issues, _collections(clients, tasks=tasks))
        assert len(fixes) == 2
        assert all(f.suggested_value == ["T1"] for f in fixes)
        assert fixes[0].current_value == ["T1", "T8", "T9"]

    def test_warnings_have_no_automatic_value(self):
        workers = [Worker(WorkerID="W1")]
        issues = validate_data([], workers, [])
        [fix] = fallback_corrections(issues, _collections(workers=workers))
        assert fix.field == "AvailableSlots"
        assert fix.current_value == []
        assert fix.suggested_value is None
        assert fix.reason.endswith("Add at least one available slot")

    def test_unknown_task_without_record_is_manual(self):
        clients = [Client(ClientID="C1", RequestedTaskIDs=["T9"])]
        [fix] = fallback_corrections(validate_data(clients, [], []))
        assert fix.suggested_value is None

    def test_one_fix_per_issue(self):
        clients = [Client(ClientID="C1", PriorityLevel=0, RequestedTaskIDs=["T5"])]
        issues = validate_data(clients, [], [])
        assert len(fallback_corrections(issues, _collections(clients))) == len(issues)


class TestCorrectionsFromPayload:
    def test_recovers_row_and_type_from_issue(self):
        clients = [Client(ClientID="C0"), Client(ClientID="C1", PriorityLevel=8)]
        issues = validate_data(clients, [], [])
        [fix] = corrections_from_payload(
            [{"entityId": "C1", "field": "PriorityLevel", "currentValue": 8, "suggestedValue": 5, "reason": "range"}],
            issues,
        )
        assert fix.entity_type == EntityType.CLIENTS
        assert fix.row == 1
        assert fix.suggested_value == 5

    def test_skips_malformed_items(self):
        fixes = corrections_from_payload(["oops", {"field": "X"}, {"entityId": "Z9", "field": "Name"}], [])
        assert len(fixes) == 1
        assert fixes[0].entity_type is None
        assert fixes[0].row is None
