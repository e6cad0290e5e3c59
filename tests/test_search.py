from __future__ import annotations

from data_alchemist.services import local_search, substring_search


RECORDS = [
    {"ClientID": "C1", "ClientName": "Acme", "PriorityLevel": 5},
    {"ClientID": "C2", "ClientName": "Globex", "PriorityLevel": 2},
    {"WorkerID": "W1", "WorkerName": "Alice", "Skills": ["Python", "SQL"], "QualificationLevel": 4},
    {"WorkerID": "W2", "WorkerName": "Bob", "Skills": ["React"], "QualificationLevel": 2},
    {"TaskID": "T1", "TaskName": "Cleanup", "Duration": 1, "RequiredSkills": ["python"]},
    {"TaskID": "T2", "TaskName": "Model", "Duration": 4, "RequiredSkills": ["ml"]},
]


def _ids(results):
    return [r.get("ClientID") or r.get("WorkerID") or r.get("TaskID") for r in results]


class TestSubstringSearch:
    def test_case_insensitive(self):
        assert _ids(substring_search("ACME", RECORDS, 10)) == ["C1"]

    def test_limit(self):
        assert len(substring_search("id", RECORDS, 3)) == 3

    def test_blank_query(self):
        assert substring_search("  ", RECORDS, 10) == []


class TestLocalSearch:
    def test_duration_comparison_only_matches_tasks(self):
        assert _ids(local_search("tasks with duration > 2", RECORDS)) == ["T2"]

    def test_priority_equals(self):
        assert _ids(local_search("priority = 5", RECORDS)) == ["C1"]

    def test_qualification_less_than(self):
        assert _ids(local_search("qualification < 3", RECORDS)) == ["W2"]

    def test_skill_lookup(self):
        assert _ids(local_search("skills python", RECORDS)) == ["W1", "T1"]

    def test_substring_wins_first(self):
        assert _ids(local_search("globex", RECORDS)) == ["C2"]

    def test_limit_and_blank(self):
        assert len(local_search("skills python", RECORDS, limit=1)) == 1
        assert local_search("", RECORDS) == []
