from __future__ import annotations

import pytest

from data_alchemist.models import Correction, EntityType, PriorityWeights, Rule
from data_alchemist.services import EditError, EntityNotFoundError, RuleNotFoundError, Workspace
from data_alchemist.services.corrections import fallback_corrections


class TestLoading:
    def test_load_revalidates_against_other_collections(self, workspace):
        assert workspace.issues == []
        workspace.load(EntityType.TASKS, [{"TaskID": "T1"}])
        assert [i.id for i in workspace.issues] == ["unknown-task-C1-T2", "unknown-task-C2-T2"]

    def test_load_accepts_column_dicts(self):
        ws = Workspace()
        ws.load("workers", [{"WorkerID": "W1", "AvailableSlots": [1]}])
        assert ws.workers[0].worker_id == "W1"
        assert ws.total_records == 1

    def test_summary(self, workspace):
        summary = workspace.summary()
        assert summary["clients"] == 2
        assert summary["priority_weight_total"] == 100
        assert summary["validation"]["status"] == "All Valid"

    def test_all_records(self, workspace):
        records = workspace.all_records()
        assert len(records) == 6
        assert records[0]["ClientID"] == "C1"
        assert records[-1]["TaskID"] == "T2"


class TestEditCell:
    def test_edit_coerces_and_revalidates(self, workspace):
        updated = workspace.edit_cell(EntityType.CLIENTS, 0, "PriorityLevel", "9")
        assert updated.priority_level == 9
        assert workspace.clients[0].priority_level == 9
        assert [i.id for i in workspace.issues] == ["priority-C1"]

        workspace.edit_cell("clients", 0, "PriorityLevel", "4")
        assert workspace.issues == []

    def test_edit_list_field(self, workspace):
        workspace.edit_cell(EntityType.CLIENTS, 1, "RequestedTaskIDs", "T1, T7")
        assert workspace.clients[1].requested_task_ids == ["T1", "T7"]
        assert [i.code for i in workspace.issues] == ["unknown_task"]

    def test_edit_by_attribute_name(self, workspace):
        workspace.edit_cell(EntityType.TASKS, 0, "duration", 5)
        assert workspace.tasks[0].duration == 5

    def test_bad_row(self, workspace):
        with pytest.raises(EntityNotFoundError):
            workspace.edit_cell(EntityType.CLIENTS, 5, "ClientName", "x")

    def test_unknown_field(self, workspace):
        with pytest.raises(EditError):
            workspace.edit_cell(EntityType.CLIENTS, 0, "Nope", "x")


class TestApplyCorrection:
    def test_row_targeted(self, workspace):
        workspace.load(EntityType.CLIENTS, [{"ClientID": "C1"}, {"ClientID": "C1"}])
        correction = Correction(
            entity_id="C1", entity_type=EntityType.CLIENTS, row=1, field="ClientID", suggested_value="C1_updated"
        )
        workspace.apply_correction(correction)
        assert [c.client_id for c in workspace.clients] == ["C1", "C1_updated"]
        assert workspace.issues == []

    def test_by_id_updates_every_match(self, workspace):
        workspace.load(EntityType.WORKERS, [
            {"WorkerID": "W1", "AvailableSlots": [1], "QualificationLevel": "8"},
            {"WorkerID": "W1", "AvailableSlots": [1], "QualificationLevel": "7"},
        ])
        updated = workspace.apply_correction(Correction(entity_id="W1", field="QualificationLevel", suggested_value=5))
        assert len(updated) == 2
        assert all(w.qualification_level == 5 for w in workspace.workers)

    def test_unknown_entity(self, workspace):
        with pytest.raises(EntityNotFoundError):
            workspace.apply_correction(Correction(entity_id="X1", field="Name", suggested_value="y"))

    def test_warning_fallback_leaves_record_unchanged(self, workspace):
        workspace.edit_cell(EntityType.TASKS, 0, "RequiredSkills", "cobol")
        [fix] = fallback_corrections(workspace.issues, workspace.collections())
        assert fix.field == "RequiredSkills"

        with pytest.raises(EditError):
            workspace.apply_correction(fix)
        assert workspace.tasks[0].required_skills == ["cobol"]
        assert [i.id for i in workspace.issues] == ["skill-T1-cobol"]


class TestRules:
    def test_add_toggle_remove(self):
        ws = Workspace()
        rule = ws.add_rule(Rule(type="coRun", config={"tasks": ["T1", "T2"]}))
        assert ws.set_rule_active(rule.id, False).active is False
        assert ws.remove_rule(rule.id) is rule
        assert ws.rules == []

    def test_missing_rule(self):
        with pytest.raises(RuleNotFoundError):
            Workspace().remove_rule("rule-missing")

    def test_priority_weights(self):
        ws = Workspace()
        weights = ws.set_priority_weights({"priorityLevel": 10, "fairness": 40})
        assert isinstance(weights, PriorityWeights)
        assert ws.priority_weights.total == 10 + 25 + 40 + 15 + 10
