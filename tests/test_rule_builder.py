from __future__ import annotations

from data_alchemist.models import PriorityWeights, Rule
from data_alchemist.services.rule_builder import custom_rule, parse_rule_text, rule_from_payload


class TestParseRuleText:
    def test_co_run(self):
        rule = parse_rule_text("Tasks T1 and T2 should run together")
        assert rule.type == "coRun"
        assert rule.config == {"tasks": ["T1", "T2"]}
        assert rule.active

    def test_co_run_needs_two_tasks(self):
        assert parse_rule_text("Task T1 should run together with others") is None

    def test_load_limit(self):
        rule = parse_rule_text("GroupA workers should have max 2 tasks per phase")
        assert rule.type == "loadLimit"
        assert rule.config == {"workerGroup": "GroupA", "maxSlotsPerPhase": 2}

    def test_phase_window(self):
        rule = parse_rule_text("Task T3 can only run in phases 2-4")
        assert rule.type == "phaseWindow"
        assert rule.config == {"taskId": "T3", "allowedPhases": [2, 3, 4]}

    def test_unrecognized(self):
        assert parse_rule_text("Prefer senior staff on Fridays") is None
        assert parse_rule_text("   ") is None


class TestRuleFromPayload:
    def test_known_type(self):
        rule = rule_from_payload(
            {"type": "slotRestriction", "name": "Slots", "description": "d", "config": {"minCommonSlots": 2}},
            "original",
        )
        assert rule.type == "slotRestriction"
        assert rule.config == {"minCommonSlots": 2}
        assert rule.id.startswith("rule-")

    def test_unknown_type_becomes_custom(self):
        rule = rule_from_payload({"type": "magic", "config": "[1, 2]"}, "original")
        assert rule.type == "custom"
        assert rule.name == "Custom Rule"
        assert rule.description == "original"
        assert rule.config == {"value": [1, 2]}

    def test_custom_rule(self):
        rule = custom_rule("anything")
        assert rule.type == "custom"
        assert rule.config == {}

    def test_rule_ids_are_unique(self):
        assert Rule().id != Rule().id


class TestPriorityWeights:
    def test_defaults_total_100(self):
        weights = PriorityWeights()
        assert weights.total == 100

    def test_aliases(self):
        weights = PriorityWeights.model_validate({"priorityLevel": 50, "skillMatch": 0})
        assert weights.priority_level == 50
        assert weights.model_dump(by_alias=True)["skillMatch"] == 0
        assert weights.total == 110
