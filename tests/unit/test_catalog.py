"""
Unit tests for the scenario catalog.
"""

import pytest

from rescue_drill.catalog import (
    InvalidScenario,
    ScenarioType,
    StepDefinition,
    action_choices,
    get_scenario,
    get_steps,
)
from rescue_drill.catalog.steps import (
    ABDOMINAL_THRUST,
    CHEST_COMPRESSION,
    COMPRESSIONS_REQUIRED,
    RESCUE_BREATH,
)


class TestScenarioType:
    """Tests for scenario name parsing."""

    def test_parse_is_case_insensitive(self):
        assert ScenarioType.parse("CPR") == ScenarioType.CPR
        assert ScenarioType.parse(" heimlich ") == ScenarioType.HEIMLICH

    def test_parse_passes_enum_through(self):
        assert ScenarioType.parse(ScenarioType.HEIMLICH) is ScenarioType.HEIMLICH

    def test_unknown_scenario_raises(self):
        with pytest.raises(InvalidScenario):
            ScenarioType.parse("first-aid")

    def test_invalid_scenario_is_a_value_error(self):
        with pytest.raises(ValueError):
            get_scenario("drowning")


class TestCprSteps:
    """Tests for the CPR step list."""

    def test_step_order(self):
        ids = [s.id for s in get_steps(ScenarioType.CPR)]
        assert ids == ["check-consciousness", "call-help", "position", "compression", "ventilation"]

    def test_base_points_total_100(self):
        assert sum(s.base_points for s in get_steps("cpr")) == 100

    def test_compression_step_requires_thirty(self):
        step = get_steps("cpr")[3]
        assert step.required_actions == frozenset({"chest-compression-30"})
        assert COMPRESSIONS_REQUIRED == 30

    def test_session_budget_is_five_minutes(self):
        assert get_scenario("cpr").session_budget_seconds == 300

    def test_overtime_factor(self):
        assert get_scenario("cpr").overtime_factor == pytest.approx(0.7)


class TestHeimlichSteps:
    """Tests for the Heimlich step list."""

    def test_step_order(self):
        ids = [s.id for s in get_steps(ScenarioType.HEIMLICH)]
        assert ids == ["identify-choking", "position-behind", "hand-position", "abdominal-thrust"]

    def test_every_step_worth_25(self):
        assert all(s.base_points == 25 for s in get_steps("heimlich"))

    def test_session_budget_is_seven_minutes(self):
        assert get_scenario("heimlich").session_budget_seconds == 420

    def test_overtime_factor(self):
        assert get_scenario("heimlich").overtime_factor == pytest.approx(0.8)


class TestStepDefinition:
    """Tests for step authoring validation."""

    def test_empty_requirements_rejected(self):
        with pytest.raises(ValueError):
            StepDefinition(
                id="empty",
                name="Empty",
                description="",
                instruction_text="",
                required_actions=frozenset(),
                base_points=10,
            )

    def test_requirements_coerced_to_frozenset(self):
        step = StepDefinition(
            id="s",
            name="S",
            description="",
            instruction_text="",
            required_actions={"a", "b"},
            base_points=10,
        )
        assert isinstance(step.required_actions, frozenset)


class TestActionChoices:
    """Tests for mapping requirements to performable actions."""

    def test_plain_requirements_are_their_own_actions(self):
        profile = get_scenario("cpr")
        assert action_choices(profile.steps[0], profile) == ["shout", "tap-shoulder"]

    def test_counted_requirements_map_to_raw_action(self):
        cpr = get_scenario("cpr")
        heimlich = get_scenario("heimlich")
        assert action_choices(cpr.steps[3], cpr) == [CHEST_COMPRESSION]
        assert action_choices(cpr.steps[4], cpr) == [RESCUE_BREATH]
        assert action_choices(heimlich.steps[3], heimlich) == [ABDOMINAL_THRUST]
