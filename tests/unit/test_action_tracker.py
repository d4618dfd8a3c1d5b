"""
Unit tests for the practice-phase action tracker.
"""

import pytest

from rescue_drill.catalog import get_scenario
from rescue_drill.catalog.steps import (
    ABDOMINAL_THRUST,
    CHEST_COMPRESSION,
    CHEST_COMPRESSIONS_DONE,
    RESCUE_BREATH,
    THRUSTS_DONE,
)
from rescue_drill.training.action_tracker import ActionTracker, compression_rate


@pytest.fixture
def cpr():
    return get_scenario("cpr")


@pytest.fixture
def heimlich():
    return get_scenario("heimlich")


def _perform(tracker, step, action, times, elapsed=10.0):
    completed, counters, report = set(), {}, None
    for _ in range(times):
        report = tracker.record(step, action, completed, counters, elapsed)
        completed, counters = set(report.completed_actions), report.counters_snapshot
    return report


class TestCompressionRate:
    """Tests for the compressions-per-minute formula."""

    def test_rate_per_minute(self):
        assert compression_rate(30, 18.0) == pytest.approx(100.0)

    def test_zero_elapsed_gives_zero(self):
        assert compression_rate(1, 0.0) == 0.0


class TestSimpleActions:
    """Tests for one-shot actions."""

    def test_one_action_is_not_enough(self, cpr):
        tracker = ActionTracker(cpr)
        report = tracker.record(cpr.steps[0], "tap-shoulder", set(), {}, 1.0)

        assert report.completed_actions == frozenset({"tap-shoulder"})
        assert report.newly_completed == frozenset({"tap-shoulder"})
        assert not report.step_satisfied

    def test_both_actions_satisfy_step(self, cpr):
        tracker = ActionTracker(cpr)
        first = tracker.record(cpr.steps[0], "tap-shoulder", set(), {}, 1.0)
        second = tracker.record(cpr.steps[0], "shout", first.completed_actions, {}, 2.0)

        assert second.step_satisfied
        assert tracker.remaining(cpr.steps[0], second.completed_actions) == []

    def test_repeated_action_is_idempotent(self, cpr):
        tracker = ActionTracker(cpr)
        report = _perform(tracker, cpr.steps[0], "shout", 3)

        assert report.completed_actions == frozenset({"shout"})
        assert report.newly_completed == frozenset()

    def test_unrequired_action_does_not_satisfy(self, cpr):
        tracker = ActionTracker(cpr)
        report = tracker.record(cpr.steps[0], "open-airway", set(), {}, 1.0)

        assert not report.step_satisfied
        assert tracker.remaining(cpr.steps[0], report.completed_actions) == ["shout", "tap-shoulder"]

    def test_record_does_not_mutate_inputs(self, cpr):
        tracker = ActionTracker(cpr)
        completed, counters = set(), {}
        tracker.record(cpr.steps[3], CHEST_COMPRESSION, completed, counters, 1.0)

        assert completed == set()
        assert counters == {}


class TestCountedActions:
    """Tests for thresholded actions."""

    def test_four_thrusts_not_enough(self, heimlich):
        report = _perform(ActionTracker(heimlich), heimlich.steps[3], ABDOMINAL_THRUST, 4)

        assert report.counters_snapshot[ABDOMINAL_THRUST] == 4
        assert not report.step_satisfied

    def test_fifth_thrust_satisfies(self, heimlich):
        report = _perform(ActionTracker(heimlich), heimlich.steps[3], ABDOMINAL_THRUST, 5)

        assert report.step_satisfied
        assert THRUSTS_DONE in report.newly_completed

    def test_thirty_compressions_satisfy(self, cpr):
        tracker = ActionTracker(cpr)
        assert not _perform(tracker, cpr.steps[3], CHEST_COMPRESSION, 29).step_satisfied

        report = _perform(tracker, cpr.steps[3], CHEST_COMPRESSION, 30, elapsed=16.0)
        assert report.step_satisfied
        assert CHEST_COMPRESSIONS_DONE in report.completed_actions

    def test_compression_reports_rate(self, cpr):
        report = _perform(ActionTracker(cpr), cpr.steps[3], CHEST_COMPRESSION, 30, elapsed=18.0)
        assert report.compression_rate == pytest.approx(100.0)

    def test_other_counted_actions_report_no_rate(self, cpr):
        report = _perform(ActionTracker(cpr), cpr.steps[4], RESCUE_BREATH, 2)

        assert report.step_satisfied
        assert report.compression_rate is None

    def test_is_counted(self, cpr):
        tracker = ActionTracker(cpr)
        assert tracker.is_counted(CHEST_COMPRESSION)
        assert not tracker.is_counted("shout")
