"""
Action Tracker for the practice phase.

Folds discrete learner actions into step-specific counters and decides when
a step's requirements are met. The tracker never changes phase; it reports
step_satisfied and the session controller acts on it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from rescue_drill.catalog.models import ActionId, ScenarioProfile, StepDefinition
from rescue_drill.catalog.steps import CHEST_COMPRESSION


@dataclass(frozen=True)
class ActionReport:
    """Outcome of recording one action."""

    action_id: ActionId
    counters_snapshot: dict[ActionId, int]
    completed_actions: frozenset[ActionId]
    step_satisfied: bool
    newly_completed: frozenset[ActionId] = field(default_factory=frozenset)
    compression_rate: float | None = None  # only set for compressions


def compression_rate(count: int, elapsed_seconds: float) -> float:
    """Compressions per minute since the step started."""
    if elapsed_seconds <= 0:
        return 0.0
    return count / (elapsed_seconds / 60.0)


class ActionTracker:
    """Evaluates learner actions against a scenario's requirements."""

    def __init__(self, profile: ScenarioProfile):
        self.profile = profile

    def is_counted(self, action_id: ActionId) -> bool:
        return action_id in self.profile.counted_actions

    def is_satisfied(self, step: StepDefinition, completed: frozenset[ActionId] | set[ActionId]) -> bool:
        return step.required_actions <= set(completed)

    def record(
        self,
        step: StepDefinition,
        action_id: ActionId,
        completed_actions: frozenset[ActionId] | set[ActionId],
        counters: Mapping[ActionId, int],
        elapsed_seconds: float,
    ) -> ActionReport:
        """
        Work out the effect of one action without touching session state.

        Args:
            step: Step currently in practice
            action_id: Raw action performed by the learner
            completed_actions: Requirements already met this step
            counters: Current counted-action totals this step
            elapsed_seconds: Time since practice started for this step

        Returns:
            ActionReport with the updated snapshot the caller should apply
        """
        completed = set(completed_actions)
        new_counters = dict(counters)
        rate = None

        counted = self.profile.counted_actions.get(action_id)
        if counted is not None:
            count = new_counters.get(action_id, 0) + 1
            new_counters[action_id] = count
            if count >= counted.threshold:
                completed.add(counted.satisfies)
            if action_id == CHEST_COMPRESSION:
                rate = compression_rate(count, elapsed_seconds)
        else:
            completed.add(action_id)

        newly = frozenset(completed - set(completed_actions))
        return ActionReport(
            action_id=action_id,
            counters_snapshot=new_counters,
            completed_actions=frozenset(completed),
            step_satisfied=self.is_satisfied(step, completed),
            newly_completed=newly,
            compression_rate=rate,
        )

    def remaining(self, step: StepDefinition, completed: frozenset[ActionId] | set[ActionId]) -> list[ActionId]:
        """Requirements of the step not yet met, sorted for display."""
        return sorted(step.required_actions - set(completed))
