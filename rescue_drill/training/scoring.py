"""
Scoring Engine.

Converts elapsed time and action quality into a per-step practical score,
then rolls step results into the session totals. Deterministic: the same
inputs always give the same score.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from rescue_drill.catalog.models import ScenarioType, StepDefinition
from rescue_drill.catalog.steps import (
    COMPRESSION_RATE_RANGE,
    COMPRESSION_STEP_ID,
    OFF_RATE_FACTOR,
    get_scenario,
)
from rescue_drill.training.state import StepResult


@dataclass(frozen=True)
class ActionQuality:
    """Measured quality of the actions performed in a step."""

    compression_rate: float = 0.0


@dataclass(frozen=True)
class ScoreSummary:
    """Session totals, kept separate so both can be displayed."""

    practice_score: int
    knowledge_bonus: int

    @property
    def total(self) -> int:
        return self.practice_score + self.knowledge_bonus


def round_half_up(value: float) -> int:
    """Round halves up: 10.5 -> 11."""
    return int(math.floor(value + 0.5))


def rate_in_range(rate: float) -> bool:
    """Check a rate against the target window in whole compressions per minute."""
    low, high = COMPRESSION_RATE_RANGE
    return low <= round_half_up(rate) <= high


def overtime_factor_for(step: StepDefinition, scenario_type: ScenarioType | str | None = None) -> float:
    """Penalty multiplier of the scenario a step belongs to."""
    if scenario_type is not None:
        return get_scenario(scenario_type).overtime_factor
    for candidate in ScenarioType:
        profile = get_scenario(candidate)
        if any(s.id == step.id for s in profile.steps):
            return profile.overtime_factor
    raise ValueError(f"Step {step.id!r} belongs to no scenario; pass scenario_type")


def score_step(
    step: StepDefinition,
    time_spent_seconds: float,
    action_quality: ActionQuality | None = None,
    scenario_type: ScenarioType | str | None = None,
) -> int:
    """
    Practical score for one completed step.

    Overtime multiplies the base by the scenario's factor. The compression
    step ignores overtime and is judged on rate alone: full points inside
    the 100-120/min window, OFF_RATE_FACTOR otherwise.
    """
    quality = action_quality or ActionQuality()
    base = float(step.base_points)

    if step.id == COMPRESSION_STEP_ID:
        if not rate_in_range(quality.compression_rate):
            base = step.base_points * OFF_RATE_FACTOR
    elif step.time_limit_seconds is not None and time_spent_seconds > step.time_limit_seconds:
        base *= overtime_factor_for(step, scenario_type)

    return round_half_up(base)


def summarize(step_results: Iterable[StepResult]) -> ScoreSummary:
    """Add up practical scores and quiz bonuses across completed steps."""
    results = list(step_results)
    return ScoreSummary(
        practice_score=sum(r.score for r in results),
        knowledge_bonus=sum(r.quiz_bonus for r in results),
    )


def performance_label(total: int) -> str:
    """Headline rating shown with the final score."""
    if total >= 90:
        return "Excellent"
    if total >= 70:
        return "Good"
    return "Needs Improvement"
