"""
Session state for one training run.

SessionState is owned exclusively by the SessionController. Other components
return outcomes; only the controller applies them here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rescue_drill.catalog.models import ActionId, ScenarioProfile, ScenarioType, StepDefinition
from rescue_drill.training.scheduler import TimerHandle


class Phase(str, Enum):
    """Sub-state of the current step."""

    KNOWLEDGE = "knowledge"
    INSTRUCTION = "instruction"
    PRACTICE = "practice"


class SessionOutcome(str, Enum):
    """How a session ended."""

    COMPLETE = "complete"
    EXPIRED = "expired"


@dataclass
class KnowledgeResult:
    """Knowledge gate result for one step."""

    passed: bool = False
    bonus_points: int = 0


@dataclass(frozen=True)
class StepResult:
    """Score record of a completed step. Never mutated after it is appended."""

    step_id: str
    time_spent_seconds: int
    score: int
    quiz_bonus: int

    @property
    def final_score(self) -> int:
        return self.score + self.quiz_bonus

    def to_dict(self) -> dict:
        return {
            "stepId": self.step_id,
            "timeSpent": self.time_spent_seconds,
            "score": self.score,
            "quizScore": self.quiz_bonus,
            "completed": True,
        }


@dataclass(frozen=True)
class IncompleteStep:
    """The step in progress when the global countdown ran out."""

    step_id: str
    phase: Phase
    time_spent_seconds: int
    bonus_earned: int


@dataclass
class SessionState:
    """Mutable state of one training session."""

    scenario_type: ScenarioType
    steps: tuple[StepDefinition, ...]
    total_time_remaining_seconds: int
    # Last active phase; frozen once outcome is set
    phase: Phase = Phase.KNOWLEDGE
    current_step_index: int = 0
    step_started_at: float | None = None
    completed_actions: set[ActionId] = field(default_factory=set)
    action_counters: dict[ActionId, int] = field(default_factory=dict)
    compression_rate: float = 0.0
    knowledge_results: dict[str, KnowledgeResult] = field(default_factory=dict)
    review_bonus: dict[str, int] = field(default_factory=dict)
    step_results: list[StepResult] = field(default_factory=list)
    session_started_at: float | None = None
    outcome: SessionOutcome | None = None
    global_timer: TimerHandle | None = None

    @classmethod
    def fresh(cls, profile: ScenarioProfile) -> SessionState:
        """Initial state for a scenario: step 0, full countdown budget."""
        return cls(
            scenario_type=profile.scenario_type,
            steps=profile.steps,
            total_time_remaining_seconds=profile.session_budget_seconds,
        )

    @property
    def terminal(self) -> bool:
        return self.outcome is not None

    @property
    def active_phase(self) -> Phase | None:
        """Phase the learner is in, or None once the session has ended."""
        return None if self.terminal else self.phase

    @property
    def current_step(self) -> StepDefinition:
        return self.steps[self.current_step_index]

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index == len(self.steps) - 1

    def knowledge_for(self, step_id: str) -> KnowledgeResult:
        return self.knowledge_results.setdefault(step_id, KnowledgeResult())

    def bonus_for(self, step_id: str) -> int:
        """Knowledge bonus plus any review pop-quiz bonus for a step."""
        knowledge = self.knowledge_results.get(step_id)
        return (knowledge.bonus_points if knowledge else 0) + self.review_bonus.get(step_id, 0)

    def reset_step_transients(self) -> None:
        self.completed_actions = set()
        self.action_counters = {}
        self.compression_rate = 0.0
        self.step_started_at = None
