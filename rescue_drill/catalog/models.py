"""
Catalog data models.

Steps and questions are hand-authored and immutable once loaded.
Authoring mistakes fail loudly at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rescue_drill import RescueDrillError

ActionId = str


class InvalidScenario(RescueDrillError, ValueError):
    """Raised when the catalog is asked for a scenario it does not know."""


class ScenarioType(str, Enum):
    """Trainable emergency procedures."""

    CPR = "cpr"
    HEIMLICH = "heimlich"

    @classmethod
    def parse(cls, value: str | ScenarioType) -> ScenarioType:
        """Resolve a scenario from its name, case-insensitively."""
        if isinstance(value, ScenarioType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidScenario(f"Unknown scenario type: {value!r}") from None


@dataclass(frozen=True)
class StepDefinition:
    """One ordered sub-task of a scenario."""

    id: str
    name: str
    description: str
    instruction_text: str
    required_actions: frozenset[ActionId]
    base_points: int
    time_limit_seconds: int | None = None
    video_path: str | None = None

    def __post_init__(self) -> None:
        if not self.required_actions:
            raise ValueError(f"Step {self.id!r} must require at least one action")
        # Accept any iterable at authoring time, store a frozenset
        if not isinstance(self.required_actions, frozenset):
            object.__setattr__(self, "required_actions", frozenset(self.required_actions))


@dataclass(frozen=True)
class QuizQuestion:
    """A multiple-choice question attached to a step."""

    id: str
    step_id: str
    prompt_text: str
    options: tuple[str, ...]
    correct_option_index: int
    explanation_text: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.options, tuple):
            object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) < 2:
            raise ValueError(f"Question {self.id!r} needs at least two options")
        if not 0 <= self.correct_option_index < len(self.options):
            raise ValueError(
                f"Question {self.id!r}: correct index {self.correct_option_index} "
                f"out of range for {len(self.options)} options"
            )

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_option_index]

    def is_correct(self, option_index: int) -> bool:
        return option_index == self.correct_option_index


@dataclass(frozen=True)
class CountedAction:
    """A repeated learner action that satisfies a requirement at a threshold."""

    action_id: ActionId  # raw action the learner performs
    threshold: int
    satisfies: ActionId  # requirement id listed in StepDefinition.required_actions


@dataclass(frozen=True)
class ScenarioProfile:
    """Everything the engine needs to know about one scenario."""

    scenario_type: ScenarioType
    title: str
    steps: tuple[StepDefinition, ...]
    session_budget_seconds: int
    overtime_factor: float
    counted_actions: dict[ActionId, CountedAction] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ids = [step.id for step in self.steps]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate step ids in scenario {self.scenario_type.value}")

    def step_index(self, step_id: str) -> int:
        for i, step in enumerate(self.steps):
            if step.id == step_id:
                return i
        raise KeyError(step_id)
