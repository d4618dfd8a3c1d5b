"""
Quiz Engine for knowledge gates and practice-review pop quizzes.

Presents one question at a time under a hard countdown:

    IDLE -> PRESENTING -> ANSWERED -> (IDLE | PRESENTING[next])

Two flavors share the engine:
- KNOWLEDGE: gates a step, 15s per question, walked in catalog order
- REVIEW: optional pop quiz during practice, 5s, bonus-only

Countdown expiry counts as an answer with the timeout sentinel (-1).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from rescue_drill.catalog.models import QuizQuestion
from rescue_drill.catalog.steps import KNOWLEDGE_BONUS_POINTS
from rescue_drill.training.scheduler import Scheduler, TimerHandle

TIMEOUT_INDEX = -1


class QuizState(str, Enum):
    """Presentation state of the engine."""

    IDLE = "idle"
    PRESENTING = "presenting"
    ANSWERED = "answered"


class QuizFlavor(str, Enum):
    """Why a question is being asked."""

    KNOWLEDGE = "knowledge"
    REVIEW = "review"


@dataclass(frozen=True)
class AnswerOutcome:
    """Result of one presented question."""

    question_id: str
    correct: bool
    chosen_index: int
    correct_index: int
    explanation: str
    flavor: QuizFlavor

    @property
    def timed_out(self) -> bool:
        return self.chosen_index == TIMEOUT_INDEX


class QuizEngine:
    """
    Single-question presenter with a cancelable countdown.

    The engine owns only its presentation state. Outcomes are handed to the
    on_answered listener, which decides what happens next.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_answered: Callable[[AnswerOutcome], None] | None = None,
        knowledge_seconds: int = 15,
        review_seconds: int = 5,
    ):
        self.scheduler = scheduler
        self.on_answered = on_answered
        self.time_limits = {
            QuizFlavor.KNOWLEDGE: knowledge_seconds,
            QuizFlavor.REVIEW: review_seconds,
        }

        self.state = QuizState.IDLE
        self.question: QuizQuestion | None = None
        self.flavor: QuizFlavor | None = None
        self.seconds_left = 0
        self.last_outcome: AnswerOutcome | None = None

        self._presentation = 0
        self._timer: TimerHandle | None = None

    @property
    def presentation_id(self) -> int:
        """Identity of the current presentation; bumps on every present/cancel."""
        return self._presentation

    @property
    def is_presenting(self) -> bool:
        return self.state == QuizState.PRESENTING

    def present(self, question: QuizQuestion, flavor: QuizFlavor = QuizFlavor.KNOWLEDGE) -> None:
        """Show a question and start its countdown."""
        self._stop_timer()
        self._presentation += 1
        self.state = QuizState.PRESENTING
        self.question = question
        self.flavor = flavor
        self.seconds_left = self.time_limits[flavor]
        self.last_outcome = None
        self._timer = self.scheduler.call_later(1.0, self._tick, self._presentation)
        logger.debug(
            f"Presenting {flavor.value} question {question.id} ({self.seconds_left}s)"
        )

    def submit_answer(self, option_index: int) -> AnswerOutcome | None:
        """
        Answer the question on screen.

        Outside PRESENTING this is a no-op (double clicks, late answers).
        """
        if self.state != QuizState.PRESENTING:
            logger.debug(f"Ignoring answer {option_index}: quiz is {self.state.value}")
            return None
        return self._resolve(option_index)

    def acknowledge(self) -> None:
        """Dismiss an answered question."""
        if self.state == QuizState.ANSWERED:
            self.state = QuizState.IDLE
            self.question = None
            self.flavor = None

    def cancel(self) -> None:
        """Abandon whatever is on screen; pending ticks become stale."""
        self._stop_timer()
        self._presentation += 1
        self.state = QuizState.IDLE
        self.question = None
        self.flavor = None
        self.seconds_left = 0

    def _tick(self, presentation_id: int) -> None:
        if presentation_id != self._presentation or self.state != QuizState.PRESENTING:
            logger.debug(f"Discarding stale quiz tick for presentation {presentation_id}")
            return
        self.seconds_left -= 1
        if self.seconds_left <= 0:
            self._timer = None
            logger.info(f"Question {self.question.id} timed out")
            self._resolve(TIMEOUT_INDEX)
            return
        self._timer = self.scheduler.call_later(1.0, self._tick, presentation_id)

    def _resolve(self, option_index: int) -> AnswerOutcome:
        self._stop_timer()
        question = self.question
        outcome = AnswerOutcome(
            question_id=question.id,
            correct=question.is_correct(option_index),
            chosen_index=option_index,
            correct_index=question.correct_option_index,
            explanation=question.explanation_text,
            flavor=self.flavor,
        )
        self.state = QuizState.ANSWERED
        self.last_outcome = outcome
        logger.debug(
            f"Question {question.id}: chose {option_index}, "
            f"{'correct' if outcome.correct else 'incorrect'}"
        )
        if self.on_answered is not None:
            self.on_answered(outcome)
        return outcome

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class GateDecision(str, Enum):
    """What the knowledge gate wants after an answer."""

    NEXT = "next"
    RESTART = "restart"
    PASSED = "passed"


class KnowledgeGate:
    """
    Sequencing rules for a step's knowledge test.

    The pool is walked in order. At the end of the pool the gate passes if
    any answer in this step was correct; with zero correct answers it starts
    over from the first question, so the gate cannot be worn down.
    """

    def __init__(self, step_id: str, pool: tuple[QuizQuestion, ...]):
        if not pool:
            raise ValueError(f"Knowledge gate for {step_id!r} needs at least one question")
        self.step_id = step_id
        self.pool = pool
        self.index = 0
        self.correct_count = 0
        self.answered_count = 0
        self.rounds = 1

    @property
    def current(self) -> QuizQuestion:
        return self.pool[self.index]

    @property
    def passed(self) -> bool:
        return self.correct_count > 0

    @property
    def bonus_points(self) -> int:
        return self.correct_count * KNOWLEDGE_BONUS_POINTS

    def record(self, outcome: AnswerOutcome) -> GateDecision:
        """Fold in an answer and decide the next move."""
        self.answered_count += 1
        if outcome.correct:
            self.correct_count += 1

        if self.index < len(self.pool) - 1:
            self.index += 1
            return GateDecision.NEXT
        if self.passed:
            return GateDecision.PASSED

        self.index = 0
        self.rounds += 1
        logger.info(f"No correct answers for {self.step_id}; restarting question pool")
        return GateDecision.RESTART
