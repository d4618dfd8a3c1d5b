"""
Session Controller: the training state machine.

Per step:  KNOWLEDGE -> INSTRUCTION -> PRACTICE -> next step's KNOWLEDGE | COMPLETE
Globally:  any state -> EXPIRED when the session countdown reaches zero

The controller is the single owner of SessionState. The quiz engine, action
tracker and scoring engine return outcomes; only this class applies them.
Every learner event and timer callback runs under one lock, and every timer
callback carries the identity of the phase that scheduled it so late
callbacks are dropped instead of mutating a newer phase.
"""

from __future__ import annotations

import functools
import random
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from config import Settings, get_settings
from rescue_drill.catalog.models import ActionId, QuizQuestion, ScenarioType, StepDefinition
from rescue_drill.catalog.questions import (
    DEFAULT_QUESTION_BANK,
    QuestionSource,
    pick_review_question,
    select_questions_for_step,
)
from rescue_drill.catalog.steps import KNOWLEDGE_BONUS_POINTS, get_scenario
from rescue_drill.delivery.result_sink import LoggingResultSink, ResultSink
from rescue_drill.training.action_tracker import ActionReport, ActionTracker
from rescue_drill.training.quiz_engine import (
    AnswerOutcome,
    GateDecision,
    KnowledgeGate,
    QuizEngine,
    QuizFlavor,
    QuizState,
)
from rescue_drill.training.scheduler import Scheduler, SerializedScheduler, TimerHandle
from rescue_drill.training.scoring import (
    ActionQuality,
    performance_label,
    round_half_up,
    score_step,
    summarize,
)
from rescue_drill.training.state import (
    IncompleteStep,
    Phase,
    SessionOutcome,
    SessionState,
    StepResult,
)


class SessionEventType(str, Enum):
    """Notifications raised for UI refresh."""

    QUIZ_PRESENTED = "quiz_presented"
    QUIZ_ANSWERED = "quiz_answered"
    PHASE_CHANGED = "phase_changed"
    STEP_COMPLETED = "step_completed"
    TICK = "tick"
    SESSION_FINISHED = "session_finished"


@dataclass(frozen=True)
class SessionEvent:
    type: SessionEventType
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionResult:
    """Final score breakdown handed to the result sink."""

    scenario_type: ScenarioType
    practice_score: int
    knowledge_bonus: int
    time_expired: bool
    step_results: tuple[StepResult, ...]
    duration_seconds: int
    incomplete_step: IncompleteStep | None = None

    @property
    def total(self) -> int:
        return self.practice_score + self.knowledge_bonus

    @property
    def label(self) -> str:
        return performance_label(self.total)


def _serialized(method):
    """Run a public entry point under the controller lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class SessionController:
    """
    Drives one learner through a scenario.

    Usage:
        controller = SessionController(ScenarioType.CPR, scheduler)
        controller.begin_knowledge()
        controller.submit_answer(1)
        ...
        controller.start_practice()
        controller.record_action("tap-shoulder")
    """

    def __init__(
        self,
        scenario_type: ScenarioType | str,
        scheduler: Scheduler,
        *,
        question_source: QuestionSource | None = None,
        result_sink: ResultSink | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        on_change: Callable[[SessionEvent], None] | None = None,
    ):
        self.profile = get_scenario(scenario_type)
        self.settings = settings or get_settings()
        self.question_source = DEFAULT_QUESTION_BANK if question_source is None else question_source
        self.result_sink = result_sink or LoggingResultSink()
        self.rng = rng or random.Random(self.settings.review_quiz_seed)
        self.on_change = on_change

        self._lock = threading.RLock()
        self.scheduler = SerializedScheduler(scheduler, self._lock)
        self.tracker = ActionTracker(self.profile)
        self.quiz = QuizEngine(
            self.scheduler,
            on_answered=self._on_answered,
            knowledge_seconds=self.settings.knowledge_quiz_seconds,
            review_seconds=self.settings.review_quiz_seconds,
        )

        self._generation = 0
        self._pools: dict[str, tuple[QuizQuestion, ...]] = {}
        self._gate: KnowledgeGate | None = None
        self._dwell: TimerHandle | None = None
        self._submitted = False
        self.result: SessionResult | None = None
        self.state = SessionState.fresh(self.profile)

        logger.debug(f"Session created for {self.profile.scenario_type.value}")

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def current_step(self) -> StepDefinition:
        return self.state.current_step

    @property
    def terminal(self) -> bool:
        return self.state.terminal

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def knowledge_gate(self) -> KnowledgeGate | None:
        return self._gate

    def remaining_requirements(self) -> list[ActionId]:
        return self.tracker.remaining(self.current_step, self.state.completed_actions)

    def practice_elapsed(self) -> float:
        if self.state.step_started_at is None:
            return 0.0
        return self.scheduler.now() - self.state.step_started_at

    # =========================================================================
    # Learner events
    # =========================================================================

    @_serialized
    def begin_knowledge(self) -> None:
        """Start the current step's knowledge test (and the session clock)."""
        state = self.state
        if state.terminal or state.phase != Phase.KNOWLEDGE:
            logger.debug("begin_knowledge ignored: not in knowledge phase")
            return
        if self._gate is not None or self.quiz.state != QuizState.IDLE:
            logger.debug("begin_knowledge ignored: knowledge test already running")
            return

        if state.session_started_at is None:
            state.session_started_at = self.scheduler.now()
            self._start_global_timer()

        step = state.current_step
        pool = self._pool_for(step.id)
        knowledge = state.knowledge_for(step.id)
        if not pool:
            logger.info(f"No questions for {step.id}; skipping knowledge test")
            knowledge.passed = True
            self._enter_phase(Phase.INSTRUCTION)
            return

        self._gate = KnowledgeGate(step.id, pool)
        logger.info(f"Knowledge test started for {step.id} ({len(pool)} questions)")
        self._present(self._gate.current, QuizFlavor.KNOWLEDGE)

    @_serialized
    def submit_answer(self, option_index: int) -> AnswerOutcome | None:
        """Answer the question on screen; ignored if nothing is presenting."""
        if self.state.terminal:
            logger.debug("submit_answer ignored: session is over")
            return None
        return self.quiz.submit_answer(option_index)

    @_serialized
    def start_practice(self) -> None:
        """Leave instruction and start the hands-on practice clock."""
        state = self.state
        if state.terminal or state.phase != Phase.INSTRUCTION:
            logger.debug(f"start_practice ignored in phase {state.phase.value}")
            return
        state.reset_step_transients()
        state.step_started_at = self.scheduler.now()
        self._enter_phase(Phase.PRACTICE)

    @_serialized
    def record_action(self, action_id: ActionId) -> ActionReport | None:
        """
        Record one learner action during practice.

        Returns:
            ActionReport, or None when the action was ignored
        """
        state = self.state
        if state.terminal or state.phase != Phase.PRACTICE:
            logger.debug(f"Action {action_id} ignored outside practice")
            return None
        if self.quiz.state != QuizState.IDLE:
            logger.debug(f"Action {action_id} ignored while a review quiz is open")
            return None

        elapsed = self.practice_elapsed()
        report = self.tracker.record(
            state.current_step,
            action_id,
            state.completed_actions,
            state.action_counters,
            elapsed,
        )
        state.completed_actions = set(report.completed_actions)
        state.action_counters = dict(report.counters_snapshot)
        if report.compression_rate is not None:
            state.compression_rate = report.compression_rate

        if report.step_satisfied:
            self._complete_step(elapsed)
        return report

    @_serialized
    def start_review_quiz(self) -> QuizQuestion | None:
        """Pop a random 5-second review question during practice (bonus only)."""
        state = self.state
        if state.terminal or state.phase != Phase.PRACTICE:
            logger.debug("Review quiz ignored outside practice")
            return None
        if self.quiz.state != QuizState.IDLE:
            return None
        question = pick_review_question(self._pool_for(state.current_step.id), self.rng)
        if question is None:
            logger.debug(f"No review questions for {state.current_step.id}")
            return None
        self._present(question, QuizFlavor.REVIEW)
        return question

    @_serialized
    def reset(self) -> None:
        """Cancel every timer and start over with a fresh state."""
        self._cancel_timers()
        self._generation += 1
        self._pools.clear()
        self._gate = None
        self._submitted = False
        self.result = None
        self.state = SessionState.fresh(self.profile)
        logger.info(f"Session reset ({self.profile.scenario_type.value})")
        self._emit(SessionEventType.PHASE_CHANGED, phase=Phase.KNOWLEDGE, step_index=0)

    # =========================================================================
    # Quiz flow
    # =========================================================================

    def _present(self, question: QuizQuestion, flavor: QuizFlavor) -> None:
        self.quiz.present(question, flavor)
        self._emit(
            SessionEventType.QUIZ_PRESENTED,
            question=question,
            flavor=flavor,
            seconds=self.quiz.seconds_left,
        )

    def _on_answered(self, outcome: AnswerOutcome) -> None:
        state = self.state
        step_id = state.current_step.id
        self._emit(SessionEventType.QUIZ_ANSWERED, outcome=outcome)

        if outcome.flavor == QuizFlavor.REVIEW:
            if outcome.correct:
                state.review_bonus[step_id] = (
                    state.review_bonus.get(step_id, 0) + KNOWLEDGE_BONUS_POINTS
                )
            self._dwell = self.scheduler.call_later(
                self._dwell_for(outcome), self._after_review_dwell, self._phase_key()
            )
            return

        knowledge = state.knowledge_for(step_id)
        if outcome.correct:
            knowledge.bonus_points += KNOWLEDGE_BONUS_POINTS
            knowledge.passed = True
        decision = self._gate.record(outcome)
        self._dwell = self.scheduler.call_later(
            self._dwell_for(outcome), self._after_knowledge_dwell, self._phase_key(), decision
        )

    def _after_knowledge_dwell(self, key: tuple, decision: GateDecision) -> None:
        if key != self._phase_key():
            logger.debug("Discarding stale knowledge dwell")
            return
        self._dwell = None
        self.quiz.acknowledge()

        if decision == GateDecision.PASSED:
            logger.info(
                f"Knowledge gate passed for {self._gate.step_id} "
                f"(+{self.state.knowledge_for(self._gate.step_id).bonus_points})"
            )
            self._gate = None
            self._enter_phase(Phase.INSTRUCTION)
            return
        self._present(self._gate.current, QuizFlavor.KNOWLEDGE)

    def _after_review_dwell(self, key: tuple) -> None:
        if key != self._phase_key():
            logger.debug("Discarding stale review dwell")
            return
        self._dwell = None
        self.quiz.acknowledge()

    def _dwell_for(self, outcome: AnswerOutcome) -> float:
        if outcome.correct:
            return self.settings.correct_answer_dwell_seconds
        return self.settings.incorrect_answer_dwell_seconds

    # =========================================================================
    # Step and session transitions
    # =========================================================================

    def _complete_step(self, elapsed: float) -> None:
        state = self.state
        step = state.current_step
        score = score_step(
            step,
            elapsed,
            ActionQuality(compression_rate=state.compression_rate),
            state.scenario_type,
        )
        result = StepResult(
            step_id=step.id,
            time_spent_seconds=round_half_up(elapsed),
            score=score,
            quiz_bonus=state.bonus_for(step.id),
        )
        state.step_results.append(result)
        logger.info(
            f"Step {step.id} complete in {result.time_spent_seconds}s: "
            f"score={result.score} bonus={result.quiz_bonus}"
        )
        self._emit(SessionEventType.STEP_COMPLETED, result=result)

        state.reset_step_transients()
        if state.is_last_step:
            self._finish(SessionOutcome.COMPLETE)
            return
        state.current_step_index += 1
        self._enter_phase(Phase.KNOWLEDGE)

    def _enter_phase(self, phase: Phase) -> None:
        self.state.phase = phase
        logger.info(
            f"Step {self.state.current_step_index + 1}/{len(self.state.steps)} "
            f"({self.state.current_step.id}) -> {phase.value}"
        )
        self._emit(
            SessionEventType.PHASE_CHANGED,
            phase=phase,
            step_index=self.state.current_step_index,
        )

    def _start_global_timer(self) -> None:
        self.state.global_timer = self.scheduler.call_later(
            self.settings.global_tick_seconds, self._tick, self._generation
        )

    def _tick(self, generation: int) -> None:
        state = self.state
        if generation != self._generation or state.terminal:
            logger.debug(f"Discarding stale session tick (generation {generation})")
            return
        state.total_time_remaining_seconds = max(0, state.total_time_remaining_seconds - 1)
        self._emit(SessionEventType.TICK, remaining=state.total_time_remaining_seconds)

        if state.total_time_remaining_seconds <= 0:
            state.global_timer = None
            self._expire()
            return
        self._start_global_timer()

    def _expire(self) -> None:
        state = self.state
        step = state.current_step
        incomplete = IncompleteStep(
            step_id=step.id,
            phase=state.phase,
            time_spent_seconds=round_half_up(self.practice_elapsed()),
            bonus_earned=state.bonus_for(step.id),
        )
        logger.warning(f"Session time expired during {step.id} ({state.phase.value})")
        self._finish(SessionOutcome.EXPIRED, incomplete)

    def _finish(self, outcome: SessionOutcome, incomplete: IncompleteStep | None = None) -> None:
        state = self.state
        state.outcome = outcome
        self._cancel_timers()

        summary = summarize(state.step_results)
        started = state.session_started_at
        duration = round_half_up(self.scheduler.now() - started) if started is not None else 0
        self.result = SessionResult(
            scenario_type=state.scenario_type,
            practice_score=summary.practice_score,
            knowledge_bonus=summary.knowledge_bonus,
            time_expired=outcome == SessionOutcome.EXPIRED,
            step_results=tuple(state.step_results),
            duration_seconds=duration,
            incomplete_step=incomplete,
        )
        logger.info(
            f"Session {outcome.value}: practice={summary.practice_score} "
            f"knowledge={summary.knowledge_bonus} total={summary.total}"
        )
        self._emit(SessionEventType.SESSION_FINISHED, result=self.result)
        self._submit()

    def _submit(self) -> None:
        if self._submitted:
            return
        self._submitted = True
        result = self.result
        try:
            self.result_sink.submit(
                result.scenario_type,
                result.practice_score,
                result.knowledge_bonus,
                result.time_expired,
                result.step_results,
                duration_seconds=result.duration_seconds,
            )
        except Exception as e:
            logger.warning(f"Result submission failed: {e}")

    def _cancel_timers(self) -> None:
        if self.state.global_timer is not None:
            self.state.global_timer.cancel()
            self.state.global_timer = None
        if self._dwell is not None:
            self._dwell.cancel()
            self._dwell = None
        self.quiz.cancel()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _pool_for(self, step_id: str) -> tuple[QuizQuestion, ...]:
        if step_id not in self._pools:
            self._pools[step_id] = select_questions_for_step(step_id, self.question_source)
        return self._pools[step_id]

    def _phase_key(self) -> tuple:
        return (
            self._generation,
            self.state.current_step_index,
            self.state.phase,
            self.quiz.presentation_id,
        )

    def _emit(self, event_type: SessionEventType, **data: Any) -> None:
        if self.on_change is not None:
            self.on_change(SessionEvent(event_type, data))
