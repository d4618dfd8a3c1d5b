"""
Scripted learner for demos and end-to-end tests.

Plays a whole session against a ManualScheduler: answers every knowledge
question, reads the instructions, performs the required actions at a steady
pace and lets virtual time pass between inputs. Nothing sleeps; the clock
only moves through the scheduler.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from rescue_drill.catalog.steps import COMPRESSION_STEP_ID, action_choices
from rescue_drill.training.scheduler import ManualScheduler
from rescue_drill.training.session import SessionController, SessionResult
from rescue_drill.training.state import Phase


@dataclass
class ScriptedLearner:
    """
    A learner who knows the material.

    Attributes:
        think_seconds: Time taken to answer each question
        reading_seconds: Time spent on each instruction screen
        action_gap_seconds: Pause before each non-compression action
        compression_rate: Compressions per minute during the compression step
        miss_first_answer: Answer the first question of every step wrongly
        stall: Stop acting at the last step and let the session clock run out
    """

    controller: SessionController
    scheduler: ManualScheduler
    think_seconds: float = 2.0
    reading_seconds: float = 3.0
    action_gap_seconds: float = 1.0
    compression_rate: float = 110.0
    miss_first_answer: bool = False
    stall: bool = False

    def run(self) -> SessionResult:
        controller = self.controller
        while not controller.terminal:
            phase = controller.state.phase
            if phase == Phase.KNOWLEDGE:
                self._take_knowledge_test()
            elif phase == Phase.INSTRUCTION:
                self.scheduler.advance(self.reading_seconds)
                controller.start_practice()
            elif self.stall and controller.state.is_last_step:
                logger.info(f"Learner stalls at {controller.current_step.id}")
                self._wait_out_clock()
            else:
                self._practice()
        return controller.result

    def _take_knowledge_test(self) -> None:
        controller = self.controller
        step_index = controller.state.current_step_index
        controller.begin_knowledge()
        first = True
        while (
            not controller.terminal
            and controller.state.phase == Phase.KNOWLEDGE
            and controller.state.current_step_index == step_index
        ):
            if controller.quiz.is_presenting:
                self.scheduler.advance(self.think_seconds)
                question = controller.quiz.question
                if question is None or not controller.quiz.is_presenting:
                    continue
                choice = question.correct_option_index
                if self.miss_first_answer and first:
                    choice = (choice + 1) % len(question.options)
                first = False
                controller.submit_answer(choice)
            else:
                self._advance_to_next_timer()

    def _practice(self) -> None:
        controller = self.controller
        step = controller.current_step
        if step.id == COMPRESSION_STEP_ID:
            gap = 60.0 / self.compression_rate
        else:
            gap = self.action_gap_seconds

        for action in action_choices(step, controller.profile):
            counted = controller.profile.counted_actions.get(action)
            repeats = counted.threshold if counted else 1
            for _ in range(repeats):
                self.scheduler.advance(gap)
                if controller.terminal or controller.current_step is not step:
                    return
                controller.record_action(action)

    def _wait_out_clock(self) -> None:
        while not self.controller.terminal:
            self._advance_to_next_timer()

    def _advance_to_next_timer(self) -> None:
        due = self.scheduler.next_due()
        if due is None:
            raise RuntimeError("Session is waiting on a timer but none is scheduled")
        self.scheduler.advance_to(due)
