"""
Question Bank.

Per-step pools of multiple-choice questions. Knowledge tests walk a pool in
catalog order so every learner sees the same sequence; only the practice
review pop quiz picks at random.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from typing import Protocol

from rescue_drill.catalog.models import QuizQuestion


class QuestionSource(Protocol):
    """Anything that can supply the question pool for a step."""

    def get_questions(self, step_id: str) -> Sequence[QuizQuestion]:
        ...


def _q(
    id: str,
    step_id: str,
    prompt: str,
    options: list[str],
    correct: int,
    explanation: str,
) -> QuizQuestion:
    return QuizQuestion(
        id=id,
        step_id=step_id,
        prompt_text=prompt,
        options=tuple(options),
        correct_option_index=correct,
        explanation_text=explanation,
    )


CPR_QUESTIONS: tuple[QuizQuestion, ...] = (
    _q(
        "consciousness-check-1",
        "check-consciousness",
        "When checking for consciousness, what should you do first?",
        [
            "Immediately start chest compressions",
            "Tap the patient's shoulders and shout loudly",
            "Check for a pulse",
            "Tilt the head back to open the airway",
        ],
        1,
        "Tap the patient's shoulders firmly and shout \"Are you okay?\" to find out "
        "whether the person is responsive and needs emergency care.",
    ),
    _q(
        "consciousness-check-2",
        "check-consciousness",
        "How long should you spend checking for consciousness?",
        ["Up to 2 minutes", "No more than 10 seconds", "At least 30 seconds", "1 minute"],
        1,
        "The check should take no more than 10 seconds. Prolonged assessment delays "
        "life-saving interventions.",
    ),
    _q(
        "call-help-1",
        "call-help",
        "What is the correct order of actions when calling for help?",
        [
            "Call 911, then get an AED if available",
            "Get an AED first, then call 911",
            "Start CPR, then call 911",
            "Check pulse, call 911, then get AED",
        ],
        0,
        "Call the emergency number immediately, then get an AED if one is available.",
    ),
    _q(
        "call-help-2",
        "call-help",
        "What information should you provide when calling for emergency help?",
        [
            "Only your location",
            "Only the patient's condition",
            "Location, nature of emergency, patient's condition, and your name",
            "Just that someone needs CPR",
        ],
        2,
        "Give the exact location, the nature of the emergency, the patient's condition "
        "and your name so dispatchers can send the right help.",
    ),
    _q(
        "position-1",
        "position",
        "What is the correct position for the patient during CPR?",
        [
            "On their side (recovery position)",
            "Sitting upright",
            "Supine (on their back) on a firm, flat surface",
            "Face down",
        ],
        2,
        "A firm, flat surface under a supine patient allows effective compressions.",
    ),
    _q(
        "position-2",
        "position",
        "How should you position the patient's head for effective CPR?",
        [
            "Head tilted to one side",
            "Head slightly tilted back with chin lifted",
            "Head in neutral position",
            "Head tilted forward",
        ],
        1,
        "The head-tilt, chin-lift maneuver opens the airway for ventilation.",
    ),
    _q(
        "compression-1",
        "compression",
        "What is the correct compression depth for adult CPR?",
        [
            "3-4 cm (1.2-1.6 inches)",
            "5-6 cm (2-2.4 inches)",
            "7-8 cm (2.8-3.2 inches)",
            "2-3 cm (0.8-1.2 inches)",
        ],
        1,
        "Compressions should be 5-6 cm deep for adults to keep blood moving to vital organs.",
    ),
    _q(
        "compression-2",
        "compression",
        "What is the correct compression rate for CPR?",
        [
            "80-100 compressions per minute",
            "100-120 compressions per minute",
            "120-140 compressions per minute",
            "60-80 compressions per minute",
        ],
        1,
        "100-120 compressions per minute gives optimal blood flow while allowing the "
        "chest to recoil.",
    ),
    _q(
        "compression-3",
        "compression",
        "Where should you place your hands for chest compressions?",
        [
            "Upper half of the breastbone",
            "Lower half of the breastbone (lower sternum)",
            "Over the left side of the chest",
            "Just below the ribcage",
        ],
        1,
        "Hands go on the lower half of the breastbone, between the nipples.",
    ),
    _q(
        "ventilation-1",
        "ventilation",
        "How long should each rescue breath take?",
        ["3-4 seconds", "1 second", "2 seconds", "5-6 seconds"],
        1,
        "Each breath takes about 1 second and should make the chest rise visibly.",
    ),
    _q(
        "ventilation-2",
        "ventilation",
        "What is the correct ratio of compressions to ventilations in adult CPR?",
        ["15:2", "30:2", "20:2", "10:1"],
        1,
        "Adult CPR uses 30 compressions to 2 ventilations.",
    ),
)

HEIMLICH_QUESTIONS: tuple[QuizQuestion, ...] = (
    _q(
        "choking-signs-1",
        "identify-choking",
        "What is the universal sign of choking?",
        [
            "Coughing loudly",
            "Hands clutched to the throat",
            "Waving hands frantically",
            "Pointing to the mouth",
        ],
        1,
        "Hands clutched to the throat is the widely recognized distress signal for choking.",
    ),
    _q(
        "choking-signs-2",
        "identify-choking",
        "Which of these indicates severe choking that requires immediate intervention?",
        [
            "Person can speak and cough forcefully",
            "Person cannot speak, cough, or breathe",
            "Person is coughing but can still talk",
            "Person is crying loudly",
        ],
        1,
        "Inability to speak, cough or breathe means a complete airway obstruction.",
    ),
    _q(
        "positioning-1",
        "position-behind",
        "Where should you position yourself when performing the Heimlich maneuver "
        "on a standing adult?",
        [
            "In front of the person",
            "To the side of the person",
            "Behind the person",
            "Above the person",
        ],
        2,
        "Standing behind lets you wrap your arms around the waist and thrust effectively.",
    ),
    _q(
        "positioning-2",
        "position-behind",
        "What should you tell the choking person before starting the Heimlich maneuver?",
        [
            "Try to cough harder",
            "I'm going to help you with abdominal thrusts",
            "Lean forward as much as possible",
            "Hold your breath",
        ],
        1,
        "Telling the person what you are about to do may help reduce panic.",
    ),
    _q(
        "hand-position-1",
        "hand-position",
        "Where should you place your fist when performing the Heimlich maneuver?",
        [
            "On the lower chest",
            "Just above the navel, below the ribcage",
            "On the upper abdomen near the ribcage",
            "On the back between the shoulder blades",
        ],
        1,
        "Just above the navel and below the ribcage targets the diaphragm.",
    ),
    _q(
        "hand-position-2",
        "hand-position",
        "How should your hands be positioned during the Heimlich maneuver?",
        [
            "Both hands side by side",
            "One hand on top of the other",
            "Fist with thumb side against abdomen, other hand covering fist",
            "Palms flat against the abdomen",
        ],
        2,
        "Thumb side of the fist against the abdomen, other hand grasping the fist.",
    ),
    _q(
        "thrust-technique-1",
        "abdominal-thrust",
        "What is the correct direction for abdominal thrusts?",
        [
            "Straight up",
            "Straight in toward the spine",
            "Up and inward toward the spine",
            "Down and inward",
        ],
        2,
        "Up and inward toward the spine creates the pressure that dislodges the obstruction.",
    ),
    _q(
        "thrust-technique-2",
        "abdominal-thrust",
        "How should each abdominal thrust be performed?",
        [
            "Slow and gentle",
            "Quick and forceful",
            "Steady and continuous pressure",
            "Gradual increasing pressure",
        ],
        1,
        "Each thrust should be quick and forceful; gentle pressure will not clear the airway.",
    ),
    _q(
        "thrust-technique-3",
        "abdominal-thrust",
        "When should you stop performing abdominal thrusts?",
        [
            "After exactly 5 thrusts",
            "When the person stops making noise",
            "When the object is expelled or person becomes unconscious",
            "After 2 minutes of trying",
        ],
        2,
        "Continue until the object is expelled, or switch to CPR if the person becomes "
        "unconscious.",
    ),
    _q(
        "special-cases-1",
        "abdominal-thrust",
        "What should you do for a pregnant woman who is choking?",
        [
            "Perform abdominal thrusts as normal",
            "Perform chest thrusts instead",
            "Only encourage coughing",
            "Position her lying down first",
        ],
        1,
        "Use chest thrusts on the center of the breastbone to avoid injuring the baby.",
    ),
    _q(
        "follow-up-1",
        "abdominal-thrust",
        "What should you do after successfully dislodging the object?",
        [
            "Leave immediately",
            "Encourage the person to seek medical attention",
            "Give them water to drink",
            "Have them lie down and rest",
        ],
        1,
        "Abdominal thrusts can cause internal injuries that need to be evaluated.",
    ),
)


class StaticQuestionBank:
    """In-memory question bank preserving authoring order."""

    def __init__(self, questions: Iterable[QuizQuestion]):
        self._by_step: dict[str, list[QuizQuestion]] = {}
        seen: set[str] = set()
        for question in questions:
            if question.id in seen:
                raise ValueError(f"Duplicate question id: {question.id}")
            seen.add(question.id)
            self._by_step.setdefault(question.step_id, []).append(question)

    def get_questions(self, step_id: str) -> tuple[QuizQuestion, ...]:
        return tuple(self._by_step.get(step_id, ()))

    def __len__(self) -> int:
        return sum(len(pool) for pool in self._by_step.values())


DEFAULT_QUESTION_BANK = StaticQuestionBank(CPR_QUESTIONS + HEIMLICH_QUESTIONS)


def select_questions_for_step(
    step_id: str,
    source: QuestionSource | None = None,
) -> tuple[QuizQuestion, ...]:
    """
    All questions for a step, in catalog order.

    An empty result means the step has no knowledge test.
    """
    if source is None:
        source = DEFAULT_QUESTION_BANK
    return tuple(source.get_questions(step_id))


def pick_review_question(
    pool: Sequence[QuizQuestion],
    rng: random.Random | None = None,
) -> QuizQuestion | None:
    """Random question for a practice-review pop quiz."""
    if not pool:
        return None
    return (rng or random).choice(list(pool))
