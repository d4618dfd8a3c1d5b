"""
Scenario catalog: steps, clinical constants and question pools.
"""

from rescue_drill.catalog.models import (
    ActionId,
    CountedAction,
    InvalidScenario,
    QuizQuestion,
    ScenarioProfile,
    ScenarioType,
    StepDefinition,
)
from rescue_drill.catalog.questions import (
    DEFAULT_QUESTION_BANK,
    QuestionSource,
    StaticQuestionBank,
    pick_review_question,
    select_questions_for_step,
)
from rescue_drill.catalog.steps import action_choices, get_scenario, get_steps

__all__ = [
    "ActionId",
    "CountedAction",
    "DEFAULT_QUESTION_BANK",
    "InvalidScenario",
    "QuestionSource",
    "QuizQuestion",
    "ScenarioProfile",
    "ScenarioType",
    "StaticQuestionBank",
    "StepDefinition",
    "action_choices",
    "get_scenario",
    "get_steps",
    "pick_review_question",
    "select_questions_for_step",
]
