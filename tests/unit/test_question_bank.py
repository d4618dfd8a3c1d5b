"""
Unit tests for the question bank and pool selection.
"""

import random

import pytest

from rescue_drill.catalog import (
    DEFAULT_QUESTION_BANK,
    QuizQuestion,
    StaticQuestionBank,
    get_steps,
    pick_review_question,
    select_questions_for_step,
)
from rescue_drill.catalog.questions import CPR_QUESTIONS, HEIMLICH_QUESTIONS


class TestQuizQuestion:
    """Tests for question authoring validation."""

    def test_single_option_rejected(self):
        with pytest.raises(ValueError):
            QuizQuestion("q", "s", "?", ("only",), 0)

    def test_correct_index_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            QuizQuestion("q", "s", "?", ("a", "b"), 2)

    def test_is_correct(self, sample_quiz_question):
        assert sample_quiz_question.is_correct(1)
        assert not sample_quiz_question.is_correct(0)
        assert not sample_quiz_question.is_correct(-1)
        assert sample_quiz_question.correct_option == "Tap and shout"


class TestDefaultBank:
    """Tests for the authored question content."""

    def test_question_counts(self):
        assert len(CPR_QUESTIONS) == 11
        assert len(HEIMLICH_QUESTIONS) == 11
        assert len(DEFAULT_QUESTION_BANK) == 22

    def test_every_question_belongs_to_a_step(self):
        step_ids = {s.id for s in get_steps("cpr") + get_steps("heimlich")}
        for question in CPR_QUESTIONS + HEIMLICH_QUESTIONS:
            assert question.step_id in step_ids, question.id

    def test_every_step_has_questions(self):
        for step in get_steps("cpr") + get_steps("heimlich"):
            assert select_questions_for_step(step.id), step.id

    def test_pool_keeps_authoring_order(self):
        pool = select_questions_for_step("compression")
        assert [q.id for q in pool] == ["compression-1", "compression-2", "compression-3"]

    def test_unknown_step_has_empty_pool(self):
        assert select_questions_for_step("no-such-step") == ()


class TestStaticQuestionBank:
    """Tests for the in-memory bank."""

    def test_duplicate_ids_rejected(self, sample_quiz_question):
        with pytest.raises(ValueError):
            StaticQuestionBank([sample_quiz_question, sample_quiz_question])

    def test_empty_bank_is_used_not_replaced(self, empty_bank):
        assert select_questions_for_step("compression", empty_bank) == ()

    def test_groups_by_step(self, sample_quiz_question):
        bank = StaticQuestionBank([sample_quiz_question])
        assert bank.get_questions("check-consciousness") == (sample_quiz_question,)
        assert bank.get_questions("call-help") == ()


class TestPickReviewQuestion:
    """Tests for review quiz selection."""

    def test_empty_pool_gives_none(self):
        assert pick_review_question(()) is None

    def test_pick_comes_from_pool(self):
        pool = select_questions_for_step("ventilation")
        assert pick_review_question(pool, random.Random(1)) in pool

    def test_seeded_pick_is_reproducible(self):
        pool = select_questions_for_step("abdominal-thrust")
        first = pick_review_question(pool, random.Random(42))
        second = pick_review_question(pool, random.Random(42))
        assert first == second
