"""
Unit tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from config import Settings


class TestSettings:
    """Tests for defaults and overrides."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.knowledge_quiz_seconds == 15
        assert settings.review_quiz_seconds == 5
        assert settings.correct_answer_dwell_seconds == 3.0
        assert settings.incorrect_answer_dwell_seconds == 1.5
        assert not settings.has_results_api

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("RESCUE_DRILL_KNOWLEDGE_QUIZ_SECONDS", "20")
        monkeypatch.setenv("RESCUE_DRILL_RESULTS_API_URL", "http://localhost:3000")

        settings = Settings(_env_file=None)

        assert settings.knowledge_quiz_seconds == 20
        assert settings.has_results_api

    def test_rejects_zero_countdown(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, knowledge_quiz_seconds=0)

    def test_quiz_timing_flows_into_controller(self, make_controller):
        controller = make_controller(settings=Settings(_env_file=None, knowledge_quiz_seconds=8))
        controller.begin_knowledge()

        assert controller.quiz.seconds_left == 8
