"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings
from rescue_drill.catalog import QuizQuestion, ScenarioType, StaticQuestionBank
from rescue_drill.delivery.result_sink import RecordingResultSink
from rescue_drill.training.scheduler import ManualScheduler
from rescue_drill.training.session import SessionController


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Default timings, ignoring any .env in the working directory."""
    return Settings(_env_file=None, review_quiz_seed=7)


@pytest.fixture
def scheduler():
    """Virtual clock starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def sink():
    """Result sink that keeps submissions in memory."""
    return RecordingResultSink()


@pytest.fixture
def sample_quiz_question():
    """Provide a sample quiz question for testing."""
    return QuizQuestion(
        id="sample-1",
        step_id="check-consciousness",
        prompt_text="What should you do first?",
        options=("Start compressions", "Tap and shout", "Give water"),
        correct_option_index=1,
        explanation_text="Check responsiveness first.",
    )


@pytest.fixture
def make_controller(scheduler, sink, settings):
    """Build a SessionController on the shared virtual clock."""

    def _make(scenario=ScenarioType.CPR, **kwargs):
        kwargs.setdefault("result_sink", sink)
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("rng", random.Random(7))
        return SessionController(scenario, scheduler, **kwargs)

    return _make


@pytest.fixture
def empty_bank():
    """Question source with no questions: every knowledge test is skipped."""
    return StaticQuestionBank([])
