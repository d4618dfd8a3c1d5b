"""
Unit tests for result submission sinks.
"""

import httpx
import pytest
from httpx import Request, Response

from rescue_drill.catalog import ScenarioType
from rescue_drill.delivery.result_sink import (
    HttpResultSink,
    LoggingResultSink,
    RecordingResultSink,
)
from rescue_drill.training.state import StepResult

API_URL = "http://localhost:3000"
SUBMIT_URL = f"{API_URL}/api/training/submit"


@pytest.fixture
def step_results():
    return [
        StepResult("identify-choking", 8, 25, 10),
        StepResult("position-behind", 22, 20, 10),
    ]


@pytest.fixture
def http_sink():
    sink = HttpResultSink(api_url=API_URL + "/", token="secret", timeout_ms=5000)
    yield sink
    sink.close()


class TestRecordingResultSink:
    """Tests for the in-memory sink."""

    def test_records_submission(self, step_results):
        sink = RecordingResultSink()
        assert sink.last is None

        ok = sink.submit(ScenarioType.HEIMLICH, 45, 20, False, step_results, duration_seconds=90)

        assert ok is True
        assert sink.last.total_practice_score == 45
        assert sink.last.step_results == step_results
        assert sink.last.duration_seconds == 90


class TestLoggingResultSink:
    """Tests for the log-only sink."""

    def test_always_succeeds(self, step_results):
        assert LoggingResultSink().submit(ScenarioType.CPR, 0, 0, True, []) is True


class TestHttpResultSink:
    """Tests for the HTTP sink."""

    def test_trailing_slash_stripped(self, http_sink):
        assert http_sink.api_url == API_URL

    def test_bearer_token_header(self, http_sink):
        assert http_sink.client.headers["Authorization"] == "Bearer secret"

    def test_payload_shape(self, http_sink, step_results):
        payload = http_sink.build_payload(ScenarioType.HEIMLICH, 45, 20, True, step_results, 0)
        body = payload.model_dump()

        assert body["scenarioType"] == "heimlich"
        assert body["score"] == 45
        assert body["quizScore"] == 20
        assert body["duration"] == 1
        assert body["timeExpired"] is True
        assert body["stepsData"][0] == {
            "stepId": "identify-choking",
            "timeSpent": 8,
            "score": 25,
            "quizScore": 10,
            "completed": True,
        }

    def test_submit_success(self, http_sink, step_results, monkeypatch):
        calls = []

        def mock_post(url, json=None, **kwargs):
            calls.append((url, json))
            return Response(201, json={"id": 1}, request=Request("POST", url))

        monkeypatch.setattr(http_sink.client, "post", mock_post)

        ok = http_sink.submit(ScenarioType.CPR, 100, 55, False, step_results, duration_seconds=95)

        assert ok is True
        assert calls[0][0] == SUBMIT_URL
        assert calls[0][1]["duration"] == 95

    def test_submit_http_error_returns_false(self, http_sink, step_results, monkeypatch):
        def mock_post(url, json=None, **kwargs):
            return Response(401, json={"error": "unauthorized"}, request=Request("POST", url))

        monkeypatch.setattr(http_sink.client, "post", mock_post)

        assert http_sink.submit(ScenarioType.CPR, 100, 55, False, step_results) is False

    def test_submit_connection_error_returns_false(self, http_sink, step_results, monkeypatch):
        calls = []

        def mock_post(url, json=None, **kwargs):
            calls.append(url)
            raise httpx.ConnectError("Connection refused", request=Request("POST", url))

        monkeypatch.setattr(http_sink.client, "post", mock_post)

        assert http_sink.submit(ScenarioType.CPR, 100, 55, False, step_results) is False
        assert len(calls) == 1
