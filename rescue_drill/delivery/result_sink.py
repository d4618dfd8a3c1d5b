"""
Result submission collaborators.

The engine reports a finished session exactly once through a ResultSink.
Persistence lives elsewhere; these sinks only hand the result over:

- LoggingResultSink: writes a summary to the log
- RecordingResultSink: keeps submissions in memory
- HttpResultSink: posts to the training records API
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import httpx
from loguru import logger
from pydantic import BaseModel, Field

from rescue_drill.catalog.models import ScenarioType

if TYPE_CHECKING:
    from rescue_drill.training.state import StepResult


class ResultSink(Protocol):
    """Receives the final result of a session."""

    def submit(
        self,
        scenario_type: ScenarioType,
        total_practice_score: int,
        total_knowledge_bonus: int,
        time_expired: bool,
        step_results: Sequence[StepResult],
        *,
        duration_seconds: int = 0,
    ) -> bool:
        ...


@dataclass
class Submission:
    """One recorded call to a ResultSink."""

    scenario_type: ScenarioType
    total_practice_score: int
    total_knowledge_bonus: int
    time_expired: bool
    step_results: list[StepResult] = field(default_factory=list)
    duration_seconds: int = 0


class LoggingResultSink:
    """Logs the session summary instead of persisting it."""

    def submit(
        self,
        scenario_type: ScenarioType,
        total_practice_score: int,
        total_knowledge_bonus: int,
        time_expired: bool,
        step_results: Sequence[StepResult],
        *,
        duration_seconds: int = 0,
    ) -> bool:
        status = "time expired" if time_expired else "completed"
        logger.info(
            f"Training {status}: {scenario_type.value} "
            f"practice={total_practice_score} knowledge={total_knowledge_bonus} "
            f"steps={len(step_results)} duration={duration_seconds}s"
        )
        return True


class RecordingResultSink:
    """Keeps every submission in memory."""

    def __init__(self) -> None:
        self.submissions: list[Submission] = []

    def submit(
        self,
        scenario_type: ScenarioType,
        total_practice_score: int,
        total_knowledge_bonus: int,
        time_expired: bool,
        step_results: Sequence[StepResult],
        *,
        duration_seconds: int = 0,
    ) -> bool:
        self.submissions.append(
            Submission(
                scenario_type=scenario_type,
                total_practice_score=total_practice_score,
                total_knowledge_bonus=total_knowledge_bonus,
                time_expired=time_expired,
                step_results=list(step_results),
                duration_seconds=duration_seconds,
            )
        )
        return True

    @property
    def last(self) -> Submission | None:
        return self.submissions[-1] if self.submissions else None


class TrainingSubmission(BaseModel):
    """Request body of POST /api/training/submit."""

    scenarioType: str
    score: int = Field(ge=0)
    quizScore: int = Field(default=0, ge=0)
    duration: int = Field(ge=1)
    timeExpired: bool = False
    stepsData: list[dict]


class HttpResultSink:
    """
    Posts finished sessions to the training records API.

    Submission is fire-and-forget from the engine's point of view: errors
    are logged and reported as False, never raised and never retried.
    """

    def __init__(
        self,
        api_url: str,
        token: str | None = None,
        timeout_ms: int = 10000,
        client: httpx.Client | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_ms / 1000.0),
            headers=headers,
            follow_redirects=True,
        )

    def close(self) -> None:
        self.client.close()

    def build_payload(
        self,
        scenario_type: ScenarioType,
        total_practice_score: int,
        total_knowledge_bonus: int,
        time_expired: bool,
        step_results: Sequence[StepResult],
        duration_seconds: int,
    ) -> TrainingSubmission:
        return TrainingSubmission(
            scenarioType=scenario_type.value,
            score=total_practice_score,
            quizScore=total_knowledge_bonus,
            duration=max(1, duration_seconds),
            timeExpired=time_expired,
            stepsData=[r.to_dict() for r in step_results],
        )

    def submit(
        self,
        scenario_type: ScenarioType,
        total_practice_score: int,
        total_knowledge_bonus: int,
        time_expired: bool,
        step_results: Sequence[StepResult],
        *,
        duration_seconds: int = 0,
    ) -> bool:
        payload = self.build_payload(
            scenario_type,
            total_practice_score,
            total_knowledge_bonus,
            time_expired,
            step_results,
            duration_seconds,
        )
        try:
            response = self.client.post(
                f"{self.api_url}/api/training/submit",
                json=payload.model_dump(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Training record rejected: HTTP {e.response.status_code}")
            return False
        except httpx.RequestError as e:
            logger.warning(f"Could not submit training record: {e}")
            return False

        logger.info(f"Training record submitted for {scenario_type.value}")
        return True
