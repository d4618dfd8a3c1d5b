"""
Configuration settings for rescue-drill.

Uses Pydantic Settings for environment variable management with .env file support.
Clinical constants (compression counts, rate window, penalty factors) are
domain facts and live in rescue_drill.catalog.steps instead.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RESCUE_DRILL_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Quiz timing
    # ========================================
    knowledge_quiz_seconds: int = Field(
        default=15,
        ge=1,
        description="Countdown for knowledge-gate questions",
    )
    review_quiz_seconds: int = Field(
        default=5,
        ge=1,
        description="Countdown for practice-review pop quizzes",
    )
    correct_answer_dwell_seconds: float = Field(
        default=3.0,
        ge=0.0,
        description="Pause after a correct answer before the next question",
    )
    incorrect_answer_dwell_seconds: float = Field(
        default=1.5,
        ge=0.0,
        description="Pause after a wrong or timed-out answer before the next question",
    )

    # ========================================
    # Session timing
    # ========================================
    global_tick_seconds: float = Field(
        default=1.0,
        gt=0.0,
        description="Interval of the session countdown tick (1 Hz)",
    )
    review_quiz_seed: int | None = Field(
        default=None,
        description="Seed for review quiz question picks (None = nondeterministic)",
    )

    # ========================================
    # Result submission
    # ========================================
    results_api_url: str | None = Field(
        default=None,
        description="Base URL of the training records API",
    )
    results_api_token: str | None = Field(
        default=None,
        description="Bearer token for the training records API",
    )
    results_api_timeout_ms: int = Field(
        default=10000,
        ge=1,
        description="Request timeout for result submission",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="INFO",
        description="Minimum loguru level for the stderr sink",
    )

    @property
    def has_results_api(self) -> bool:
        """Check if result submission to the API is configured."""
        return bool(self.results_api_url)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
