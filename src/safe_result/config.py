"""
Settings — process-wide defaults for safe instances, loaded from environment/.env.

Uses pydantic-settings so deployments can tune retry and deadline defaults
without code changes:

    SAFE_RETRY_TIMES=3
    SAFE_RETRY_WAIT_MS=250
    SAFE_ABORT_AFTER_MS=10000
    SAFE_LOG_LEVEL=DEBUG

    settings = SafeSettings()
    app_safe = create_safe(
        parse_error=to_app_error,
        default_error=UNKNOWN,
        **settings.factory_defaults(),
    )

Invalid values fail at load time with a pydantic ValidationError.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from safe_result.retry import RetryConfig


def _constant_wait(ms: int) -> Callable[[int], float]:
    def wait_before(attempt: int) -> float:
        return ms

    return wait_before


class SafeSettings(BaseSettings):
    """
    Environment-driven defaults.

    Load order (highest priority first):
      1. Environment variables (SAFE_ prefix)
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="SAFE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    retry_times: int = Field(default=0, ge=0, description="Retries after the first attempt")
    retry_wait_ms: int = Field(default=0, ge=0, description="Constant delay between attempts")
    abort_after_ms: int | None = Field(default=None, gt=0, description="Per-attempt deadline")
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Reject names the logging module does not know."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    def retry_config(self) -> RetryConfig | None:
        if self.retry_times == 0:
            return None
        wait_before = _constant_wait(self.retry_wait_ms) if self.retry_wait_ms else None
        return RetryConfig(times=self.retry_times, wait_before=wait_before)

    def factory_defaults(self) -> dict[str, Any]:
        """Keyword arguments for `create_safe` carrying the retry and deadline defaults."""
        return {"retry": self.retry_config(), "abort_after": self.abort_after_ms}
