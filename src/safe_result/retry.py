"""
Retry/backoff controller for async calls, built on tenacity.

    retry=RetryConfig(times=3, wait_before=lambda attempt: attempt * 100)

`times` counts retries, not attempts: times=3 means up to 4 attempts.
`wait_before` receives the 1-indexed retry number and returns milliseconds.

State machine per call:

    attempt 1 ──fail──→ on_retry(error, 1) → wait_before(1) → sleep → attempt 2 ...
        │                                                              │
     success ──→ stop                          last attempt fails ──→ terminal error

`wait_before(k)` is only consulted when retry k actually happens, so it is
never called with `times + 1` and never called at all for times=0.

Attempt state lives in one tenacity.AsyncRetrying per call and is never
shared between calls.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from safe_result.errors import HookName
from safe_result.hooks import HookErrorHandler, report_hook_error


class RetryConfig(BaseModel):
    """Retry count plus an optional per-retry delay in milliseconds."""

    model_config = ConfigDict(frozen=True)

    times: int = Field(ge=0, description="Number of retries after the first attempt")
    wait_before: Callable[[int], float] | None = Field(
        default=None,
        description="Maps the 1-indexed retry number to a delay in milliseconds",
    )

    @property
    def max_attempts(self) -> int:
        return self.times + 1


def coerce_retry(value: RetryConfig | Mapping[str, Any] | None) -> RetryConfig | None:
    """Accept a RetryConfig, a plain mapping such as {"times": 2}, or None."""
    if value is None or isinstance(value, RetryConfig):
        return value
    return RetryConfig.model_validate(value)


class Backoff:
    """
    Per-call delay holder between tenacity's before_sleep and its sleep.

    The delay is computed inside before_sleep, after on_retry has fired, and
    consumed by `sleep`; tenacity's own `wait` strategy stays at zero.

    A raising `wait_before` is reported as "wait_before" and treated as no
    delay; negative delays are clamped to zero.
    """

    def __init__(
        self,
        wait_before: Callable[[int], float] | None,
        on_hook_error: HookErrorHandler | None = None,
    ) -> None:
        self._wait_before = wait_before
        self._on_hook_error = on_hook_error
        self._delay = 0.0

    def compute(self, retry_number: int) -> float:
        """Resolve the delay in seconds before retry `retry_number` and store it."""
        self._delay = 0.0
        if self._wait_before is None:
            return self._delay
        try:
            ms = float(self._wait_before(retry_number))
        except Exception as exc:
            report_hook_error(self._on_hook_error, exc, HookName.WAIT_BEFORE)
            return self._delay
        self._delay = max(ms, 0.0) / 1000
        return self._delay

    async def sleep(self, _: float) -> None:
        delay, self._delay = self._delay, 0.0
        await asyncio.sleep(delay)


def build_retrying(
    retry: RetryConfig | None,
    on_retry: Callable[[RetryCallState], None],
    on_hook_error: HookErrorHandler | None = None,
) -> AsyncRetrying:
    """
    Create the per-call tenacity controller.

    `on_retry` runs from before_sleep, which tenacity only calls when another
    attempt follows; the backoff delay is computed right after it.

    Only Exception subclasses are retried; asyncio.CancelledError and other
    BaseExceptions stop the loop and propagate. With `reraise=True` the last
    attempt's exception surfaces unchanged once retries are exhausted.
    """
    times = retry.times if retry is not None else 0
    backoff = Backoff(retry.wait_before if retry is not None else None, on_hook_error)

    def before_sleep(retry_state: RetryCallState) -> None:
        on_retry(retry_state)
        backoff.compute(retry_state.attempt_number)

    return AsyncRetrying(
        stop=stop_after_attempt(times + 1),
        retry=retry_if_exception_type(Exception),
        before_sleep=before_sleep,
        sleep=backoff.sleep,
        reraise=True,
    )
