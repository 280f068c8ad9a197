"""
Shared fixtures and helpers for the safe_result test suite.

Async helpers build coroutines that succeed, fail, or stall for a number of
milliseconds, so timeout and retry tests stay short and deterministic.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest


class Recorder:
    """Collects hook invocations in call order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def hook(self, name: str) -> Callable[..., None]:
        def record(*args: Any) -> None:
            self.calls.append((name, args))

        return record

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def recorder() -> Recorder:
    """Return a fresh hook recorder."""
    return Recorder()


async def resolve_after(ms: float, value: Any) -> Any:
    await asyncio.sleep(ms / 1000)
    return value


async def fail_after(ms: float, error: Exception) -> Any:
    await asyncio.sleep(ms / 1000)
    raise error


def flaky(failures: int, value: Any = "done") -> Callable[..., Any]:
    """
    Build an async thunk that raises on its first `failures` calls.

    The returned callable exposes `.calls` with the number of invocations.
    """

    async def thunk(*_: Any) -> Any:
        thunk.calls += 1
        if thunk.calls <= failures:
            raise RuntimeError(f"fail {thunk.calls}")
        return value

    thunk.calls = 0
    return thunk
