"""
Cancellation controller — per-attempt deadlines and abort signals.

Each attempt that has an `abort_after` deadline gets a fresh AbortController.
The attempt runs as an asyncio task raced against the deadline:

  - task settles first     → its outcome is used, the deadline is dropped
  - deadline passes first  → the signal is aborted, the attempt fails with
                             OperationTimeoutError, and the task is left to
                             finish in the background with its outcome discarded

Cancellation is cooperative. `safe.async_` hands the signal to the thunk so it
can stop early:

    async def fetch(signal: AbortSignal) -> bytes:
        while not signal.aborted:
            ...

`safe.wrap_async` never injects a signal; it only enforces the deadline.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from safe_result.errors import AbortError, OperationTimeoutError

T = TypeVar("T")
logger = logging.getLogger("safe_result.cancellation")


class AbortSignal:
    """
    Read-only view of an AbortController's state.

    Exposes an `aborted` flag, the abort `reason`, abort listeners, and an
    awaitable `wait()` that returns once the signal is aborted.
    """

    def __init__(self) -> None:
        self._aborted = False
        self._reason: Any = None
        self._listeners: list[Callable[[AbortSignal], Any]] = []
        self._event: asyncio.Event | None = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> Any:
        return self._reason

    def add_listener(self, listener: Callable[[AbortSignal], Any]) -> None:
        """Register a callback invoked with this signal when it is aborted."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[AbortSignal], Any]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def raise_if_aborted(self) -> None:
        """Raise the abort reason (or AbortError) if the signal was aborted."""
        if not self._aborted:
            return
        if isinstance(self._reason, Exception):
            raise self._reason
        raise AbortError(self._reason)

    async def wait(self) -> None:
        """Suspend until the signal is aborted."""
        if self._aborted:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def _abort(self, reason: Any) -> None:
        self._aborted = True
        self._reason = reason
        if self._event is not None:
            self._event.set()
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as exc:
                logger.debug("abort listener failed: %r", exc)

    def __repr__(self) -> str:
        return f"AbortSignal(aborted={self._aborted})"


class AbortController:
    """Owner side of an AbortSignal. Aborting is idempotent."""

    def __init__(self) -> None:
        self._signal = AbortSignal()

    @property
    def signal(self) -> AbortSignal:
        return self._signal

    def abort(self, reason: Any = None) -> None:
        if self._signal.aborted:
            return
        self._signal._abort(AbortError() if reason is None else reason)


def _discard_outcome(task: asyncio.Future[Any]) -> None:
    """Retrieve a timed-out task's outcome so asyncio never reports it as unhandled."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("discarded late failure of a timed-out attempt: %r", exc)


async def run_with_deadline(
    call: Callable[[AbortSignal | None], Awaitable[T]],
    abort_after: float | None,
) -> T:
    """
    Run one attempt, bounded by `abort_after` milliseconds when set.

    `call` receives the attempt's AbortSignal, or None without a deadline.
    Raises OperationTimeoutError when the deadline passes first.
    """
    if abort_after is None:
        return await call(None)

    controller = AbortController()
    task = asyncio.ensure_future(call(controller.signal))
    try:
        done, _ = await asyncio.wait({task}, timeout=abort_after / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    timeout = OperationTimeoutError(abort_after)
    logger.debug("attempt timed out after %sms", abort_after)
    controller.abort(timeout)
    task.add_done_callback(_discard_outcome)
    raise timeout
