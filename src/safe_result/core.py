"""
Execution core — the four call shapes that turn raised exceptions into Results.

    safe_sync(fn)          run fn() now                     → Result
    wrap(fn)               decorate fn(*args)               → (*args) -> Result
    safe_async(thunk)      await thunk() with retry/timeout → Result
    wrap_async(fn)         decorate async fn(*args)         → async (*args) -> Result

All four accept an optional `parse_error` as second positional argument and
hooks as keyword arguments:

    data, error = safe_sync(
        lambda: json.loads(raw),
        lambda e: {"code": "BAD_JSON", "message": str(e)},
        on_error=lambda error, ctx: audit(error),
    )

    fetch_user = wrap_async(
        client.get_user,
        retry=RetryConfig(times=3, wait_before=lambda attempt: attempt * 200),
        abort_after=5_000,
    )
    user, error = await fetch_user("42")

Hooks receive a context: () for safe_sync/safe_async and the positional
arguments for wrapped functions. A raising `parse_result` fails the attempt
and goes through `parse_error` like any other exception, so it is retried too.
Only Exception subclasses are captured; BaseExceptions such as
asyncio.CancelledError propagate.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from tenacity import RetryCallState

from safe_result.aggregate import safe_all, safe_all_settled
from safe_result.cancellation import AbortSignal, run_with_deadline
from safe_result.hooks import (
    UNSET,
    HookErrorHandler,
    Hooks,
    dispatch_error,
    dispatch_retry,
    dispatch_success,
)
from safe_result.normalize import normalize_error
from safe_result.result import Err, Ok, Result
from safe_result.retry import RetryConfig, build_retrying, coerce_retry

T = TypeVar("T")
logger = logging.getLogger("safe_result.core")

ParseError = Callable[[Any], Any]


def _check_abort_after(abort_after: Any) -> None:
    if abort_after is None or abort_after is UNSET:
        return
    if isinstance(abort_after, bool) or not isinstance(abort_after, (int, float)) or abort_after < 0:
        raise ValueError(f"abort_after must be a non-negative number of milliseconds, got {abort_after!r}")


def build_hooks(
    *,
    parse_result: Callable[[Any], Any] | None = None,
    on_success: Callable[..., Any] | None = None,
    on_error: Callable[..., Any] | None = None,
    on_settled: Callable[..., Any] | None = None,
    on_retry: Callable[..., Any] | None = None,
    on_hook_error: HookErrorHandler | None = None,
    default_error: Any = UNSET,
    retry: RetryConfig | Mapping[str, Any] | None = UNSET,
    abort_after: float | None = UNSET,
) -> Hooks:
    """Validate per-call options and bundle them into a Hooks value."""
    _check_abort_after(abort_after)
    return Hooks(
        parse_result=parse_result,
        on_success=on_success,
        on_error=on_error,
        on_settled=on_settled,
        on_retry=on_retry,
        on_hook_error=on_hook_error,
        default_error=default_error,
        retry=retry if retry is UNSET else coerce_retry(retry),
        abort_after=abort_after,
    )


# ──────────────────────── Engine ────────────────────────


def _fail(raw: Exception, parse_error: ParseError | None, hooks: Hooks) -> Any:
    return normalize_error(
        raw,
        parse_error,
        default_error=hooks.default_error,
        on_hook_error=hooks.on_hook_error,
    )


def run_sync(
    call: Callable[[], Any],
    context: tuple[Any, ...],
    parse_error: ParseError | None,
    hooks: Hooks,
) -> Result[Any, Any]:
    """Run one synchronous call through parse_result/parse_error and the hooks."""
    try:
        raw = call()
        value = hooks.parse_result(raw) if hooks.parse_result is not None else raw
    except Exception as exc:
        error = _fail(exc, parse_error, hooks)
        dispatch_error(hooks, error, context)
        return Err(error)
    dispatch_success(hooks, value, context)
    return Ok(value)


async def run_async(
    call: Callable[[AbortSignal | None], Awaitable[Any]],
    context: tuple[Any, ...],
    parse_error: ParseError | None,
    hooks: Hooks,
) -> Result[Any, Any]:
    """
    Run an async call under the retry controller, one deadline per attempt.

    `parse_error` runs once per failed attempt: intermediate failures feed
    `on_retry`, the last one becomes the Result's error.
    """
    abort_after = hooks.resolved_abort_after

    def on_retry(retry_state: RetryCallState) -> None:
        error = _fail(retry_state.outcome.exception(), parse_error, hooks)
        logger.debug("attempt %d failed, retrying: %r", retry_state.attempt_number, error)
        dispatch_retry(hooks, error, retry_state.attempt_number, context)

    retrying = build_retrying(hooks.resolved_retry, on_retry, hooks.on_hook_error)
    try:
        async for attempt in retrying:
            with attempt:
                raw = await run_with_deadline(call, abort_after)
                value = hooks.parse_result(raw) if hooks.parse_result is not None else raw
    except Exception as exc:
        error = _fail(exc, parse_error, hooks)
        dispatch_error(hooks, error, context)
        return Err(error)
    dispatch_success(hooks, value, context)
    return Ok(value)


def wrap_with_hooks(
    fn: Callable[..., T],
    parse_error: ParseError | None,
    hooks: Hooks,
) -> Callable[..., Result[Any, Any]]:
    if not callable(fn):
        raise TypeError(f"wrap expects a callable, got {type(fn).__name__}")

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Result[Any, Any]:
        return run_sync(lambda: fn(*args, **kwargs), args, parse_error, hooks)

    return wrapper


def wrap_async_with_hooks(
    fn: Callable[..., Awaitable[T]],
    parse_error: ParseError | None,
    hooks: Hooks,
) -> Callable[..., Awaitable[Result[Any, Any]]]:
    if not callable(fn):
        raise TypeError(f"wrap_async expects a callable, got {type(fn).__name__}")

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Result[Any, Any]:
        # wrapped functions never receive the AbortSignal
        return await run_async(lambda _signal: fn(*args, **kwargs), args, parse_error, hooks)

    return wrapper


def thunk_call(thunk: Callable[..., Awaitable[T]]) -> Callable[[AbortSignal | None], Awaitable[T]]:
    """Adapt a thunk so it receives the AbortSignal only when a deadline is set."""
    return lambda signal: thunk() if signal is None else thunk(signal)


# ──────────────────────── Public call shapes ────────────────────────


def safe_sync(
    fn: Callable[[], T],
    parse_error: ParseError | None = None,
    *,
    parse_result: Callable[[Any], Any] | None = None,
    on_success: Callable[..., Any] | None = None,
    on_error: Callable[..., Any] | None = None,
    on_settled: Callable[..., Any] | None = None,
    on_hook_error: HookErrorHandler | None = None,
    default_error: Any = UNSET,
) -> Result[Any, Any]:
    """
    Call `fn()` and capture the outcome as a Result.

        data, error = safe_sync(lambda: int(text))
    """
    hooks = build_hooks(
        parse_result=parse_result,
        on_success=on_success,
        on_error=on_error,
        on_settled=on_settled,
        on_hook_error=on_hook_error,
        default_error=default_error,
    )
    return run_sync(fn, (), parse_error, hooks)


async def safe_async(
    thunk: Callable[..., Awaitable[T]],
    parse_error: ParseError | None = None,
    *,
    parse_result: Callable[[Any], Any] | None = None,
    on_success: Callable[..., Any] | None = None,
    on_error: Callable[..., Any] | None = None,
    on_settled: Callable[..., Any] | None = None,
    on_retry: Callable[..., Any] | None = None,
    on_hook_error: HookErrorHandler | None = None,
    default_error: Any = UNSET,
    retry: RetryConfig | Mapping[str, Any] | None = None,
    abort_after: float | None = None,
) -> Result[Any, Any]:
    """
    Await `thunk()` and capture the outcome as a Result.

    With `abort_after` set, the thunk is called as `thunk(signal)` so it can
    observe cancellation; without it, `thunk()` takes no arguments.

        user, error = await safe_async(lambda: client.get_user("42"), retry={"times": 2})
    """
    hooks = build_hooks(
        parse_result=parse_result,
        on_success=on_success,
        on_error=on_error,
        on_settled=on_settled,
        on_retry=on_retry,
        on_hook_error=on_hook_error,
        default_error=default_error,
        retry=retry,
        abort_after=abort_after,
    )
    return await run_async(thunk_call(thunk), (), parse_error, hooks)


def wrap(
    fn: Callable[..., T],
    parse_error: ParseError | None = None,
    *,
    parse_result: Callable[[Any], Any] | None = None,
    on_success: Callable[..., Any] | None = None,
    on_error: Callable[..., Any] | None = None,
    on_settled: Callable[..., Any] | None = None,
    on_hook_error: HookErrorHandler | None = None,
    default_error: Any = UNSET,
) -> Callable[..., Result[Any, Any]]:
    """
    Return a version of `fn` that returns a Result instead of raising.

        safe_divide = wrap(lambda a, b: a / b, on_error=lambda e, args: log.warning("div", args=args))
        value, error = safe_divide(1, 0)
    """
    hooks = build_hooks(
        parse_result=parse_result,
        on_success=on_success,
        on_error=on_error,
        on_settled=on_settled,
        on_hook_error=on_hook_error,
        default_error=default_error,
    )
    return wrap_with_hooks(fn, parse_error, hooks)


def wrap_async(
    fn: Callable[..., Awaitable[T]],
    parse_error: ParseError | None = None,
    *,
    parse_result: Callable[[Any], Any] | None = None,
    on_success: Callable[..., Any] | None = None,
    on_error: Callable[..., Any] | None = None,
    on_settled: Callable[..., Any] | None = None,
    on_retry: Callable[..., Any] | None = None,
    on_hook_error: HookErrorHandler | None = None,
    default_error: Any = UNSET,
    retry: RetryConfig | Mapping[str, Any] | None = None,
    abort_after: float | None = None,
) -> Callable[..., Awaitable[Result[Any, Any]]]:
    """
    Return an async version of `fn` that resolves to a Result instead of raising.

    `abort_after` is an external deadline only: `fn` gets no signal, and on
    timeout it keeps running in the background while its outcome is discarded.
    Use `safe_async` when the operation should observe cancellation.
    """
    hooks = build_hooks(
        parse_result=parse_result,
        on_success=on_success,
        on_error=on_error,
        on_settled=on_settled,
        on_retry=on_retry,
        on_hook_error=on_hook_error,
        default_error=default_error,
        retry=retry,
        abort_after=abort_after,
    )
    return wrap_async_with_hooks(fn, parse_error, hooks)


class Safe:
    """
    Namespace bundling the call shapes: safe.sync, safe.async_, safe.wrap,
    safe.wrap_async, safe.all, safe.all_settled.
    """

    sync = staticmethod(safe_sync)
    async_ = staticmethod(safe_async)
    wrap = staticmethod(wrap)
    wrap_async = staticmethod(wrap_async)
    all = staticmethod(safe_all)
    all_settled = staticmethod(safe_all_settled)

    def __repr__(self) -> str:
        return "safe"


safe = Safe()
