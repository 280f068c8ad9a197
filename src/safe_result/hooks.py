"""
Hook dispatcher — lifecycle callbacks that observe a call without steering it.

Hooks fire in a fixed order:

    success:  parse_result → on_success(result, ctx) → on_settled(result, None, ctx)
    failure:  parse_error  → on_error(error, ctx)    → on_settled(None, error, ctx)
    retry:    parse_error  → on_retry(error, attempt, ctx) → backoff → next attempt

Every invocation is isolated. A hook that raises is caught on the spot and
reported to `on_hook_error(exc, hook_name)`; a raising `on_hook_error` is
dropped. Nothing a hook does can change the Result or escape the call.

Factory defaults and per-call hooks are combined by `merge_hooks`:
on_success / on_error / on_settled / on_retry run both (default first);
on_hook_error, parse_result, default_error, retry and abort_after are
replaced by the per-call value when one is given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable

from safe_result.errors import HookName

if TYPE_CHECKING:
    from safe_result.retry import RetryConfig

logger = logging.getLogger("safe_result.hooks")

HookErrorHandler = Callable[[Exception, HookName], Any]


class _Unset:
    """Marker for "option not given", distinct from an explicit None."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True, slots=True)
class Hooks:
    """
    The callbacks and per-call options of one safe call.

    `retry` and `abort_after` default to UNSET so a factory can tell
    "not given" (inherit the default) from an explicit None (disable it).
    """

    parse_result: Callable[[Any], Any] | None = None
    on_success: Callable[..., Any] | None = None
    on_error: Callable[..., Any] | None = None
    on_settled: Callable[..., Any] | None = None
    on_retry: Callable[..., Any] | None = None
    on_hook_error: HookErrorHandler | None = None
    default_error: Any = UNSET
    retry: RetryConfig | None = UNSET
    abort_after: float | None = UNSET

    @property
    def resolved_retry(self) -> RetryConfig | None:
        return None if self.retry is UNSET else self.retry

    @property
    def resolved_abort_after(self) -> float | None:
        return None if self.abort_after is UNSET else self.abort_after


# ──────────────────────── Isolation ────────────────────────


def report_hook_error(
    on_hook_error: HookErrorHandler | None,
    exc: Exception,
    name: HookName,
) -> None:
    """Forward a hook failure to `on_hook_error`, never letting it raise."""
    logger.debug("[%s] hook failed: %r", name, exc)
    if on_hook_error is None:
        return
    try:
        on_hook_error(exc, name)
    except Exception as inner:
        logger.debug("[%s] on_hook_error failed: %r", name, inner)


def call_hook(
    name: HookName,
    hook: Callable[..., Any] | None,
    *args: Any,
    on_hook_error: HookErrorHandler | None = None,
) -> None:
    """Invoke `hook(*args)` if set, catching and reporting anything it raises."""
    if hook is None:
        return
    try:
        hook(*args)
    except Exception as exc:
        report_hook_error(on_hook_error, exc, name)


# ──────────────────────── Dispatch ────────────────────────


def dispatch_success(hooks: Hooks, result: Any, context: tuple[Any, ...]) -> None:
    call_hook(HookName.ON_SUCCESS, hooks.on_success, result, context, on_hook_error=hooks.on_hook_error)
    call_hook(HookName.ON_SETTLED, hooks.on_settled, result, None, context, on_hook_error=hooks.on_hook_error)


def dispatch_error(hooks: Hooks, error: Any, context: tuple[Any, ...]) -> None:
    call_hook(HookName.ON_ERROR, hooks.on_error, error, context, on_hook_error=hooks.on_hook_error)
    call_hook(HookName.ON_SETTLED, hooks.on_settled, None, error, context, on_hook_error=hooks.on_hook_error)


def dispatch_retry(hooks: Hooks, error: Any, attempt: int, context: tuple[Any, ...]) -> None:
    call_hook(HookName.ON_RETRY, hooks.on_retry, error, attempt, context, on_hook_error=hooks.on_hook_error)


# ──────────────────────── Merge ────────────────────────


def _chain(
    name: HookName,
    first: Callable[..., Any] | None,
    second: Callable[..., Any] | None,
    on_hook_error: HookErrorHandler | None,
) -> Callable[..., Any] | None:
    """Run `first` then `second`, each isolated, so one failing never skips the other."""
    if first is None:
        return second
    if second is None:
        return first

    def chained(*args: Any) -> None:
        call_hook(name, first, *args, on_hook_error=on_hook_error)
        call_hook(name, second, *args, on_hook_error=on_hook_error)

    return chained


def _given(value: Any) -> bool:
    return value is not UNSET and bool(value)


def merge_hooks(defaults: Hooks, per_call: Hooks) -> Hooks:
    """
    Combine factory defaults with per-call hooks.

        merged = merge_hooks(factory_hooks, Hooks(on_success=audit))
        # factory on_success runs, then audit
    """
    on_hook_error = per_call.on_hook_error if per_call.on_hook_error is not None else defaults.on_hook_error
    return replace(
        per_call,
        parse_result=per_call.parse_result if per_call.parse_result is not None else defaults.parse_result,
        on_success=_chain(HookName.ON_SUCCESS, defaults.on_success, per_call.on_success, on_hook_error),
        on_error=_chain(HookName.ON_ERROR, defaults.on_error, per_call.on_error, on_hook_error),
        on_settled=_chain(HookName.ON_SETTLED, defaults.on_settled, per_call.on_settled, on_hook_error),
        on_retry=_chain(HookName.ON_RETRY, defaults.on_retry, per_call.on_retry, on_hook_error),
        on_hook_error=on_hook_error,
        default_error=per_call.default_error if _given(per_call.default_error) else defaults.default_error,
        retry=defaults.retry if per_call.retry is UNSET else per_call.retry,
        abort_after=defaults.abort_after if per_call.abort_after is UNSET else per_call.abort_after,
    )
