"""
Factory — a family of call shapes bound to one fixed configuration.

    app_safe = create_safe(
        parse_error=lambda e: AppError.from_exception(e),
        default_error=AppError("UNKNOWN", "unknown error"),
        on_error=lambda error, ctx: log.warning("app.error", code=error.code),
        retry=RetryConfig(times=2),
        abort_after=10_000,
    )

    user, error = await app_safe.async_(lambda signal: fetch_user("42", signal))

Merge rules between the factory configuration and a single call:

  - on_success / on_error / on_settled / on_retry: both run, factory first
  - on_hook_error, parse_result, default_error, retry, abort_after:
    the per-call value replaces the factory one
  - abort_after=None on a call disables the factory deadline for that call;
    leaving it out inherits the factory deadline

The configuration is validated once (pydantic) and frozen. Every bound method
reads it by reference; instances share no mutable state.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from safe_result.aggregate import Operations, safe_all, safe_all_settled
from safe_result.core import (
    build_hooks,
    run_async,
    run_sync,
    thunk_call,
    wrap_async_with_hooks,
    wrap_with_hooks,
)
from safe_result.hooks import UNSET, HookErrorHandler, Hooks, merge_hooks
from safe_result.result import Result
from safe_result.retry import RetryConfig

T = TypeVar("T")


class SafeConfig(BaseModel):
    """
    Factory configuration.

    `parse_error` and `default_error` are required: every error produced by
    the instance comes from `parse_error`, or is `default_error` when the
    mapper itself fails.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    parse_error: Callable[[Any], Any] = Field(description="Maps any caught value to the error type")
    default_error: Any = Field(description="Error used when parse_error raises")
    parse_result: Callable[[Any], Any] | None = Field(default=None, description="Default success transform")
    on_success: Callable[..., Any] | None = None
    on_error: Callable[..., Any] | None = None
    on_settled: Callable[..., Any] | None = None
    on_retry: Callable[..., Any] | None = None
    on_hook_error: Callable[..., Any] | None = None
    retry: RetryConfig | None = Field(default=None, description="Default retry policy for async calls")
    abort_after: int | float | None = Field(
        default=None,
        description="Default per-attempt deadline for async calls, in milliseconds",
    )

    @field_validator("default_error")
    @classmethod
    def default_error_truthy(cls, value: Any) -> Any:
        """An Err never carries a falsy error, so neither may its fallback."""
        if not value:
            raise ValueError(f"default_error must be truthy, got {value!r}")
        return value

    @field_validator("abort_after")
    @classmethod
    def abort_after_not_negative(cls, value: int | float | None) -> int | float | None:
        if value is not None and value < 0:
            raise ValueError("abort_after must be a non-negative number of milliseconds")
        return value

    def default_hooks(self) -> Hooks:
        return Hooks(
            parse_result=self.parse_result,
            on_success=self.on_success,
            on_error=self.on_error,
            on_settled=self.on_settled,
            on_retry=self.on_retry,
            on_hook_error=self.on_hook_error,
            default_error=self.default_error,
            retry=self.retry,
            abort_after=self.abort_after,
        )


class SafeInstance:
    """
    The six call shapes with the factory's parse_error and defaults pre-applied.

    Created by `create_safe`; methods mirror the `safe` namespace but take no
    `parse_error` argument.
    """

    def __init__(self, config: SafeConfig) -> None:
        self._config = config
        self._defaults = config.default_hooks()

    @property
    def config(self) -> SafeConfig:
        return self._config

    def _merge(self, **options: Any) -> Hooks:
        return merge_hooks(self._defaults, build_hooks(**options))

    def sync(
        self,
        fn: Callable[[], T],
        *,
        parse_result: Callable[[Any], Any] | None = None,
        on_success: Callable[..., Any] | None = None,
        on_error: Callable[..., Any] | None = None,
        on_settled: Callable[..., Any] | None = None,
        on_hook_error: HookErrorHandler | None = None,
        default_error: Any = UNSET,
    ) -> Result[Any, Any]:
        hooks = self._merge(
            parse_result=parse_result,
            on_success=on_success,
            on_error=on_error,
            on_settled=on_settled,
            on_hook_error=on_hook_error,
            default_error=default_error,
        )
        return run_sync(fn, (), self._config.parse_error, hooks)

    async def async_(
        self,
        thunk: Callable[..., Awaitable[T]],
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
    ) -> Result[Any, Any]:
        hooks = self._merge(
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
        return await run_async(thunk_call(thunk), (), self._config.parse_error, hooks)

    def wrap(
        self,
        fn: Callable[..., T],
        *,
        parse_result: Callable[[Any], Any] | None = None,
        on_success: Callable[..., Any] | None = None,
        on_error: Callable[..., Any] | None = None,
        on_settled: Callable[..., Any] | None = None,
        on_hook_error: HookErrorHandler | None = None,
        default_error: Any = UNSET,
    ) -> Callable[..., Result[Any, Any]]:
        hooks = self._merge(
            parse_result=parse_result,
            on_success=on_success,
            on_error=on_error,
            on_settled=on_settled,
            on_hook_error=on_hook_error,
            default_error=default_error,
        )
        return wrap_with_hooks(fn, self._config.parse_error, hooks)

    def wrap_async(
        self,
        fn: Callable[..., Awaitable[T]],
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
    ) -> Callable[..., Awaitable[Result[Any, Any]]]:
        hooks = self._merge(
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
        return wrap_async_with_hooks(fn, self._config.parse_error, hooks)

    async def all(self, operations: Operations) -> Result[dict[str, Any], Any]:
        return await safe_all(operations)

    async def all_settled(self, operations: Operations) -> dict[str, Result[Any, Any]]:
        return await safe_all_settled(operations)

    def __repr__(self) -> str:
        return f"SafeInstance(default_error={self._config.default_error!r})"


def create_safe(config: SafeConfig | None = None, **options: Any) -> SafeInstance:
    """
    Build a SafeInstance from a SafeConfig or from keyword options.

    Raises pydantic.ValidationError on malformed configuration, so mistakes
    surface when the instance is created rather than on first use.
    """
    if config is None:
        config = SafeConfig(**options)
    elif options:
        raise TypeError("create_safe takes either a SafeConfig or keyword options, not both")
    return SafeInstance(config)
