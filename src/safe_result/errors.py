"""
Error types produced by the engine itself.

Everything the wrapped operation raises is the caller's business and flows
through untouched (or through `parse_error`). The engine only adds:

  - NormalizedError      — wraps a caught value that is not an Exception
  - OperationTimeoutError — an attempt outlived its `abort_after` deadline
  - AbortError           — raised by AbortSignal.raise_if_aborted()

and the HookName enum used to report failing callbacks to `on_hook_error`.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any


@unique
class HookName(str, Enum):
    """
    Names reported as the second argument of `on_hook_error`.

    Members compare equal to their plain string values, so callers may write
    either `name == HookName.ON_SUCCESS` or `name == "on_success"`.
    """

    ON_SUCCESS = "on_success"
    ON_ERROR = "on_error"
    ON_SETTLED = "on_settled"
    ON_RETRY = "on_retry"
    PARSE_ERROR = "parse_error"
    WAIT_BEFORE = "wait_before"

    def __str__(self) -> str:
        return self.value


class SafeError(Exception):
    """Base class for errors created by safe_result."""


class NormalizedError(SafeError):
    """
    Generic error wrapping a caught value that was not an Exception.

    The original value is kept in `cause` for diagnostics.

    >>> NormalizedError("boom").cause
    'boom'
    """

    def __init__(self, cause: Any) -> None:
        super().__init__(str(cause))
        self.cause = cause


def _format_ms(ms: float) -> str:
    """Render 100 and 100.0 as "100", 12.5 as "12.5"."""
    if isinstance(ms, float) and ms.is_integer():
        return str(int(ms))
    return str(ms)


class OperationTimeoutError(SafeError, TimeoutError):
    """
    An attempt did not settle within its deadline.

    Subclasses the builtin TimeoutError, so `except TimeoutError` also
    catches it, while `isinstance(e, OperationTimeoutError)` tells it apart
    from timeouts raised by the operation itself.
    """

    def __init__(self, ms: float) -> None:
        super().__init__(f"Operation timed out after {_format_ms(ms)}ms")
        self.ms = ms


class AbortError(SafeError):
    """The operation observed an aborted signal."""

    def __init__(self, reason: Any = None) -> None:
        super().__init__("The operation was aborted" if reason is None else str(reason))
        self.reason = reason


def to_error(value: Any) -> Exception:
    """
    Total, non-raising normalization of a caught value.

    Exceptions pass through unchanged; anything else, including an
    exception that is falsy, is wrapped in a NormalizedError that keeps the
    raw value as `cause`. The result is always truthy.
    """
    if isinstance(value, Exception) and value:
        return value
    return NormalizedError(value)
