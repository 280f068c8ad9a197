"""
Error normalizer — turns whatever was caught into the error stored in a Result.

This is the single place where the error-slot contract is enforced:

  - no parse_error            → to_error(raw)
  - parse_error returns       → its return value
  - parse_error raises        → default_error if given, else to_error(raw);
                                the failure is reported as "parse_error"
  - parse_error returns a falsy value (None, "", 0, {}, ...)
                              → handled like a raising mapper, so an Err
                                never carries a falsy error and `if error:`
                                always holds on failure
"""

from __future__ import annotations

from typing import Any, Callable

from safe_result.errors import HookName, to_error
from safe_result.hooks import UNSET, HookErrorHandler, report_hook_error


def _fallback(raw: Any, default_error: Any) -> Any:
    if default_error is UNSET or not default_error:
        return to_error(raw)
    return default_error


def normalize_error(
    raw: Any,
    parse_error: Callable[[Any], Any] | None = None,
    *,
    default_error: Any = UNSET,
    on_hook_error: HookErrorHandler | None = None,
) -> Any:
    """
    Map a caught value to the error of a failed Result. Never raises.

        normalize_error(ValueError("x"))                          # ValueError("x")
        normalize_error(KeyError("id"), lambda e: {"code": 404})  # {"code": 404}
    """
    if parse_error is None:
        return to_error(raw)
    try:
        error = parse_error(raw)
        usable = bool(error)
    except Exception as exc:
        report_hook_error(on_hook_error, exc, HookName.PARSE_ERROR)
        return _fallback(raw, default_error)
    if not usable:
        report_hook_error(
            on_hook_error,
            TypeError(f"parse_error returned a falsy error: {error!r}"),
            HookName.PARSE_ERROR,
        )
        return _fallback(raw, default_error)
    return error
