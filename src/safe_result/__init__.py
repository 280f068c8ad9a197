"""
safe_result — call fallible code and get a (data, error) Result back, never an exception.

    from safe_result import safe, create_safe, RetryConfig

    data, error = safe.sync(lambda: json.loads(raw))
    if error:
        ...

    user, error = await safe.async_(
        lambda signal: client.get_user("42", signal=signal),
        retry=RetryConfig(times=2, wait_before=lambda attempt: attempt * 100),
        abort_after=5_000,
    )

    results = await safe.all_settled({
        "user": safe.async_(load_user),
        "posts": safe.async_(load_posts),
    })
"""

from safe_result.result import Result, Ok, Err, ok, err
from safe_result.errors import (
    AbortError,
    HookName,
    NormalizedError,
    OperationTimeoutError,
    SafeError,
    to_error,
)
from safe_result.hooks import UNSET, Hooks
from safe_result.normalize import normalize_error
from safe_result.retry import RetryConfig
from safe_result.cancellation import AbortController, AbortSignal
from safe_result.aggregate import safe_all, safe_all_settled
from safe_result.core import Safe, safe, safe_async, safe_sync, wrap, wrap_async
from safe_result.factory import SafeConfig, SafeInstance, create_safe
from safe_result.objects import ObjectSafeInstance, ResultObject, err_obj, ok_obj, with_objects
from safe_result.config import SafeSettings
from safe_result.log_config import configure_structlog
from safe_result.assertions import ResultAssertions

__all__ = [
    "Result",
    "Ok",
    "Err",
    "ok",
    "err",
    "AbortError",
    "HookName",
    "NormalizedError",
    "OperationTimeoutError",
    "SafeError",
    "to_error",
    "UNSET",
    "Hooks",
    "normalize_error",
    "RetryConfig",
    "AbortController",
    "AbortSignal",
    "safe_all",
    "safe_all_settled",
    "Safe",
    "safe",
    "safe_async",
    "safe_sync",
    "wrap",
    "wrap_async",
    "SafeConfig",
    "SafeInstance",
    "create_safe",
    "ObjectSafeInstance",
    "ResultObject",
    "err_obj",
    "ok_obj",
    "with_objects",
    "SafeSettings",
    "configure_structlog",
    "ResultAssertions",
]

__version__ = "1.0.0"
