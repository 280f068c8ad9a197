"""
Tests for create_safe and the SafeInstance call shapes.

Test categories:
  - Configuration validation
  - parse_error / default_error applied to every call shape
  - Merge rules between factory defaults and per-call options
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from safe_result import (
    OperationTimeoutError,
    RetryConfig,
    SafeConfig,
    SafeInstance,
    create_safe,
    ok,
)

from conftest import fail_after, flaky, resolve_after


@dataclass(frozen=True)
class AppError:
    code: str
    message: str


UNKNOWN = AppError("UNKNOWN", "unknown error")


def to_app_error(e: object) -> AppError:
    if isinstance(e, OperationTimeoutError):
        return AppError("TIMEOUT", str(e))
    return AppError(type(e).__name__, str(e))


@pytest.fixture()
def app_safe() -> SafeInstance:
    return create_safe(parse_error=to_app_error, default_error=UNKNOWN)


# ═══════════════════════════════════════════════════════════════
# 1. Configuration
# ═══════════════════════════════════════════════════════════════


class TestCreateSafe:
    def test_from_keywords(self, app_safe):
        assert isinstance(app_safe.config, SafeConfig)
        assert app_safe.config.default_error is UNKNOWN

    def test_from_config(self):
        config = SafeConfig(parse_error=to_app_error, default_error=UNKNOWN)
        assert create_safe(config).config is config

    def test_config_and_keywords_rejected(self):
        config = SafeConfig(parse_error=to_app_error, default_error=UNKNOWN)
        with pytest.raises(TypeError, match="not both"):
            create_safe(config, abort_after=10)

    def test_parse_error_required(self):
        with pytest.raises(ValidationError):
            create_safe(default_error=UNKNOWN)

    def test_default_error_required(self):
        with pytest.raises(ValidationError):
            create_safe(parse_error=to_app_error)

    def test_default_error_must_not_be_none(self):
        with pytest.raises(ValidationError, match="default_error"):
            create_safe(parse_error=to_app_error, default_error=None)

    @pytest.mark.parametrize("falsy", ["", 0, {}])
    def test_default_error_must_be_truthy(self, falsy):
        with pytest.raises(ValidationError, match="must be truthy"):
            create_safe(parse_error=to_app_error, default_error=falsy)

    def test_negative_abort_after_rejected(self):
        with pytest.raises(ValidationError):
            create_safe(parse_error=to_app_error, default_error=UNKNOWN, abort_after=-1)

    def test_retry_mapping_is_validated(self):
        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, retry={"times": 2})
        assert instance.config.retry == RetryConfig(times=2)
        with pytest.raises(ValidationError):
            create_safe(parse_error=to_app_error, default_error=UNKNOWN, retry={"times": -2})

    def test_config_is_frozen(self, app_safe):
        with pytest.raises(ValidationError):
            app_safe.config.abort_after = 5


# ═══════════════════════════════════════════════════════════════
# 2. Call shapes
# ═══════════════════════════════════════════════════════════════


class TestInstanceCalls:
    def test_sync_maps_errors(self, app_safe):
        assert app_safe.sync(lambda: int("x")).error.code == "ValueError"
        assert app_safe.sync(lambda: 3) == (3, None)

    def test_wrap_maps_errors(self, app_safe):
        lookup = app_safe.wrap(lambda d, k: d[k])
        assert lookup({"a": 1}, "a") == (1, None)
        assert lookup({}, "b").error == AppError("KeyError", "'b'")

    @pytest.mark.asyncio
    async def test_async_maps_errors(self, app_safe):
        result = await app_safe.async_(lambda: fail_after(1, ConnectionError("down")))
        assert result.error == AppError("ConnectionError", "down")

    @pytest.mark.asyncio
    async def test_wrap_async_maps_errors(self, app_safe):
        async def get(key):
            raise LookupError(key)

        safe_get = app_safe.wrap_async(get)
        assert (await safe_get("k")).error == AppError("LookupError", "k")

    @pytest.mark.asyncio
    async def test_all_and_all_settled(self, app_safe):
        assert await app_safe.all({"a": ok(1)}) == ({"a": 1}, None)
        settled = await app_safe.all_settled({"a": app_safe.async_(lambda: resolve_after(1, "x"))})
        assert settled["a"] == ("x", None)

    def test_failing_parse_error_uses_default_error(self):
        on_hook_error = MagicMock()

        def broken(_):
            raise RuntimeError("mapper broke")

        instance = create_safe(parse_error=broken, default_error=UNKNOWN, on_hook_error=on_hook_error)
        assert instance.sync(lambda: 1 / 0).error is UNKNOWN
        assert on_hook_error.call_args.args[1] == "parse_error"

    def test_per_call_default_error_overrides(self):
        def broken(_):
            raise RuntimeError("mapper broke")

        instance = create_safe(parse_error=broken, default_error=UNKNOWN)
        fallback = AppError("CALL", "per call")
        assert instance.sync(lambda: 1 / 0, default_error=fallback).error is fallback
        assert instance.sync(lambda: 1 / 0, default_error=None).error is UNKNOWN


# ═══════════════════════════════════════════════════════════════
# 3. Merge rules
# ═══════════════════════════════════════════════════════════════


class TestMerging:
    def test_default_hooks_run_before_per_call(self, recorder):
        instance = create_safe(
            parse_error=to_app_error,
            default_error=UNKNOWN,
            on_success=recorder.hook("default.on_success"),
            on_settled=recorder.hook("default.on_settled"),
        )
        instance.sync(lambda: 1, on_success=recorder.hook("call.on_success"))
        assert recorder.names == ["default.on_success", "call.on_success", "default.on_settled"]

    def test_default_hooks_receive_context(self, recorder):
        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, on_error=recorder.hook("on_error"))
        instance.wrap(lambda a, b: a / b)(1, 0)
        _, (error, context) = recorder.calls[0]
        assert error.code == "ZeroDivisionError"
        assert context == (1, 0)

    def test_failing_default_hook_does_not_skip_per_call(self, recorder):
        def broken(*_):
            raise RuntimeError("default broke")

        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, on_error=broken)
        result = instance.sync(lambda: 1 / 0, on_error=recorder.hook("call.on_error"))
        assert not result.ok
        assert recorder.names == ["call.on_error"]

    def test_per_call_parse_result_overrides(self):
        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, parse_result=str)
        assert instance.sync(lambda: 5) == ("5", None)
        assert instance.sync(lambda: 5, parse_result=lambda n: n + 1) == (6, None)

    def test_per_call_on_hook_error_replaces_default(self):
        default_reporter, call_reporter = MagicMock(), MagicMock()

        def broken(*_):
            raise RuntimeError("hook broke")

        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, on_hook_error=default_reporter)
        instance.sync(lambda: 1, on_success=broken, on_hook_error=call_reporter)
        call_reporter.assert_called_once()
        default_reporter.assert_not_called()

    @pytest.mark.asyncio
    async def test_default_retry_inherited_and_overridden(self, recorder):
        instance = create_safe(
            parse_error=to_app_error,
            default_error=UNKNOWN,
            retry=RetryConfig(times=2),
            on_retry=recorder.hook("default.on_retry"),
        )
        inherited = flaky(failures=2)
        assert (await instance.async_(inherited)).ok
        assert inherited.calls == 3

        overridden = flaky(failures=2)
        result = await instance.async_(
            overridden,
            retry={"times": 0},
            on_retry=recorder.hook("call.on_retry"),
        )
        assert result.error == AppError("RuntimeError", "fail 1")
        assert overridden.calls == 1
        assert recorder.names == ["default.on_retry", "default.on_retry"]

    @pytest.mark.asyncio
    async def test_default_retry_disabled_with_none(self):
        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, retry={"times": 3})
        thunk = flaky(failures=1)
        await instance.async_(thunk, retry=None)
        assert thunk.calls == 1

    @pytest.mark.asyncio
    async def test_default_abort_after_applies(self):
        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, abort_after=20)
        result = await instance.async_(lambda signal: resolve_after(60, "late"))
        assert result.error.code == "TIMEOUT"
        await asyncio.sleep(0.06)

    @pytest.mark.asyncio
    async def test_abort_after_none_disables_default(self):
        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, abort_after=20)
        received = []

        async def thunk(*args):
            received.extend(args)
            return await resolve_after(40, "slow but allowed")

        result = await instance.async_(thunk, abort_after=None)
        assert result == ("slow but allowed", None)
        assert received == []

    @pytest.mark.asyncio
    async def test_per_call_abort_after_overrides(self):
        instance = create_safe(parse_error=to_app_error, default_error=UNKNOWN, abort_after=10)
        result = await instance.async_(lambda signal: resolve_after(30, "ok"), abort_after=500)
        assert result == ("ok", None)

    def test_instances_do_not_share_state(self, recorder):
        first = create_safe(parse_error=to_app_error, default_error=UNKNOWN, on_success=recorder.hook("first"))
        second = create_safe(parse_error=to_app_error, default_error=UNKNOWN, on_success=recorder.hook("second"))
        first.sync(lambda: 1)
        second.sync(lambda: 2)
        first.sync(lambda: 3)
        assert recorder.names == ["first", "second", "first"]
