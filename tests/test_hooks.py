"""Tests for hook isolation and the default/per-call merge rules."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

from safe_result import UNSET, Hooks
from safe_result.hooks import call_hook, dispatch_error, dispatch_success, merge_hooks
from safe_result.errors import HookName


class TestCallHook:
    def test_invokes_hook_with_args(self):
        hook = MagicMock()
        call_hook(HookName.ON_SUCCESS, hook, 1, ())
        hook.assert_called_once_with(1, ())

    def test_missing_hook_is_noop(self):
        call_hook(HookName.ON_SUCCESS, None, 1, ())

    def test_raising_hook_is_reported(self):
        exc = RuntimeError("hook broke")
        on_hook_error = MagicMock()

        def hook(*_):
            raise exc

        call_hook(HookName.ON_ERROR, hook, "e", (), on_hook_error=on_hook_error)
        on_hook_error.assert_called_once_with(exc, "on_error")

    def test_raising_hook_without_reporter_is_dropped(self):
        def hook(*_):
            raise RuntimeError("hook broke")

        call_hook(HookName.ON_ERROR, hook, "e", ())

    def test_raising_hook_is_logged_at_debug(self, caplog):
        def hook(*_):
            raise RuntimeError("hook broke")

        with caplog.at_level(logging.DEBUG, logger="safe_result.hooks"):
            call_hook(HookName.ON_SETTLED, hook, None, None, ())
        record = caplog.records[-1]
        assert record.name == "safe_result.hooks"
        assert record.levelno == logging.DEBUG
        assert "on_settled" in record.getMessage()

    def test_raising_reporter_is_dropped(self):
        def hook(*_):
            raise RuntimeError("hook broke")

        def reporter(*_):
            raise RuntimeError("reporter broke")

        call_hook(HookName.ON_ERROR, hook, "e", (), on_hook_error=reporter)


class TestDispatch:
    def test_success_order(self, recorder):
        hooks = Hooks(on_success=recorder.hook("on_success"), on_settled=recorder.hook("on_settled"))
        dispatch_success(hooks, 5, ("ctx",))
        assert recorder.calls == [
            ("on_success", (5, ("ctx",))),
            ("on_settled", (5, None, ("ctx",))),
        ]

    def test_error_order(self, recorder):
        hooks = Hooks(on_error=recorder.hook("on_error"), on_settled=recorder.hook("on_settled"))
        dispatch_error(hooks, "boom", ())
        assert recorder.calls == [
            ("on_error", ("boom", ())),
            ("on_settled", (None, "boom", ())),
        ]

    def test_failing_on_success_does_not_skip_on_settled(self, recorder):
        def broken(*_):
            raise RuntimeError("x")

        hooks = Hooks(on_success=broken, on_settled=recorder.hook("on_settled"))
        dispatch_success(hooks, 1, ())
        assert recorder.names == ["on_settled"]


class TestMergeHooks:
    def test_default_runs_before_per_call(self, recorder):
        merged = merge_hooks(
            Hooks(on_success=recorder.hook("default")),
            Hooks(on_success=recorder.hook("per_call")),
        )
        merged.on_success(1, ())
        assert recorder.names == ["default", "per_call"]

    def test_failing_default_does_not_skip_per_call(self, recorder):
        def broken(*_):
            raise RuntimeError("default broke")

        on_hook_error = MagicMock()
        merged = merge_hooks(
            Hooks(on_retry=broken, on_hook_error=on_hook_error),
            Hooks(on_retry=recorder.hook("per_call")),
        )
        merged.on_retry("e", 1, ())
        assert recorder.names == ["per_call"]
        assert on_hook_error.call_args.args[1] == "on_retry"

    def test_single_side_is_used_directly(self, recorder):
        hook = recorder.hook("only")
        merged = merge_hooks(Hooks(), Hooks(on_error=hook))
        assert merged.on_error is hook

    def test_on_hook_error_is_replaced(self):
        default_reporter, per_call_reporter = MagicMock(), MagicMock()
        merged = merge_hooks(Hooks(on_hook_error=default_reporter), Hooks(on_hook_error=per_call_reporter))
        assert merged.on_hook_error is per_call_reporter

    def test_on_hook_error_inherited(self):
        reporter = MagicMock()
        merged = merge_hooks(Hooks(on_hook_error=reporter), Hooks())
        assert merged.on_hook_error is reporter

    def test_parse_result_overrides(self):
        merged = merge_hooks(Hooks(parse_result=str), Hooks(parse_result=len))
        assert merged.parse_result is len

    def test_retry_and_abort_after_inherit_when_unset(self):
        merged = merge_hooks(Hooks(retry="factory", abort_after=100), Hooks())
        assert merged.retry == "factory"
        assert merged.abort_after == 100

    def test_explicit_none_disables_abort_after(self):
        merged = merge_hooks(Hooks(abort_after=100), Hooks(abort_after=None))
        assert merged.abort_after is None
        assert merged.resolved_abort_after is None

    def test_default_error_override(self):
        merged = merge_hooks(Hooks(default_error="factory"), Hooks(default_error="call"))
        assert merged.default_error == "call"
        assert merge_hooks(Hooks(default_error="factory"), Hooks()).default_error == "factory"

    def test_unset_resolves_to_none(self):
        hooks = Hooks()
        assert hooks.retry is UNSET
        assert hooks.resolved_retry is None
