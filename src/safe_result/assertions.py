"""
Test assertions for Result values.

Provides expressive assert helpers with clear failure messages.

Usage in tests:
    from safe_result import ResultAssertions

    def test_parse_port():
        value = ResultAssertions.assert_ok(parse_port("8080"))
        assert value == 8080

    def test_rejects_garbage():
        ResultAssertions.assert_err_type(parse_port("x"), ValueError)
"""

from __future__ import annotations

from typing import Any

from safe_result.result import Result


class ResultAssertions:
    """Expressive test assertions for Result values."""

    @staticmethod
    def assert_ok(result: Result[Any, Any], message: str = "") -> Any:
        """
        Assert the Result is Ok and return the value.

            value = ResultAssertions.assert_ok(result)
        """
        context = f" — {message}" if message else ""
        assert result.ok, f"Expected Ok but got Err({result.error!r}){context}"
        assert result.error is None, f"Ok result carries an error: {result.error!r}{context}"
        return result.value

    @staticmethod
    def assert_err(result: Result[Any, Any], message: str = "") -> Any:
        """
        Assert the Result is Err and return the error.

            error = ResultAssertions.assert_err(result)
        """
        context = f" — {message}" if message else ""
        assert not result.ok, f"Expected Err but got Ok({result.value!r}){context}"
        assert result.value is None, f"Err result carries data: {result.value!r}{context}"
        return result.error

    @staticmethod
    def assert_err_type(result: Result[Any, Any], expected_type: type) -> Any:
        """Assert the Result is Err and its error is an instance of `expected_type`."""
        error = ResultAssertions.assert_err(result)
        assert isinstance(error, expected_type), (
            f"Expected error of type {expected_type.__name__} "
            f"but got {type(error).__name__}: {error!r}"
        )
        return error

    @staticmethod
    def assert_ok_value(result: Result[Any, Any], expected_value: Any) -> None:
        """Assert the Result is Ok with the specific value."""
        value = ResultAssertions.assert_ok(result)
        assert value == expected_value, (
            f"Expected Ok value {expected_value!r} but got {value!r}"
        )
