"""
Result — the (data, error) pair returned by every safe call.

A Result is either Ok(value) or Err(error). Both are two-element tuples
underneath, so they destructure positionally and compare equal to plain
tuples, while attributes give tagged access to the same two slots:

    data, error = safe.sync(lambda: int("42"))      # (42, None)

    result = safe.sync(lambda: int("nope"))
    result.ok        # False
    result.error     # ValueError("invalid literal for int() ...")

      thunk ──returns──→ Ok(value)    == (value, None)
        │
        └────raises────→ Err(error)   == (None, error)

The `ok` flag is the discriminant: Ok(None) is a valid success, while an Err
never carries a falsy error, so `if error:` is a reliable failure check.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")
R = TypeVar("R")


class Result(tuple, Generic[T, E]):
    """
    Immutable two-shape result.

    Positional projection: result[0] is the data slot, result[1] the error slot.
    Named projection: .ok, .value (alias .data), .error.

        >>> ok(42) == (42, None)
        True
        >>> err("boom").error
        'boom'
    """

    __slots__ = ()

    # ──────────────────────── Introspection ────────────────────────

    @property
    def ok(self) -> bool:
        """True for Ok, False for Err."""
        return isinstance(self, Ok)

    @property
    def value(self) -> T | None:
        """The success value, or None on Err."""
        return self[0]

    @property
    def data(self) -> T | None:
        """Alias of `value`, matching the object-shaped result."""
        return self[0]

    @property
    def error(self) -> E | None:
        """The error, or None on Ok."""
        return self[1]

    # ──────────────────────── Destructors ────────────────────────

    def either(
        self,
        on_ok: Callable[[T], R],
        on_err: Callable[[E], R],
    ) -> R:
        """
        Apply one of two functions depending on the variant.

            result.either(
                on_ok=lambda user: f"Hello {user.name}",
                on_err=lambda error: f"Error: {error}",
            )
        """
        match self:
            case Ok(v):
                return on_ok(v)
            case Err(e):
                return on_err(e)
        raise TypeError("unreachable")  # pragma: no cover

    def get_or_else(self, default: T) -> T:
        """Extract the value or return a default on Err."""
        match self:
            case Ok(v):
                return v
            case _:
                return default

    # ──────────────────────── Dunder methods ────────────────────────

    def __bool__(self) -> bool:
        """Allow truthiness check: `if result: ...` holds only on Ok."""
        return self.ok


class Ok(Result[T, E]):
    """The success variant — (value, None)."""

    __slots__ = ()
    __match_args__ = ("value",)

    def __new__(cls, value: T) -> Ok[T, E]:
        return tuple.__new__(cls, (value, None))

    def __getnewargs__(self) -> tuple[Any, ...]:
        return (self[0],)

    def __repr__(self) -> str:
        return f"Ok({self[0]!r})"


class Err(Result[T, E]):
    """The failure variant — (None, error)."""

    __slots__ = ()
    __match_args__ = ("error",)

    def __new__(cls, error: E) -> Err[T, E]:
        if not error:
            raise TypeError(f"Err error must be truthy, got {error!r}")
        return tuple.__new__(cls, (None, error))

    def __getnewargs__(self) -> tuple[Any, ...]:
        return (self[1],)

    def __repr__(self) -> str:
        return f"Err({self[1]!r})"


def ok(value: T) -> Ok[T, Any]:
    """Build a success result. Used by adapters that construct results by hand."""
    return Ok(value)


def err(error: E) -> Err[Any, E]:
    """Build a failure result. Raises TypeError when `error` is falsy."""
    return Err(error)
