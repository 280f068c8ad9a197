"""
Object-shaped results — `{ok, data, error}` instead of a (data, error) tuple.

`with_objects` converts anything that produces Results:

    with_objects(ok(1))                       # ResultObject(ok=True, data=1, error=None)
    await with_objects(safe_async(fetch))     # awaitable of a Result
    parse = with_objects(wrap(json.loads))    # sync function returning a Result
    fetch = with_objects(wrap_async(get))     # async function returning a Result
    obj_safe = with_objects(create_safe(...)) # a whole instance, or the `safe` namespace

ResultObject keeps the same discriminant semantics as Result (`ok` decides,
the other slot is None) and is a plain frozen dataclass, so it serializes
with `to_dict()`.
"""

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, overload

from safe_result.aggregate import Operations
from safe_result.result import Result

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class ResultObject(Generic[T, E]):
    """Object-shaped counterpart of Result."""

    ok: bool
    data: T | None
    error: E | None

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "data": self.data, "error": self.error}


def ok_obj(value: T) -> ResultObject[T, Any]:
    return ResultObject(ok=True, data=value, error=None)


def err_obj(error: E) -> ResultObject[Any, E]:
    if not error:
        raise TypeError(f"err_obj error must be truthy, got {error!r}")
    return ResultObject(ok=False, data=None, error=error)


def to_object_result(result: Result[T, E]) -> ResultObject[T, E]:
    if result.ok:
        return ok_obj(result.value)
    return err_obj(result.error)


async def _await_object(awaitable: Awaitable[Result[T, E]]) -> ResultObject[T, E]:
    return to_object_result(await awaitable)


def _is_instance(candidate: Any) -> bool:
    return not callable(candidate) and hasattr(candidate, "sync") and hasattr(candidate, "async_")


class ObjectSafeInstance:
    """A SafeInstance (or the `safe` namespace) whose methods return ResultObjects."""

    def __init__(self, instance: Any) -> None:
        self._instance = instance

    def sync(self, fn: Callable[[], Any], *args: Any, **kwargs: Any) -> ResultObject[Any, Any]:
        return to_object_result(self._instance.sync(fn, *args, **kwargs))

    async def async_(self, thunk: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> ResultObject[Any, Any]:
        return to_object_result(await self._instance.async_(thunk, *args, **kwargs))

    def wrap(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Callable[..., ResultObject[Any, Any]]:
        wrapped = self._instance.wrap(fn, *args, **kwargs)

        @functools.wraps(fn)
        def wrapper(*call_args: Any, **call_kwargs: Any) -> ResultObject[Any, Any]:
            return to_object_result(wrapped(*call_args, **call_kwargs))

        return wrapper

    def wrap_async(
        self, fn: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
    ) -> Callable[..., Awaitable[ResultObject[Any, Any]]]:
        wrapped = self._instance.wrap_async(fn, *args, **kwargs)

        @functools.wraps(fn)
        async def wrapper(*call_args: Any, **call_kwargs: Any) -> ResultObject[Any, Any]:
            return to_object_result(await wrapped(*call_args, **call_kwargs))

        return wrapper

    async def all(self, operations: Operations) -> ResultObject[dict[str, Any], Any]:
        return to_object_result(await self._instance.all(operations))

    async def all_settled(self, operations: Operations) -> dict[str, ResultObject[Any, Any]]:
        results = await self._instance.all_settled(operations)
        return {key: to_object_result(result) for key, result in results.items()}


@overload
def with_objects(target: Result[T, E]) -> ResultObject[T, E]: ...
@overload
def with_objects(target: Awaitable[Result[T, E]]) -> Awaitable[ResultObject[T, E]]: ...
@overload
def with_objects(target: Callable[..., Result[T, E]]) -> Callable[..., ResultObject[T, E]]: ...
@overload
def with_objects(
    target: Callable[..., Awaitable[Result[T, E]]],
) -> Callable[..., Awaitable[ResultObject[T, E]]]: ...
@overload
def with_objects(target: Any) -> Any: ...


def with_objects(target: Any) -> Any:
    """Convert a Result producer into its object-shaped equivalent. Raises TypeError otherwise."""
    if isinstance(target, Result):
        return to_object_result(target)

    if _is_instance(target):
        return ObjectSafeInstance(target)

    if inspect.isawaitable(target):
        return _await_object(target)

    if inspect.iscoroutinefunction(target):

        @functools.wraps(target)
        async def async_wrapper(*args: Any, **kwargs: Any) -> ResultObject[Any, Any]:
            return to_object_result(await target(*args, **kwargs))

        return async_wrapper

    if callable(target):

        @functools.wraps(target)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            produced = target(*args, **kwargs)
            if inspect.isawaitable(produced):
                return _await_object(produced)
            return to_object_result(produced)

        return wrapper

    raise TypeError(f"with_objects: unsupported input type {type(target).__name__}")
