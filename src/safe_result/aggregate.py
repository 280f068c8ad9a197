"""
Aggregator — run a named map of safe operations concurrently.

    data, error = await safe_all({
        "user": safe_async(lambda: fetch_user(uid)),
        "posts": safe_async(lambda: fetch_posts(uid)),
    })
    data["user"], data["posts"]

    results = await safe_all_settled({...})
    results["user"].ok, results["posts"].error

`safe_all` fails with the error of the first failed entry in the mapping's
key order, not the first one to settle. `safe_all_settled` never fails as a
group. Entries may be awaitables resolving to a Result, or Results already.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Mapping

from safe_result.result import Err, Ok, Result

Operations = Mapping[str, Awaitable[Result[Any, Any]] | Result[Any, Any]]


async def _resolve(entry: Awaitable[Result[Any, Any]] | Result[Any, Any]) -> Result[Any, Any]:
    if isinstance(entry, Result):
        return entry
    return await entry


async def _gather(operations: Operations) -> dict[str, Result[Any, Any]]:
    keys = list(operations)
    results = await asyncio.gather(*(_resolve(operations[key]) for key in keys))
    return dict(zip(keys, results))


async def safe_all(operations: Operations) -> Result[dict[str, Any], Any]:
    """
    All-or-first-error combination.

    Returns Ok({key: value}) when every entry succeeds, otherwise Err with
    the error of the first failed entry by declaration order.
    """
    settled = await _gather(operations)
    for result in settled.values():
        if not result.ok:
            return Err(result.error)
    return Ok({key: result.value for key, result in settled.items()})


async def safe_all_settled(operations: Operations) -> dict[str, Result[Any, Any]]:
    """Return each entry's own Result under its key."""
    return await _gather(operations)
