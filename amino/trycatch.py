"""Adapter from exception-raising callables to :class:`~amino.result.Result`."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from .result import Err, Ok, Result


def trycatch(fn: Callable[[], Any]) -> Result | Coroutine[Any, Any, Result]:
    """Call ``fn()`` and capture its outcome as a Result.

    A synchronous return becomes ``Ok`` and a raised exception becomes
    ``Err``.  When ``fn`` returns an awaitable, a coroutine is returned
    instead; awaiting it yields the Result of the awaited value::

        parsed = trycatch(lambda: json.loads(raw))
        fetched = await trycatch(lambda: client.get(url))

    Only ``Exception`` subclasses are captured, so cancellation and
    interpreter exits still propagate.
    """
    try:
        value = fn()
    except Exception as exc:
        return Err(exc)

    if inspect.isawaitable(value):
        return _settle(value)
    return Ok(value)


async def _settle(awaitable: Awaitable[Any]) -> Result:
    try:
        return Ok(await awaitable)
    except Exception as exc:
        return Err(exc)
