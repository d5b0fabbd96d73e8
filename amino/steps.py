"""Step construction: turns user functions into uniform pipeline steps.

Every step is an async callable ``(value, context) -> (Result, context)``.
The builder only ever stores steps; it never sees the user functions again.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeAlias, TypeVar

from .errors import AssertionFailedError, PipelineConfigError
from .result import Err, Ok, Result

T = TypeVar("T")

Step: TypeAlias = Callable[[Any, Any], Awaitable[tuple[Result, Any]]]

StepFunction: TypeAlias = Callable[[Any, Any], Result | Awaitable[Result]]
ContextFunction: TypeAlias = Callable[[Any, Any], Any]
AssertFunction: TypeAlias = Callable[[Any, Any], bool | Awaitable[bool]]


async def resolve(obj: T | Awaitable[T]) -> T:
    """Await ``obj`` if (and only if) it is awaitable."""
    # Coroutines are by far the common case; check the concrete type first.
    if isinstance(obj, Coroutine) or inspect.isawaitable(obj):
        return await obj
    return obj


def _require_callable(fn: Any, kind: str) -> None:
    if not callable(fn):
        raise PipelineConfigError(
            f"{kind} function must be callable (type={type(fn).__name__})"
        )


def transform_step(fn: StepFunction) -> Step:
    """Wrap ``fn(value, context) -> Result``; the context passes through."""
    _require_callable(fn, "Step")

    async def run_transform(value: Any, context: Any) -> tuple[Result, Any]:
        result = await resolve(fn(value, context))
        if not isinstance(result, (Ok, Err)):
            raise TypeError(
                f"Step {_describe(fn)} must return ok(...) or err(...), "
                f"got {type(result).__name__}"
            )
        return result, context

    return run_transform


def context_step(fn: ContextFunction) -> Step:
    """Wrap ``fn(context, value) -> new_context``; never fails by itself."""
    _require_callable(fn, "Context")

    async def run_context(value: Any, context: Any) -> tuple[Result, Any]:
        new_context = await resolve(fn(context, value))
        return Ok(value), new_context

    return run_context


def assert_step(predicate: AssertFunction, message: str) -> Step:
    """Wrap a predicate as a pass-through step failing with ``message``."""
    _require_callable(predicate, "Assert")

    async def run_assert(value: Any, context: Any) -> tuple[Result, Any]:
        passed = await resolve(predicate(value, context))
        if not passed:
            return Err(AssertionFailedError(message)), context
        return Ok(value), context

    return run_assert


def _describe(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or type(fn).__name__
