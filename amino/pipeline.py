"""Pipeline builder and execution engine.

A :class:`Pipeline` is an immutable prefix of a pipeline.  Every chaining
call returns a new node and leaves the receiver untouched, so any node can be
reused, branched from or run concurrently::

    base = pipeline({"base": 10}).step(lambda v, ctx: ok(v + ctx["base"]))
    doubled = base.step(lambda v, ctx: ok(v * 2))
    halved = base.step(lambda v, ctx: ok(v / 2))

    await doubled.run(5)   # Ok(value=30)
    await halved.run(5)    # Ok(value=7.5)
    await base.run(5)      # Ok(value=15)

Execution is sequential and fail-fast: the first ``Err`` stops the run and is
passed through the node's error transformer (see :meth:`Pipeline.fails_with`).
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Generic, TypeAlias, TypeVar

from .config import EngineConfig
from .errors import PipelineConfigError, PipelineError
from .result import Err, Ok, Result
from .steps import (
    AssertFunction,
    ContextFunction,
    Step,
    StepFunction,
    assert_step,
    context_step,
    resolve,
    transform_step,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")
C = TypeVar("C")
R = TypeVar("R")

ErrorTransformer: TypeAlias = Callable[[Exception], Exception]


class _Unset:
    """Marks an omitted argument, so that ``None`` stays a real value."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Outcome(Generic[V, C]):
    """Terminal state of one run.

    ``context`` is the last context successfully produced.  On failure it is
    the context that was handed to the failing step; steps after it never ran.
    """

    result: Result
    context: Any

    @property
    def ok(self) -> bool:
        return isinstance(self.result, Ok)


@dataclass(frozen=True, eq=False, repr=False)
class Pipeline(Generic[V, C]):
    """Immutable pipeline node.

    A node either owns its whole step history (``parent is None``) or only the
    steps added since a branch point, with ``parent`` pointing at the node it
    grew from.  ``flatten()`` always yields parent history first, then
    ``own_steps``.

    Build nodes with :func:`pipeline`; the constructor is not part of the
    public surface.
    """

    own_steps: tuple[Step, ...] = ()
    parent: Pipeline[Any, Any] | None = None
    error_transformer: ErrorTransformer | None = None
    initial_context: Any = None
    initial_value: Any = None
    config: EngineConfig = field(default_factory=EngineConfig)
    # Write-once: recomputing under a race yields an identical tuple.
    _flattened: tuple[Step, ...] | None = field(default=None, init=False)

    # ------------------------------------------------------------------
    # Chaining
    # ------------------------------------------------------------------

    def step(self, fn: StepFunction) -> Pipeline[Any, C]:
        """Append a transform step.

        ``fn(value, context)`` returns ``ok(new_value)`` or ``err(...)``,
        directly or as an awaitable.  The context is passed through.
        """
        return self._append(transform_step(fn))

    def context(self, fn: ContextFunction) -> Pipeline[V, Any]:
        """Append a context update step.

        ``fn(context, value)`` returns the new context (or an awaitable of
        it).  The value is passed through unchanged.
        """
        return self._append(context_step(fn))

    def assert_(
        self, predicate: AssertFunction, message: str | None = None
    ) -> Pipeline[V, C]:
        """Append a validating pass-through step.

        A falsy ``predicate(value, context)`` fails the run with an
        :class:`~amino.errors.AssertionFailedError` carrying ``message`` (or
        the configured default, "Assertion failed").
        """
        return self._append(
            assert_step(predicate, message or self.config.assertion_message)
        )

    def fails_with(
        self,
        factory_or_message: Callable[[str], Exception] | str,
        message: str | None = None,
    ) -> Pipeline[V, C]:
        """Replace the error transformer for this node and its descendants.

        ``fails_with("msg")`` wraps every failure in ``PipelineError("msg")``;
        ``fails_with(MyError, "msg")`` builds ``MyError("msg")`` instead.  In
        both cases the raw failure becomes ``__cause__``.  A later
        ``fails_with`` further down the chain replaces this one; the two are
        never composed.
        """
        if isinstance(factory_or_message, str):
            if message is not None:
                raise PipelineConfigError(
                    "fails_with(message) takes a single message; "
                    "pass an error type first to customise the error class"
                )
            transformer = _wrap_errors(PipelineError, factory_or_message)
        else:
            if not callable(factory_or_message):
                raise PipelineConfigError(
                    "fails_with() expects an error type or a message "
                    f"(type={type(factory_or_message).__name__})"
                )
            if message is None:
                raise PipelineConfigError(
                    "fails_with(factory, message) requires a message"
                )
            transformer = _wrap_errors(factory_or_message, message)

        return dataclasses.replace(self, error_transformer=transformer)

    def branch(self) -> Pipeline[V, C]:
        """Return a branch point that shares this node's step history.

        Steps chained after the branch point are stored as parent links
        instead of copies of the full history, so many branches can grow
        from one long prefix cheaply.
        """
        return dataclasses.replace(self, own_steps=(), parent=self)

    def _append(self, new_step: Step) -> Pipeline[Any, Any]:
        if self.parent is not None:
            return dataclasses.replace(self, own_steps=(new_step,), parent=self)
        return dataclasses.replace(self, own_steps=(*self.own_steps, new_step))

    # ------------------------------------------------------------------
    # Step history
    # ------------------------------------------------------------------

    def flatten(self) -> tuple[Step, ...]:
        """Full step sequence for this node, memoised after the first call."""
        cached = self._flattened
        if cached is not None:
            return cached

        # Walk up iteratively; long branch chains must not hit the recursion limit.
        segments: list[tuple[Step, ...]] = []
        node: Pipeline[Any, Any] | None = self
        while node is not None:
            if node._flattened is not None:
                segments.append(node._flattened)
                break
            segments.append(node.own_steps)
            node = node.parent

        steps = tuple(chain.from_iterable(reversed(segments)))
        object.__setattr__(self, "_flattened", steps)
        return steps

    @property
    def steps(self) -> tuple[Step, ...]:
        return self.flatten()

    def __len__(self) -> int:
        return len(self.flatten())

    def __bool__(self) -> bool:
        # An empty pipeline is still a valid pipeline.
        return True

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(steps={len(self)}, "
            f"branched={self.parent is not None}, "
            f"fails_with={self.error_transformer is not None})"
        )

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def compile(self, context: Any = UNSET) -> Callable[..., Awaitable[Result]]:
        """Bind a context and return ``async (value) -> Result``.

        The flattened steps and the context are resolved once, here; the
        returned callable can be invoked any number of times.  Omitting
        ``context`` binds the root's initial context; ``None`` is a real
        override.
        """
        steps = self.flatten()
        bound_context = self.initial_context if context is UNSET else context
        initial_value = self.initial_value

        async def compiled(value: Any = UNSET) -> Result:
            start = initial_value if value is UNSET else value
            outcome = await self._execute(steps, start, bound_context)
            return outcome.result

        return compiled

    async def run(self, value: Any = UNSET) -> Result:
        """Run with the initial context; same as ``compile()(value)``."""
        return await self.compile()(value)

    async def execute(self, value: Any = UNSET, context: Any = UNSET) -> Outcome:
        """Run and return the result together with the last good context."""
        return await self._execute(
            self.flatten(),
            self.initial_value if value is UNSET else value,
            self.initial_context if context is UNSET else context,
        )

    async def use_result(
        self,
        handler: Callable[[Result, Any], R | Awaitable[R]],
        value: Any = UNSET,
    ) -> R:
        """Run, then hand ``(result, context)`` to ``handler``.

        Returns whatever the handler returns (awaited when it is awaitable).
        Failures are not raised; the handler sees them as ``Err``.
        """
        outcome = await self.execute(value)
        return await resolve(handler(outcome.result, outcome.context))

    async def unwrap(
        self,
        handler: Callable[[Any, Any], R | Awaitable[R]] | None = None,
        value: Any = UNSET,
    ) -> Any:
        """Run and raise on failure instead of returning a Result.

        On success returns ``handler(value, context)`` (awaited when needed),
        or the bare value when no handler is given.
        """
        outcome = await self.execute(value)
        result = outcome.result
        if isinstance(result, Err):
            raise result.error
        if handler is None:
            return result.value
        return await resolve(handler(result.value, outcome.context))

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    async def _execute(
        self, steps: tuple[Step, ...], value: Any, context: Any
    ) -> Outcome:
        total = len(steps)
        trace = self.config.trace_steps
        index = 0
        try:
            for index, current in enumerate(steps, start=1):
                if trace:
                    logger.debug("Running step %d/%d", index, total)
                result, new_context = await current(value, context)
                if isinstance(result, Err):
                    logger.debug(
                        "Pipeline stopped at step %d/%d: %r",
                        index,
                        total,
                        result.error,
                    )
                    return Outcome(self._failure(result.error), context)
                value = result.value
                context = new_context
        except Exception as exc:
            if self.config.log_unexpected:
                logger.warning(
                    "Step %d/%d raised %s: %s",
                    index,
                    total,
                    type(exc).__name__,
                    exc,
                    exc_info=True,
                )
            return Outcome(self._failure(exc), context)

        return Outcome(Ok(value), context)

    def _failure(self, error: Any) -> Err[Exception]:
        if not isinstance(error, Exception):
            error = PipelineError(str(error))
        if self.error_transformer is None:
            return Err(error)
        try:
            return Err(self.error_transformer(error))
        except Exception as exc:
            logger.warning(
                "Error transformer failed (%s: %s); returning its error",
                type(exc).__name__,
                exc,
            )
            exc.__cause__ = error
            return Err(exc)


def _wrap_errors(
    factory: Callable[[str], Exception], message: str
) -> ErrorTransformer:
    def transform(original: Exception) -> Exception:
        error = factory(message)
        if not isinstance(error, Exception):
            raise TypeError(
                f"Error factory {getattr(factory, '__name__', factory)!r} "
                f"returned {type(error).__name__}, not an exception"
            )
        error.__cause__ = original
        return error

    return transform


def pipeline(
    initial_context: Any = None,
    *,
    initial_value: Any = None,
    config: EngineConfig | None = None,
) -> Pipeline[Any, Any]:
    """Create an empty root pipeline.

    Args:
        initial_context: Context used when a run does not supply one.
        initial_value: Value used when a run does not supply one.
        config: Engine settings shared by every node built from this root.
    """
    return Pipeline(
        initial_context=initial_context,
        initial_value=initial_value,
        config=config or EngineConfig(),
    )
