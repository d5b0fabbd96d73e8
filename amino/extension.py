"""Framework extensions: pipelines that finish with a bound action.

An extension is created from some framework object (an HTTP request, a CLI
invocation, ...).  It builds the initial context from that object, lets the
caller chain steps as usual, and ends with :meth:`ExtensionPipeline.complete`,
which runs the pipeline and hands the result to the extension's handler::

    respond = make_extension(
        lambda request: RequestContext(request=request),
        to_json_response,
        cls=ResponsePipeline,
    )

    async def handler(request):
        return await respond(request).step(load_user).response()

Subclasses add named action methods explicitly (``response`` above); the
wrapper forwards every chaining call to an inner immutable
:class:`~amino.pipeline.Pipeline` and returns a new wrapper of its own class.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Generic, Self, TypeVar

from .config import EngineConfig
from .errors import PipelineConfigError
from .pipeline import UNSET, Outcome, Pipeline, pipeline
from .result import Result
from .steps import AssertFunction, ContextFunction, StepFunction, resolve

S = TypeVar("S")

ActionHandler = Callable[[Result, Any], Any]


class ExtensionPipeline(Generic[S]):
    """Pipeline wrapper carrying a source object and a completion handler.

    Args:
        inner: The wrapped pipeline node.
        source: The object the extension was created from.
        handler: Called as ``handler(result, initial_context)`` by
            :meth:`complete`.  ``None`` makes ``complete`` return the bare
            result.
    """

    __slots__ = ("_inner", "source", "_handler")

    def __init__(
        self,
        inner: Pipeline[Any, Any],
        source: S,
        handler: ActionHandler | None = None,
    ) -> None:
        self._inner = inner
        self.source = source
        self._handler = handler

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._inner!r})"

    @property
    def pipeline(self) -> Pipeline[Any, Any]:
        return self._inner

    @property
    def initial_context(self) -> Any:
        return self._inner.initial_context

    def _wrap(self, inner: Pipeline[Any, Any]) -> Self:
        return type(self)(inner, self.source, self._handler)

    # ------------------------------------------------------------------
    # Chaining (forwarded, re-wrapped)
    # ------------------------------------------------------------------

    def step(self, fn: StepFunction) -> Self:
        return self._wrap(self._inner.step(fn))

    def context(self, fn: ContextFunction) -> Self:
        return self._wrap(self._inner.context(fn))

    def assert_(self, predicate: AssertFunction, message: str | None = None) -> Self:
        return self._wrap(self._inner.assert_(predicate, message))

    def fails_with(
        self,
        factory_or_message: Callable[[str], Exception] | str,
        message: str | None = None,
    ) -> Self:
        return self._wrap(self._inner.fails_with(factory_or_message, message))

    def branch(self) -> Self:
        return self._wrap(self._inner.branch())

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def compile(self, context: Any = UNSET) -> Callable[..., Awaitable[Result]]:
        return self._inner.compile(context)

    async def run(self, value: Any = UNSET) -> Result:
        return await self._inner.run(value)

    async def execute(self, value: Any = UNSET, context: Any = UNSET) -> Outcome:
        return await self._inner.execute(value, context)

    async def complete(self, value: Any = UNSET) -> Any:
        """Run the pipeline and pass the result to the bound handler.

        The handler receives the initial context, the one built from
        ``source``, regardless of context steps along the chain.
        """
        result = await self._inner.run(value)
        if self._handler is None:
            return result
        return await resolve(self._handler(result, self._inner.initial_context))


def make_extension(
    context_factory: Callable[[S], Any],
    handler: ActionHandler | None = None,
    *,
    cls: type[ExtensionPipeline[S]] = ExtensionPipeline,
    config: EngineConfig | None = None,
) -> Callable[[S], ExtensionPipeline[S]]:
    """Return ``factory(source)`` creating extension pipelines.

    Args:
        context_factory: Builds the initial context from the source object.
            Must be synchronous.
        handler: Completion handler, ``handler(result, initial_context)``.
        cls: Wrapper class to instantiate; subclasses add action methods.
        config: Engine settings for every pipeline the factory creates.
    """
    if not callable(context_factory):
        raise PipelineConfigError(
            f"context_factory must be callable (type={type(context_factory).__name__})"
        )
    if handler is not None and not callable(handler):
        raise PipelineConfigError(
            f"handler must be callable (type={type(handler).__name__})"
        )
    if not (isinstance(cls, type) and issubclass(cls, ExtensionPipeline)):
        raise PipelineConfigError("cls must be an ExtensionPipeline subclass")

    def factory(source: S) -> ExtensionPipeline[S]:
        initial_context = context_factory(source)
        if inspect.isawaitable(initial_context):
            if inspect.iscoroutine(initial_context):
                initial_context.close()
            raise PipelineConfigError("context_factory must not be async")
        return cls(pipeline(initial_context, config=config), source, handler)

    return factory
