"""Immutable context helper for pipelines that want a structured context."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Self


@dataclass(frozen=True)
class PipelineContext:
    """Frozen context object threaded alongside the pipeline value.

    The engine never inspects the context, so any object works.  This class
    is a convenience for callers who want the context to stay immutable:
    subclass it to add named fields and put ad hoc data in ``metadata``.

    Context steps never mutate the incoming context; they return
    ``ctx.replace(...)``::

        pipe = pipeline(RequestInfo(user=None)).context(
            lambda ctx, value: ctx.replace(user=value["user"])
        )
    """

    metadata: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        # Callers may pass a plain dict; store a read-only view of a copy.
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def replace(self, **changes: Any) -> Self:
        """Return a new context with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def with_metadata(self, **entries: Any) -> Self:
        """Return a new context with ``entries`` merged into ``metadata``."""
        return self.replace(metadata={**self.metadata, **entries})
