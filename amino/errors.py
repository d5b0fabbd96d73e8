"""Error hierarchy for the pipeline engine."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for every error the engine itself creates.

    Errors produced by an error transformer keep the raw failure on
    ``__cause__``; ``cause`` is a read-only alias for it.
    """

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class StepError(PipelineError):
    """A transform step returned ``err("...")`` with a plain message."""


class AssertionFailedError(PipelineError):
    """An assertion step's predicate evaluated falsy."""


class PipelineConfigError(PipelineError, ValueError):
    """Raised at build time when a pipeline is wired incorrectly."""
