"""Composable, immutable pipelines over a (value, context) pair.

Public surface::

    from amino import (
        pipeline,
        Pipeline,
        Outcome,
        ok,
        err,
        Ok,
        Err,
        Result,
        trycatch,
        PipelineContext,
        EngineConfig,
        make_extension,
        ExtensionPipeline,
        PipelineError,
        StepError,
        AssertionFailedError,
        PipelineConfigError,
    )
"""

from .config import EngineConfig
from .context import PipelineContext
from .errors import (
    AssertionFailedError,
    PipelineConfigError,
    PipelineError,
    StepError,
)
from .extension import ExtensionPipeline, make_extension
from .pipeline import UNSET, Outcome, Pipeline, pipeline
from .result import Err, Ok, Result, err, ok
from .trycatch import trycatch

__all__ = [
    "pipeline",
    "Pipeline",
    "Outcome",
    "UNSET",
    "ok",
    "err",
    "Ok",
    "Err",
    "Result",
    "trycatch",
    "PipelineContext",
    "EngineConfig",
    "make_extension",
    "ExtensionPipeline",
    "PipelineError",
    "StepError",
    "AssertionFailedError",
    "PipelineConfigError",
]
