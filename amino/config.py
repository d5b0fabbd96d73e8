"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .errors import PipelineConfigError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by every node derived from one root pipeline.

    Attributes:
        assertion_message: Message used by ``assert_`` when none is given
            (default: "Assertion failed").
        trace_steps: Emit a DEBUG record for every executed step (default: False).
        log_unexpected: Log exceptions raised by step functions at WARNING,
            with traceback, before they are returned as failures (default: True).
    """

    assertion_message: str = "Assertion failed"
    trace_steps: bool = False
    log_unexpected: bool = True

    @classmethod
    def from_env(
        cls,
        env_file: str | Path | None = None,
        *,
        prefix: str = "AMINO_",
    ) -> EngineConfig:
        """Build a config from environment variables.

        ``env_file`` (or a ``.env`` found from the working directory) is loaded
        first; variables already present in the environment win.
        """
        if env_file is None:
            env_file = find_dotenv(usecwd=True) or None
        if env_file is not None:
            load_dotenv(env_file, override=False)

        defaults = cls()
        return cls(
            assertion_message=os.environ.get(
                f"{prefix}ASSERTION_MESSAGE", defaults.assertion_message
            ),
            trace_steps=_env_flag(f"{prefix}TRACE_STEPS", defaults.trace_steps),
            log_unexpected=_env_flag(
                f"{prefix}LOG_UNEXPECTED", defaults.log_unexpected
            ),
        )


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise PipelineConfigError(f"{name} must be a boolean flag, got {raw!r}")
