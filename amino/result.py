"""Two-variant result type returned by every pipeline run.

Callers branch with ``isinstance`` or the ``is_ok`` / ``is_err`` flags::

    result = await pipe.run(5)
    if isinstance(result, Err):
        handle(result.error)
    else:
        use(result.value)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeAlias, TypeVar

from .errors import StepError

V = TypeVar("V")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[V]):
    value: V

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def unwrap(self) -> V:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error


Result: TypeAlias = Ok[V] | Err[E]


def ok(value: V) -> Ok[V]:
    return Ok(value)


def err(error: Exception | str) -> Err[Exception]:
    """Build a failure; a bare message becomes a :class:`StepError`."""
    if isinstance(error, str):
        return Err(StepError(error))
    if not isinstance(error, Exception):
        raise TypeError(
            f"err() expects an exception or a message (type={type(error).__name__})"
        )
    return Err(error)
