"""Ok/Err values for operations that can fail in expected ways.

Record, git and filesystem operations hand their failures back as data
rather than raising, so a command can report them and pick an exit code
in one place:

    match codec.load(path):
        case Ok(text):
            ...
        case Err(NotFound(path=p)):
            console.error(f"no record at {p}")

Steps that feed into each other chain with ``and_then``; the first
``Err`` short-circuits the rest.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Never

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def unwrap(self) -> T:
        return self.value

    def unwrap_or[D](self, default: D) -> T:
        return self.value

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def and_then[U, F](self, f: Callable[[T], Result[U, F]]) -> Result[U, F]:
        return f(self.value)


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def unwrap(self) -> Never:
        """Raises ValueError; only for tests and call sites that already checked."""
        raise ValueError(f"unwrap() on Err: {self.error!r}")

    def unwrap_or[D](self, default: D) -> D:
        return default

    def map[U](self, f: Callable[[object], U]) -> Err[E]:
        return self

    def and_then[U, F](self, f: Callable[[object], Result[U, F]]) -> Err[E]:
        return self


type Result[T, E] = Ok[T] | Err[E]
