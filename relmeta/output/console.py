"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` rather than printing,
so the CLI can hand them a Rich-backed console and tests a capturing one.
Both render a message the same way: an optional label (``OK``,
``error:``, ...) followed by the text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


# Label printed before a message of the given style, if any.
_LABELS: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}

_RICH_STYLES: dict[Style, str] = {
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
}

# Written to stderr so hook and cron output keeps stdout for the summary.
_STDERR_STYLES = frozenset({Style.ERROR, Style.WARNING})


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...


class _LabelledOutput(ABC):
    """Routes the shorthand methods through a single ``_emit``."""

    @abstractmethod
    def _emit(self, message: str, style: Style) -> None:
        """Write one labelled message in ``style``."""
        ...

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit(message, style)

    def success(self, message: str) -> None:
        self._emit(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._emit(message, Style.ERROR)

    def warning(self, message: str) -> None:
        self._emit(message, Style.WARNING)

    def info(self, message: str) -> None:
        self._emit(message, Style.INFO)

    def header(self, message: str) -> None:
        self._emit(message, Style.HEADER)


class RichConsole(_LabelledOutput):
    """Production console backed by Rich.

    Messages are never interpreted as Rich markup, so record paths and
    config keys such as ``[record]`` print as written.
    """

    def __init__(self) -> None:
        from rich.console import Console

        self._out = Console(highlight=False)
        self._err = Console(stderr=True, highlight=False)

    def _emit(self, message: str, style: Style) -> None:
        from rich.text import Text

        console = self._err if style in _STDERR_STYLES else self._out
        rich_style = _RICH_STYLES.get(style, "")
        label = _LABELS.get(style)

        text = Text()
        if style == Style.HEADER:
            text.append("\n")
        if label is not None:
            text.append(label, style=rich_style)
            text.append(" ")
            text.append(message)
        else:
            text.append(message, style=rich_style)
        console.print(text)


@dataclass
class OutputRecord:
    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole(_LabelledOutput):
    """Console that records output for assertions in tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def _emit(self, message: str, style: Style) -> None:
        label = _LABELS.get(style)
        self.outputs.append(OutputRecord(f"{label} {message}" if label else message, style))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
