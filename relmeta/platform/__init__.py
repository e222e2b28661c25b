"""Platform layer: processes, files, clock."""

from .clock import Today, today_iso
from .files import LockBusyError, atomic_write_text, exclusive_lock
from .process import ProcessError, run

__all__ = [
    "LockBusyError",
    "ProcessError",
    "Today",
    "atomic_write_text",
    "exclusive_lock",
    "run",
    "today_iso",
]
