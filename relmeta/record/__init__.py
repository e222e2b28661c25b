"""Release record: model, codec, store."""

from .codec import RecordCodec, Span
from .model import BumpLevel, Milestone, ReleaseRecord, SemVer
from .store import LoadedRecord, load, persist

__all__ = [
    "BumpLevel",
    "LoadedRecord",
    "Milestone",
    "RecordCodec",
    "ReleaseRecord",
    "SemVer",
    "Span",
    "load",
    "persist",
]
