"""Synchronizers and the pipeline they share."""

from .pipeline import RunReport, RunState, SyncPipeline, Transformation
from .service import SyncService

__all__ = [
    "RunReport",
    "RunState",
    "SyncPipeline",
    "SyncService",
    "Transformation",
]
