"""
Data storage layer.

The engine reads dated records through the TimeSeriesStore interface. The
SnapshotStore implementation is built per evaluation from one input
snapshot and holds no state between evaluations.
"""

from .base import TimeSeriesStore
from .snapshot_store import SnapshotStore

__all__ = [
    "TimeSeriesStore",
    "SnapshotStore",
]
