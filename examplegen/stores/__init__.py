"""On-disk stores used by examplegen."""

from .snapshot import SnapshotStore

__all__ = ["SnapshotStore"]
