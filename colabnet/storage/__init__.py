"""
Snapshot storage and persistence layer.

Provides the snapshot codec, the loaded database and the storage stage.
"""

from colabnet.storage.database import ColabNetDatabase
from colabnet.storage.snapshot import SnapshotCodec
from colabnet.storage.manager import SnapshotStore

__all__ = [
    "ColabNetDatabase",
    "SnapshotCodec",
    "SnapshotStore",
]
