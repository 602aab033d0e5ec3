"""
Snapshot processing module.

Writes snapshot images to disk and decodes them for inspection.
"""

from .snapshot_writer import SnapshotWriter

__all__ = [
    "SnapshotWriter"
]
