"""
Models package for filetrack.

This package provides convenient imports for all data models:
- ChangeKind: Classification of a path in a ChangeSet
- EntryKind: Kind of a directory entry
- TrackerState: Lifecycle state of a Tracker
- FileMetadata: Raw entry metadata
- FileEntry: A matched file produced by the Walker
- Fingerprint: Comparable summary of a file's state
- TraversalError: Non-fatal walk diagnostic
- Snapshot: Immutable path to Fingerprint mapping
- ChangeSet: Delta between two snapshots
- ScanOptions: Scan configuration
- WatchSummary: Watch session totals
"""

from .change_kind import ChangeKind, EntryKind, TrackerState
from .data_models import (
    ChangeSet,
    FileEntry,
    FileMetadata,
    Fingerprint,
    ScanOptions,
    Snapshot,
    TraversalError,
    WatchSummary,
    sorted_paths,
)

__all__ = [
    "ChangeKind",
    "EntryKind",
    "TrackerState",
    "ChangeSet",
    "FileEntry",
    "FileMetadata",
    "Fingerprint",
    "ScanOptions",
    "Snapshot",
    "TraversalError",
    "WatchSummary",
    "sorted_paths",
]
