"""
Enums shared across the scan engine.

ChangeKind classifies a path in a ChangeSet:
1. Added - present only in the new snapshot
2. Modified - present in both, fingerprint differs
3. Removed - present only in the old snapshot
4. Unchanged - present in both, fingerprint equal
"""

from enum import Enum


class ChangeKind(Enum):
    """Classification of a single path when two snapshots are compared."""
    ADDED = "added"            # New since the previous snapshot
    MODIFIED = "modified"      # Fingerprint differs from the previous snapshot
    REMOVED = "removed"        # Gone since the previous snapshot
    UNCHANGED = "unchanged"    # Fingerprint equal to the previous snapshot


class EntryKind(Enum):
    """Kind of a directory entry as reported by the filesystem."""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"            # Sockets, FIFOs, devices


class TrackerState(Enum):
    """Lifecycle state of a Tracker."""
    UNINITIALIZED = "uninitialized"  # No successful rescan yet
    TRACKING = "tracking"            # Holds a snapshot
