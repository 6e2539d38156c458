"""File scanning package for filetrack.

This package walks directory trees and captures their state:

- Filesystem / LocalFilesystem: The filesystem collaborator every scan
  goes through.
- Walker: Lazily enumerates matching files below one or more roots,
  collecting per-entry failures as diagnostics.
- Fingerprinter: Turns walked files into comparable Fingerprints, with
  optional content hashing.
- SnapshotBuilder: Drives a walk to completion and produces an immutable
  Snapshot.

Example:
    >>> from filetrack.scanning import build_snapshot, walk
    >>>
    >>> # One-shot search
    >>> paths = list(walk("/data", "*.txt"))
    >>>
    >>> # Capture the tree state
    >>> snapshot = build_snapshot("/data", "*.txt")
"""

from .filesystem import Filesystem, LocalFilesystem
from .fingerprint import Fingerprinter
from .snapshot import RootScan, SnapshotBuilder, build_snapshot
from .walker import Walker, normalize_roots, walk

__all__ = [
    "Filesystem",
    "LocalFilesystem",
    "Fingerprinter",
    "RootScan",
    "SnapshotBuilder",
    "build_snapshot",
    "Walker",
    "normalize_roots",
    "walk",
]
