"""filetrack - Change-Tracking Filesystem Scanner.

A Python library and CLI for enumerating files below a set of roots,
capturing immutable snapshots of their state and reporting which files were
added, modified or removed between scans.
"""

__version__ = "0.1.0"

from .errors import (
    ErrorKind,
    FatalScanError,
    FileAccessError,
    FileTrackError,
    MissingFilesError,
    ScanCancelled,
)
from .matching import (
    AllOf,
    AnyOf,
    ExtensionMatcher,
    GlobMatcher,
    MatchAll,
    NameMatcher,
    Not,
    PathMatcher,
    PredicateMatcher,
    SizeMatcher,
)
from .models import (
    ChangeKind,
    ChangeSet,
    FileEntry,
    FileMetadata,
    Fingerprint,
    ScanOptions,
    Snapshot,
    TrackerState,
    TraversalError,
)
from .operations import (
    find_and_load,
    find_by_extension,
    find_files,
    for_each_match,
    load_bytes,
    load_text,
)
from .scanning import Walker, build_snapshot, walk
from .tracking import Tracker, diff, load_snapshot, save_snapshot

__all__ = [
    "__version__",
    "ErrorKind",
    "FatalScanError",
    "FileAccessError",
    "FileTrackError",
    "MissingFilesError",
    "ScanCancelled",
    "AllOf",
    "AnyOf",
    "ExtensionMatcher",
    "GlobMatcher",
    "MatchAll",
    "NameMatcher",
    "Not",
    "PathMatcher",
    "PredicateMatcher",
    "SizeMatcher",
    "ChangeKind",
    "ChangeSet",
    "FileEntry",
    "FileMetadata",
    "Fingerprint",
    "ScanOptions",
    "Snapshot",
    "TrackerState",
    "TraversalError",
    "find_and_load",
    "find_by_extension",
    "find_files",
    "for_each_match",
    "load_bytes",
    "load_text",
    "Walker",
    "build_snapshot",
    "walk",
    "Tracker",
    "diff",
    "load_snapshot",
    "save_snapshot",
]
