"""
Core data models for filetrack.

This module contains the following types:
- FileMetadata: Raw metadata for one directory entry
- FileEntry: A matched file produced by the Walker
- Fingerprint: Comparable summary of a file's state
- TraversalError: Non-fatal diagnostic recorded during a walk
- Snapshot: Immutable mapping of path to Fingerprint
- ChangeSet: Classified delta between two snapshots
- ScanOptions: Configuration shared by the Walker, builder and Tracker
- WatchSummary: Totals of a polling watch session
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from filetrack.errors import ErrorKind, FileAccessError

from .change_kind import ChangeKind, EntryKind


@dataclass(frozen=True)
class FileMetadata:
    """Raw metadata for a directory entry."""
    size: int                         # Size in bytes
    modified_ns: int                  # Modification time, nanoseconds since epoch
    kind: EntryKind                   # Entry kind after following symlinks
    changed_ns: int = 0               # Inode change time (st_ctime_ns), nanoseconds

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True)
class FileEntry:
    """A file reported by the Walker."""
    path: Path                        # Absolute path of the file
    metadata: FileMetadata            # Metadata read during the walk
    root: Path                        # Scan root the file was found under


@dataclass(frozen=True, eq=False)
class Fingerprint:
    """Comparable summary of one file's on-disk state.

    Two fingerprints are equal when size and modification time match. When
    both carry a content hash, the hashes must match as well; this catches
    rewrites that land within the filesystem's timestamp resolution.

    ``__hash__`` only covers size and modification time so that it stays
    consistent with equality when one side has no content hash.
    """
    size: int
    modified_ns: int
    content_hash: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fingerprint):
            return NotImplemented
        if self.size != other.size or self.modified_ns != other.modified_ns:
            return False
        if self.content_hash is not None and other.content_hash is not None:
            return self.content_hash == other.content_hash
        return True

    def __hash__(self) -> int:
        return hash((self.size, self.modified_ns))

    @property
    def modified(self) -> datetime:
        """Modification time as a local datetime."""
        return datetime.fromtimestamp(self.modified_ns / 1_000_000_000)


@dataclass(frozen=True)
class TraversalError:
    """A per-entry failure recorded during a walk.

    These never abort a walk; they are collected and handed to the caller
    alongside the results so they can be logged.
    """
    path: Path                        # Entry that could not be read
    kind: ErrorKind                   # Failure classification
    message: str                      # Human-readable description

    @classmethod
    def from_access_error(cls, error: FileAccessError) -> "TraversalError":
        return cls(path=error.path, kind=error.kind, message=str(error))


class Snapshot(Mapping[Path, Fingerprint]):
    """Immutable mapping of path to Fingerprint captured at one point in time.

    A Snapshot is never mutated; every rescan produces a new one. It behaves
    as a read-only mapping and additionally records the scan roots, roots
    that could not be scanned, and the non-fatal diagnostics of the walk
    that produced it.

    Example:
        >>> snapshot = Snapshot({Path("/src/a.txt"): Fingerprint(3, 10)})
        >>> Path("/src/a.txt") in snapshot
        True
        >>> len(snapshot)
        1
    """

    __slots__ = ("_entries", "_captured_at", "_roots", "_failed_roots", "_diagnostics")

    def __init__(
        self,
        entries: Optional[Mapping[Path, Fingerprint]] = None,
        captured_at: Optional[datetime] = None,
        roots: Iterable[Path] = (),
        failed_roots: Iterable[Path] = (),
        diagnostics: Iterable[TraversalError] = (),
    ) -> None:
        self._entries: Mapping[Path, Fingerprint] = MappingProxyType(dict(entries or {}))
        self._captured_at = captured_at if captured_at is not None else datetime.now()
        self._roots: Tuple[Path, ...] = tuple(roots)
        self._failed_roots: Tuple[Path, ...] = tuple(failed_roots)
        self._diagnostics: Tuple[TraversalError, ...] = tuple(diagnostics)

    @classmethod
    def empty(cls) -> "Snapshot":
        """Snapshot with no entries, used before the first scan."""
        return cls()

    def __getitem__(self, path: Path) -> Fingerprint:
        return self._entries[path]

    def __iter__(self) -> Iterator[Path]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"Snapshot({len(self._entries)} files, "
            f"captured_at={self._captured_at.isoformat()})"
        )

    @property
    def captured_at(self) -> datetime:
        return self._captured_at

    @property
    def roots(self) -> Tuple[Path, ...]:
        return self._roots

    @property
    def failed_roots(self) -> Tuple[Path, ...]:
        return self._failed_roots

    @property
    def diagnostics(self) -> Tuple[TraversalError, ...]:
        return self._diagnostics

    def paths(self) -> FrozenSet[Path]:
        return frozenset(self._entries)

    def entries_under(self, root: Path) -> Dict[Path, Fingerprint]:
        """Return the entries located at or below ``root``."""
        return {
            path: fingerprint
            for path, fingerprint in self._entries.items()
            if path == root or root in path.parents
        }


@dataclass(frozen=True)
class ChangeSet:
    """Classified delta between two snapshots.

    The four sets are disjoint and together cover the union of both
    snapshots' paths exactly once.
    """
    added: FrozenSet[Path] = frozenset()
    modified: FrozenSet[Path] = frozenset()
    removed: FrozenSet[Path] = frozenset()
    unchanged: FrozenSet[Path] = frozenset()

    def __post_init__(self) -> None:
        for name in ("added", "modified", "removed", "unchanged"):
            value = getattr(self, name)
            if not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(value))

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.removed)

    @property
    def changed(self) -> FrozenSet[Path]:
        """Every path that was added, modified or removed."""
        return self.added | self.modified | self.removed

    @property
    def total(self) -> int:
        return len(self.added) + len(self.modified) + len(self.removed) + len(self.unchanged)

    def kind_of(self, path: Path) -> Optional[ChangeKind]:
        """Return the ChangeKind of ``path``, or None if it is not tracked."""
        if path in self.added:
            return ChangeKind.ADDED
        if path in self.modified:
            return ChangeKind.MODIFIED
        if path in self.removed:
            return ChangeKind.REMOVED
        if path in self.unchanged:
            return ChangeKind.UNCHANGED
        return None

    def as_dict(self) -> Dict[ChangeKind, FrozenSet[Path]]:
        return {
            ChangeKind.ADDED: self.added,
            ChangeKind.MODIFIED: self.modified,
            ChangeKind.REMOVED: self.removed,
            ChangeKind.UNCHANGED: self.unchanged,
        }


@dataclass(frozen=True)
class ScanOptions:
    """Configuration for walking, fingerprinting and snapshot building.

    Attributes:
        hash_contents: Add a content hash to every fingerprint. Reads each
            file in full, so it is off by default.
        hash_algorithm: Any algorithm name accepted by ``hashlib.new``.
        follow_symlinks: Follow symbolic links to files and directories.
        exclude_dirs: Directory names pruned from traversal.
        all_or_nothing: Fail the whole scan if any root fails.
        max_workers: Number of threads used to scan roots in parallel.

    Raises:
        ValueError: If the hash algorithm is unknown or max_workers < 1.
    """
    hash_contents: bool = False
    hash_algorithm: str = "sha256"
    follow_symlinks: bool = True
    exclude_dirs: FrozenSet[str] = field(default_factory=frozenset)
    all_or_nothing: bool = False
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.hash_algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unknown hash algorithm: {self.hash_algorithm}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if not isinstance(self.exclude_dirs, frozenset):
            object.__setattr__(self, "exclude_dirs", frozenset(self.exclude_dirs))


def sorted_paths(paths: Iterable[Path]) -> Sequence[Path]:
    """Sort paths for stable display and logging."""
    return sorted(paths, key=lambda p: p.as_posix())


@dataclass
class WatchSummary:
    """Summary of a polling watch session."""
    rescans: int = 0                  # Successful rescans performed
    failed_rescans: int = 0           # Rescans that raised
    files_added: int = 0              # Added paths across all rescans
    files_modified: int = 0           # Modified paths across all rescans
    files_removed: int = 0            # Removed paths across all rescans
    tracked_files: int = 0            # Files in the final snapshot
    errors: List[str] = field(default_factory=list)  # Error and diagnostic messages
    duration: float = 0.0             # Session duration in seconds
    interrupted: bool = False         # Whether the session was interrupted by user

    def record(self, changes: "ChangeSet") -> None:
        """Add one rescan's ChangeSet to the running totals."""
        self.rescans += 1
        self.files_added += len(changes.added)
        self.files_modified += len(changes.modified)
        self.files_removed += len(changes.removed)
