"""Directory tree traversal for filetrack.

This module provides the Walker class, which enumerates the files below one
or more roots that satisfy a PathMatcher, and the ``walk`` convenience
function for one-shot searches.

Traversal uses an explicit stack of pending directories, so deep trees never
hit the recursion limit. Siblings are visited in lexical order, which makes
the output deterministic for an unchanged tree.

Example:
    >>> from filetrack.scanning import Walker
    >>> from filetrack.matching import ExtensionMatcher
    >>> walker = Walker([Path("/data")], ExtensionMatcher(["txt"]))
    >>> for entry in walker.iter_entries():
    ...     print(entry.path, entry.metadata.size)
    >>> for problem in walker.diagnostics:
    ...     print(problem.message)
"""

import logging
import os
import threading
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Union

from filetrack.errors import (
    ErrorKind,
    FatalScanError,
    FileAccessError,
    ScanCancelled,
)
from filetrack.matching import MatcherLike, as_matcher
from filetrack.models import (
    EntryKind,
    FileEntry,
    FileMetadata,
    ScanOptions,
    TraversalError,
)

from .filesystem import DirectoryId, Filesystem, LocalFilesystem

logger = logging.getLogger(__name__)

RootsLike = Union[str, os.PathLike, Iterable[Union[str, os.PathLike]]]


def normalize_roots(roots: RootsLike) -> List[Path]:
    """Turn ``roots`` into a de-duplicated list of absolute paths.

    A single path (str or PathLike) is accepted as well as an iterable of
    them. Order is preserved.
    """
    if isinstance(roots, (str, os.PathLike)):
        roots = [roots]
    result: List[Path] = []
    seen: Set[Path] = set()
    for root in roots:
        path = Path(os.path.abspath(os.fspath(root)))
        if path not in seen:
            seen.add(path)
            result.append(path)
    if not result:
        raise ValueError("At least one root is required")
    return result


def check_cancelled(cancel: Optional[threading.Event]) -> None:
    """Raise ScanCancelled if ``cancel`` has been set."""
    if cancel is not None and cancel.is_set():
        raise ScanCancelled("Scan cancelled")


class Walker:
    """Enumerates matching files below a set of roots.

    Per-entry failures (an entry that vanished mid-walk, a subdirectory that
    cannot be listed) are recorded in ``diagnostics`` and the walk continues.
    A root that cannot be read is fatal for that root only: ``iter_entries``
    records it in ``root_failures`` and moves on to the next root.

    Symbolic links are followed when ``options.follow_symlinks`` is set.
    Directories are identified by ``(st_dev, st_ino)`` and each is entered at
    most once per walk, so link cycles terminate and overlapping roots do not
    yield the same file twice. A link to a directory that was already visited
    is skipped without a diagnostic.

    Attributes:
        roots: Normalized absolute scan roots.
        matcher: The PathMatcher applied to candidate files.
        options: ScanOptions controlling symlinks and excluded directories.
    """

    def __init__(
        self,
        roots: RootsLike,
        matcher: MatcherLike = None,
        options: Optional[ScanOptions] = None,
        filesystem: Optional[Filesystem] = None,
    ) -> None:
        """Initialize the Walker.

        Args:
            roots: One root or an iterable of roots.
            matcher: PathMatcher, glob string, callable, or None for all files.
            options: Scan options; defaults to ``ScanOptions()``.
            filesystem: Filesystem collaborator; defaults to LocalFilesystem.

        Raises:
            ValueError: If no root is given.
        """
        self.roots = normalize_roots(roots)
        self.matcher = as_matcher(matcher)
        self.options = options if options is not None else ScanOptions()
        self._fs = filesystem if filesystem is not None else LocalFilesystem()
        self._diagnostics: List[TraversalError] = []
        self._root_failures: List[FatalScanError] = []

    @property
    def filesystem(self) -> Filesystem:
        return self._fs

    @property
    def diagnostics(self) -> List[TraversalError]:
        """Non-fatal failures recorded by the last ``iter_entries`` pass."""
        return self._diagnostics.copy()

    @property
    def root_failures(self) -> List[FatalScanError]:
        """Roots that could not be scanned during the last ``iter_entries`` pass."""
        return self._root_failures.copy()

    def iter_entries(self, cancel: Optional[threading.Event] = None) -> Iterator[FileEntry]:
        """Lazily yield every matching file under all roots.

        Diagnostics and root failures from any previous pass are cleared when
        iteration starts.

        Args:
            cancel: Optional event; when set, iteration stops with
                ScanCancelled before the next entry is processed.

        Yields:
            FileEntry for each matching file, roots in the order given.

        Raises:
            ScanCancelled: If ``cancel`` is set during the walk.
        """
        self._diagnostics.clear()
        self._root_failures.clear()
        visited: Set[DirectoryId] = set()
        for root in self.roots:
            try:
                yield from self.iter_root(root, cancel, self._diagnostics, visited)
            except FatalScanError as e:
                logger.warning("Skipping root %s: %s", root, e.cause)
                self._root_failures.append(e)

    def iter_root(
        self,
        root: Path,
        cancel: Optional[threading.Event] = None,
        diagnostics: Optional[List[TraversalError]] = None,
        visited: Optional[Set[DirectoryId]] = None,
    ) -> Iterator[FileEntry]:
        """Lazily yield every matching file under a single root.

        Args:
            root: Absolute root directory.
            cancel: Optional cancellation event.
            diagnostics: List receiving per-entry failures. Defaults to the
                walker's own diagnostics list.
            visited: Identities of directories already entered. Shared
                between roots so that a directory reachable from several
                roots is walked once, under the first. Defaults to a new set.

        Raises:
            FatalScanError: If the root itself cannot be read.
            ScanCancelled: If ``cancel`` is set during the walk.
        """
        sink = diagnostics if diagnostics is not None else self._diagnostics
        if visited is None:
            visited = set()

        try:
            root_metadata = self._fs.read_metadata(root)
            if not root_metadata.is_dir:
                raise FileAccessError(ErrorKind.OTHER, root, f"Not a directory: {root}")
            root_id = self._fs.directory_id(root)
            if root_id in visited:
                logger.debug("Root already walked under an earlier root: %s", root)
                return
            root_entries = self._fs.list_directory(root)
        except FileAccessError as e:
            raise FatalScanError(root, e) from e
        visited.add(root_id)

        stack: List[Path] = [root]
        first = True
        while stack:
            check_cancelled(cancel)
            directory = stack.pop()

            if first:
                entries = root_entries
                first = False
            else:
                try:
                    entries = self._fs.list_directory(directory)
                except FileAccessError as e:
                    self._record(sink, e)
                    continue

            subdirectories: List[Path] = []
            for name, kind in sorted(entries):
                check_cancelled(cancel)
                path = directory / name

                if kind is EntryKind.DIRECTORY:
                    if self._enter_directory(path, visited, sink):
                        subdirectories.append(path)
                    continue

                if kind is EntryKind.FILE:
                    entry = self._match_file(path, root, None, sink)
                    if entry is not None:
                        yield entry
                    continue

                if kind is EntryKind.SYMLINK and not self.options.follow_symlinks:
                    continue

                # Symlinks and entries whose kind could not be determined
                # are resolved with a stat call that follows links
                try:
                    metadata = self._fs.read_metadata(path)
                except FileAccessError as e:
                    self._record(sink, e)
                    continue
                if metadata.is_dir:
                    if self._enter_directory(path, visited, sink):
                        subdirectories.append(path)
                elif metadata.is_file:
                    entry = self._match_file(path, root, metadata, sink)
                    if entry is not None:
                        yield entry

            # Reversed so that popping visits subdirectories in lexical order
            stack.extend(reversed(subdirectories))

    def _enter_directory(
        self,
        path: Path,
        visited: Set[DirectoryId],
        sink: List[TraversalError],
    ) -> bool:
        if path.name in self.options.exclude_dirs:
            return False
        try:
            dir_id = self._fs.directory_id(path)
        except FileAccessError as e:
            self._record(sink, e)
            return False
        if dir_id in visited:
            logger.debug("Skipping already visited directory: %s", path)
            return False
        visited.add(dir_id)
        return True

    def _match_file(
        self,
        path: Path,
        root: Path,
        metadata: Optional[FileMetadata],
        sink: List[TraversalError],
    ) -> Optional[FileEntry]:
        needs_metadata = self.matcher.needs_metadata

        # Path-only matchers run before the stat call
        if not needs_metadata and not self.matcher.matches(path):
            return None

        if metadata is None:
            try:
                metadata = self._fs.read_metadata(path)
            except FileAccessError as e:
                self._record(sink, e)
                return None
            # Replaced by something else between listing and stat
            if not metadata.is_file:
                return None

        if needs_metadata and not self.matcher.matches(path, metadata):
            return None

        return FileEntry(path=path, metadata=metadata, root=root)

    @staticmethod
    def _record(sink: List[TraversalError], error: FileAccessError) -> None:
        logger.debug("Traversal error: %s", error)
        sink.append(TraversalError.from_access_error(error))


def walk(
    roots: RootsLike,
    matcher: MatcherLike = None,
    options: Optional[ScanOptions] = None,
    filesystem: Optional[Filesystem] = None,
) -> Iterator[Path]:
    """Lazily yield the path of every matching file under ``roots``.

    Per-entry failures and unreadable roots are skipped; use a Walker
    directly to inspect them.

    Example:
        >>> for path in walk("/project", "*.py"):
        ...     print(path)
    """
    walker = Walker(roots, matcher, options, filesystem)
    for entry in walker.iter_entries():
        yield entry.path
