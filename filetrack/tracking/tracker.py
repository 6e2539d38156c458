"""Stateful change tracking over a set of roots.

This module provides the Tracker class, the main entry point for callers that
repeatedly re-scan a tree and only act on what changed.

Example:
    >>> from filetrack import Tracker
    >>> tracker = Tracker(["/project/src"], "*.py")
    >>> tracker.rescan().added         # first scan: every file is added
    >>> # ... edit a file ...
    >>> changes = tracker.rescan()
    >>> for path in changes.modified:
    ...     reload(path)
"""

import asyncio
import logging
import threading
from pathlib import Path
from typing import Optional, Tuple

from filetrack.errors import FatalScanError, ScanCancelled
from filetrack.matching import MatcherLike, PathMatcher
from filetrack.models import (
    ChangeSet,
    ScanOptions,
    Snapshot,
    TrackerState,
    TraversalError,
)
from filetrack.scanning import Filesystem, Fingerprinter, SnapshotBuilder, Walker
from filetrack.scanning.walker import RootsLike

from .delta import diff

logger = logging.getLogger(__name__)


class Tracker:
    """Owns the current Snapshot of a tree and reports changes on rescan.

    The Tracker starts UNINITIALIZED (or TRACKING when seeded with an
    ``initial`` snapshot). Each successful ``rescan`` builds a new Snapshot,
    diffs it against the stored one and replaces the stored reference in a
    single assignment. Readers calling ``current`` during a rescan keep
    seeing the previous Snapshot until that assignment happens.

    A rescan that fails or is cancelled raises and leaves the stored
    Snapshot and state untouched. Rescans on one Tracker are serialized.

    Files edited while a rescan is running may be observed in either their
    old or new state (or with old metadata and new content when hashing);
    the following rescan reports the settled state.

    When ``options.all_or_nothing`` is False and some roots fail while others
    succeed, files under the failed roots keep their previous fingerprints
    instead of being reported as removed.

    Attributes:
        options: The ScanOptions in effect.
    """

    def __init__(
        self,
        roots: RootsLike,
        matcher: MatcherLike = None,
        options: Optional[ScanOptions] = None,
        filesystem: Optional[Filesystem] = None,
        initial: Optional[Snapshot] = None,
    ) -> None:
        """Initialize the Tracker.

        Args:
            roots: One root or an iterable of roots to track.
            matcher: PathMatcher, glob string, callable, or None for all files.
            options: Scan options; defaults to ``ScanOptions()``.
            filesystem: Filesystem collaborator; defaults to LocalFilesystem.
            initial: Previously captured Snapshot (for example one restored
                with ``load_snapshot``). The first rescan is diffed against it.

        Raises:
            ValueError: If no root is given.
        """
        self.options = options if options is not None else ScanOptions()
        self._walker = Walker(roots, matcher, self.options, filesystem)
        self._fingerprinter = Fingerprinter(
            hash_contents=self.options.hash_contents,
            algorithm=self.options.hash_algorithm,
            filesystem=self._walker.filesystem,
        )
        self._builder = SnapshotBuilder(self._walker, self._fingerprinter, self.options)
        self._rescan_lock = threading.Lock()

        if initial is not None:
            self._snapshot = initial
            self._state = TrackerState.TRACKING
        else:
            self._snapshot = Snapshot.empty()
            self._state = TrackerState.UNINITIALIZED
        self._rescan_count = 0

    @property
    def roots(self) -> Tuple[Path, ...]:
        return tuple(self._walker.roots)

    @property
    def matcher(self) -> PathMatcher:
        return self._walker.matcher

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def rescan_count(self) -> int:
        """Number of successful rescans."""
        return self._rescan_count

    @property
    def fingerprinter(self) -> Fingerprinter:
        return self._fingerprinter

    @property
    def last_diagnostics(self) -> Tuple[TraversalError, ...]:
        """Non-fatal failures recorded by the most recent successful rescan."""
        return self._snapshot.diagnostics

    def current(self) -> Snapshot:
        """Return the current Snapshot.

        Snapshots are immutable, so the returned object can be kept and
        read freely; it is never modified by later rescans.
        """
        return self._snapshot

    def rescan(self, cancel: Optional[threading.Event] = None) -> ChangeSet:
        """Re-scan all roots and return what changed since the last rescan.

        Args:
            cancel: Optional event checked between entries. Setting it
                aborts the rescan with ScanCancelled.

        Returns:
            ChangeSet against the previous Snapshot. On the first rescan
            every file is reported as added.

        Raises:
            FatalScanError: If the roots could not be scanned. The current
                Snapshot is kept.
            ScanCancelled: If ``cancel`` was set. The current Snapshot is kept.
        """
        with self._rescan_lock:
            previous = self._snapshot
            try:
                snapshot = self._builder.build(cancel)
            except ScanCancelled:
                logger.info("Rescan cancelled; keeping snapshot from %s", previous.captured_at)
                raise
            except FatalScanError as e:
                logger.warning("Rescan failed: %s", e)
                raise

            if snapshot.failed_roots and previous:
                snapshot = self._carry_forward(previous, snapshot)

            if self._state is TrackerState.UNINITIALIZED:
                changes = diff(None, snapshot)
            else:
                changes = diff(previous, snapshot)

            self._snapshot = snapshot
            self._state = TrackerState.TRACKING
            self._rescan_count += 1

        if snapshot.diagnostics:
            logger.warning(
                "Rescan completed with %d unreadable entries", len(snapshot.diagnostics)
            )
        logger.debug(
            "Rescan %d: %d added, %d modified, %d removed, %d unchanged",
            self._rescan_count, len(changes.added), len(changes.modified),
            len(changes.removed), len(changes.unchanged),
        )
        return changes

    async def rescan_async(self, cancel: Optional[threading.Event] = None) -> ChangeSet:
        """Run ``rescan`` in a worker thread so the event loop stays responsive."""
        return await asyncio.to_thread(self.rescan, cancel)

    @staticmethod
    def _carry_forward(previous: Snapshot, snapshot: Snapshot) -> Snapshot:
        entries = dict(snapshot)
        for root in snapshot.failed_roots:
            for path, fingerprint in previous.entries_under(root).items():
                entries.setdefault(path, fingerprint)
        return Snapshot(
            entries,
            captured_at=snapshot.captured_at,
            roots=snapshot.roots,
            failed_roots=snapshot.failed_roots,
            diagnostics=snapshot.diagnostics,
        )
