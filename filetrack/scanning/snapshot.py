"""Snapshot construction.

SnapshotBuilder drives a Walker to completion, fingerprints every file it
yields and assembles an immutable Snapshot. Construction is all-or-nothing:
the builder either returns a fully populated Snapshot or raises, so callers
never observe a partially built one.

Root failures are handled according to ``ScanOptions.all_or_nothing``:
- True: any unreadable root fails the build with FatalScanError
- False: healthy roots are kept and failed roots are listed on the
  Snapshot's ``failed_roots``; the build only fails when every root failed
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Set

from filetrack.errors import FatalScanError, FileAccessError
from filetrack.matching import MatcherLike
from filetrack.models import Fingerprint, ScanOptions, Snapshot, TraversalError

from .filesystem import DirectoryId, Filesystem
from .fingerprint import Fingerprinter
from .walker import RootsLike, Walker

logger = logging.getLogger(__name__)


@dataclass
class RootScan:
    """Result of scanning a single root."""
    root: Path
    entries: Dict[Path, Fingerprint] = field(default_factory=dict)
    diagnostics: List[TraversalError] = field(default_factory=list)
    failure: Optional[FatalScanError] = None


class SnapshotBuilder:
    """Builds Snapshots from a Walker and a Fingerprinter.

    Roots are scanned one after another, or fanned out over a thread pool
    when ``options.max_workers`` is greater than one. Results are merged in
    root order either way, so the outcome does not depend on which worker
    finishes first. A path reachable from several roots is attributed to the
    first root listing it. Sequential scans also share the set of visited
    directories between roots; parallel scans walk each root independently
    and rely on that path-level merge.

    Example:
        >>> builder = SnapshotBuilder(Walker(["/src"], "*.py"), Fingerprinter())
        >>> snapshot = builder.build()
        >>> print(len(snapshot), snapshot.diagnostics)
    """

    def __init__(
        self,
        walker: Walker,
        fingerprinter: Fingerprinter,
        options: Optional[ScanOptions] = None,
    ) -> None:
        self.walker = walker
        self.fingerprinter = fingerprinter
        self.options = options if options is not None else walker.options

    def build(self, cancel: Optional[threading.Event] = None) -> Snapshot:
        """Scan every root and return the resulting Snapshot.

        Args:
            cancel: Optional event checked between entries.

        Returns:
            A fully populated Snapshot.

        Raises:
            FatalScanError: If a root failed under all-or-nothing semantics,
                or if every root failed.
            ScanCancelled: If ``cancel`` was set during the scan.
        """
        captured_at = datetime.now()
        roots = self.walker.roots

        if self.options.max_workers > 1 and len(roots) > 1:
            workers = min(self.options.max_workers, len(roots))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                scans = list(executor.map(lambda root: self.scan_root(root, cancel), roots))
        else:
            visited: Set[DirectoryId] = set()
            scans = [self.scan_root(root, cancel, visited) for root in roots]

        entries: Dict[Path, Fingerprint] = {}
        diagnostics: List[TraversalError] = []
        failures: List[FatalScanError] = []
        for scan in scans:
            diagnostics.extend(scan.diagnostics)
            if scan.failure is not None:
                failures.append(scan.failure)
                continue
            for path, fingerprint in scan.entries.items():
                entries.setdefault(path, fingerprint)

        if failures and (self.options.all_or_nothing or len(failures) == len(roots)):
            first = failures[0]
            raise FatalScanError(first.root, first.cause, other_failures=failures[1:])

        for failure in failures:
            logger.warning("Root excluded from snapshot: %s", failure)

        logger.debug(
            "Built snapshot: %d files, %d roots, %d diagnostics",
            len(entries), len(roots), len(diagnostics),
        )
        return Snapshot(
            entries,
            captured_at=captured_at,
            roots=roots,
            failed_roots=[failure.root for failure in failures],
            diagnostics=diagnostics,
        )

    def scan_root(
        self,
        root: Path,
        cancel: Optional[threading.Event] = None,
        visited: Optional[Set[DirectoryId]] = None,
    ) -> RootScan:
        """Walk and fingerprint a single root.

        A root-level failure is captured on the returned RootScan rather than
        raised, so the caller can apply its own root failure policy.
        ``visited`` is passed to the Walker so directories already entered
        under another root are skipped.

        Raises:
            ScanCancelled: If ``cancel`` was set during the scan.
        """
        scan = RootScan(root=root)
        try:
            for entry in self.walker.iter_root(root, cancel, scan.diagnostics, visited):
                try:
                    scan.entries[entry.path] = self.fingerprinter.fingerprint(entry)
                except FileAccessError as e:
                    scan.diagnostics.append(TraversalError.from_access_error(e))
        except FatalScanError as e:
            scan.failure = e
            scan.entries.clear()
        return scan


def build_snapshot(
    roots: RootsLike,
    matcher: MatcherLike = None,
    options: Optional[ScanOptions] = None,
    filesystem: Optional[Filesystem] = None,
    cancel: Optional[threading.Event] = None,
) -> Snapshot:
    """Build a one-off Snapshot of ``roots``.

    Example:
        >>> before = build_snapshot("/src", "*.py")
        >>> # ... edit files ...
        >>> changes = diff(before, build_snapshot("/src", "*.py"))
    """
    options = options if options is not None else ScanOptions()
    walker = Walker(roots, matcher, options, filesystem)
    fingerprinter = Fingerprinter(
        hash_contents=options.hash_contents,
        algorithm=options.hash_algorithm,
        filesystem=walker.filesystem,
    )
    return SnapshotBuilder(walker, fingerprinter, options).build(cancel)
