"""WatchOrchestrator for running polling watch sessions.

This module provides the WatchOrchestrator class, which drives a Tracker in a
rescan/sleep loop, renders every ChangeSet through ChangeDisplay and records
the session with ScanLogger.

Example:
    from filetrack.orchestration import WatchOrchestrator
    from filetrack.matching import ExtensionMatcher

    orchestrator = WatchOrchestrator(
        roots=[Path("/project/src")],
        matcher=ExtensionMatcher(["py"]),
        interval=1.0,
    )
    summary = orchestrator.run()
"""

import itertools
import sys
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from filetrack.errors import FatalScanError
from filetrack.matching import MatcherLike
from filetrack.models import ChangeSet, ScanOptions, Snapshot, WatchSummary
from filetrack.orchestration.scan_logger import ScanLogger
from filetrack.tracking import Tracker
from filetrack.ui import ChangeDisplay


class WatchOrchestrator:
    """Coordinates Tracker, ChangeDisplay and ScanLogger for a watch session.

    Each iteration rescans the roots, displays what changed and logs the
    result. A failed rescan is reported and counted; the session continues
    with the previous Snapshot. Ctrl+C ends the session cleanly with
    ``interrupted`` set on the summary.

    Attributes:
        tracker: The Tracker being polled.
        interval: Seconds to sleep between rescans.
        iterations: Number of rescans to run, or None to run until interrupted.
        log_file_path: Optional path of the session log file.
        verbose: Whether to display diagnostics after every rescan.
    """

    def __init__(
        self,
        roots: Sequence[Path],
        matcher: MatcherLike = None,
        options: Optional[ScanOptions] = None,
        interval: float = 2.0,
        iterations: Optional[int] = None,
        log_file_path: Optional[Path] = None,
        verbose: bool = False,
        display: Optional[ChangeDisplay] = None,
        initial: Optional[Snapshot] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the WatchOrchestrator.

        Args:
            roots: Roots to watch.
            matcher: PathMatcher selecting the watched files.
            options: Scan options.
            interval: Seconds between rescans. Must be positive.
            iterations: Number of rescans, or None for no limit.
            log_file_path: Optional path for a session log file.
            verbose: Display diagnostics after every rescan.
            display: ChangeDisplay used for output.
            initial: Snapshot to diff the first rescan against.
            sleep: Function used to wait between rescans.

        Raises:
            ValueError: If interval is not positive or iterations < 1.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if iterations is not None and iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {iterations}")

        self.options = options if options is not None else ScanOptions()
        self.tracker = Tracker(roots, matcher, self.options, initial=initial)
        self.interval = interval
        self.iterations = iterations
        self.log_file_path = log_file_path
        self.verbose = verbose
        self._display = display or ChangeDisplay()
        self._sleep = sleep
        self._seeded = initial is not None

    @property
    def display(self) -> ChangeDisplay:
        return self._display

    def run(self) -> WatchSummary:
        """Run the watch loop until the iteration limit or Ctrl+C.

        Returns:
            WatchSummary with totals for the session.
        """
        start_time = time.time()
        summary = WatchSummary()
        scan_logger = self._open_logger()
        console = self._display.console

        console.print(
            f"[blue]Watching {len(self.tracker.roots)} root(s) "
            f"every {self.interval:g}s. Press Ctrl+C to stop.[/blue]"
        )

        try:
            counter = itertools.count(1) if self.iterations is None else range(1, self.iterations + 1)
            for index in counter:
                self._rescan_once(index, summary, scan_logger)
                if self.iterations is not None and index >= self.iterations:
                    break
                self._sleep(self.interval)
        except KeyboardInterrupt:
            console.print("\n[yellow]Watch interrupted by user.[/yellow]")
            summary.interrupted = True
        finally:
            summary.tracked_files = len(self.tracker.current())
            summary.duration = time.time() - start_time
            self._display.display_watch_summary(summary)
            if scan_logger is not None:
                scan_logger.log_summary(summary)
                if self.verbose:
                    console.print(f"[dim]Log file: {scan_logger.get_log_path()}[/dim]")
                scan_logger.close()

        return summary

    def _rescan_once(
        self,
        index: int,
        summary: WatchSummary,
        scan_logger: Optional[ScanLogger],
    ) -> Optional[ChangeSet]:
        first = self.tracker.rescan_count == 0 and not self._seeded
        try:
            changes = self.tracker.rescan()
        except FatalScanError as e:
            summary.failed_rescans += 1
            summary.errors.append(str(e))
            self._display.console.print(f"[red]Error:[/red] {e}")
            if scan_logger is not None:
                scan_logger.log_error(str(e))
            return None

        summary.record(changes)
        snapshot = self.tracker.current()
        if scan_logger is not None:
            scan_logger.log_rescan(changes, snapshot)

        if first:
            self._display.console.print(f"Tracking {len(snapshot):,} file(s).")
        elif changes.has_changes:
            self._display.display_changes(changes, title=f"Rescan {index}")
        elif self.verbose:
            self._display.console.print(f"[dim]Rescan {index}: no changes.[/dim]")

        if self.verbose:
            self._display.display_diagnostics(snapshot)
        return changes

    def _open_logger(self) -> Optional[ScanLogger]:
        if self.log_file_path is None:
            return None
        try:
            scan_logger = ScanLogger(
                log_file_path=self.log_file_path,
                roots=self.tracker.roots,
                hash_contents=self.options.hash_contents,
            )
            scan_logger.__enter__()
        except OSError as e:
            # Logging is optional; keep watching without it
            print(f"Warning: Could not create log file: {e}", file=sys.stderr)
            return None
        scan_logger.log_header()
        return scan_logger
