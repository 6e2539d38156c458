"""ScanLogger for recording watch sessions in a structured log file.

This module provides the ScanLogger class, which writes a sectioned,
human-readable log of a polling session: a header, one entry per rescan with
its changes and diagnostics, and a closing summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, TextIO

from filetrack.models import ChangeSet, Snapshot, WatchSummary, sorted_paths


class ScanLogger:
    """Logger for watch sessions with a structured output format.

    Usage:
        with ScanLogger(log_file_path, roots=roots) as logger:
            logger.log_header()
            changes = tracker.rescan()
            logger.log_rescan(changes, tracker.current())
            logger.log_summary(summary)

    Write failures are reported on stderr and never interrupt scanning.

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
        MAX_LISTED_PATHS: Maximum number of paths listed per change kind.
    """

    SEPARATOR = "=" * 65
    MAX_LISTED_PATHS = 50

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        roots: Sequence[Path] = (),
        hash_contents: bool = False,
    ) -> None:
        """Initialize the ScanLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            roots: Roots being tracked (written in the header).
            hash_contents: Whether content hashing is enabled (header).

        Raises:
            OSError: If the log file location is not writable.
        """
        self._roots = list(roots)
        self._hash_contents = hash_contents
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._rescan_counter = 0

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"filetrack_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's parent directory exists and is writable.

        Raises:
            OSError: If the parent directory doesn't exist or is not writable.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")
        try:
            test_file = parent / f".filetrack_test_{id(self)}"
            test_file.touch()
            test_file.unlink()
        except PermissionError:
            raise OSError(f"Permission denied: cannot write to {parent}")

    def __enter__(self) -> "ScanLogger":
        """Open the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the log file, even if an exception occurred."""
        self.close()

    def close(self) -> None:
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp, roots and hashing mode."""
        self._write_separator()
        self._write_line("filetrack - Watch Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        self._write_line(f"Content hashing: {'ON' if self._hash_contents else 'OFF'}")
        self._write_line("Roots:")
        for root in self._roots:
            self._write_line(f"- {root}", indent=2)
        self._write_line("")

    def log_rescan(self, changes: ChangeSet, snapshot: Snapshot) -> None:
        """Write one rescan entry with counts, changed paths and diagnostics.

        Args:
            changes: ChangeSet returned by the rescan.
            snapshot: Snapshot stored after the rescan.
        """
        self._rescan_counter += 1
        self._write_line(
            f"[{self._format_timestamp(snapshot.captured_at)}] "
            f"Rescan {self._rescan_counter}: {len(snapshot)} files tracked"
        )
        self._write_line(
            f"Added: {len(changes.added)}  Modified: {len(changes.modified)}  "
            f"Removed: {len(changes.removed)}  Unchanged: {len(changes.unchanged)}",
            indent=2,
        )
        for label, paths in (
            ("+", changes.added),
            ("~", changes.modified),
            ("-", changes.removed),
        ):
            ordered = sorted_paths(paths)
            for path in ordered[: self.MAX_LISTED_PATHS]:
                self._write_line(f"{label} {path}", indent=4)
            if len(ordered) > self.MAX_LISTED_PATHS:
                self._write_line(
                    f"{label} ... and {len(ordered) - self.MAX_LISTED_PATHS} more", indent=4
                )

        if snapshot.failed_roots:
            self._write_line("Unreadable roots (previous state kept):", indent=2)
            for root in snapshot.failed_roots:
                self._write_line(f"- {root}", indent=4)

        if snapshot.diagnostics:
            self._write_line("Diagnostics:", indent=2)
            for problem in snapshot.diagnostics:
                self._write_line(f"! {problem.message}", indent=4)
        self._write_line("")

    def log_error(self, message: str) -> None:
        """Write a failed rescan entry."""
        self._write_line(f"[{self._format_timestamp(datetime.now())}] Rescan failed: {message}")
        self._write_line("")

    def log_summary(self, summary: WatchSummary) -> None:
        """Write the summary section."""
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Rescans: {summary.rescans}")
        self._write_line(f"Failed rescans: {summary.failed_rescans}")
        self._write_line(f"Files added: {summary.files_added:,}")
        self._write_line(f"Files modified: {summary.files_modified:,}")
        self._write_line(f"Files removed: {summary.files_removed:,}")
        self._write_line(f"Files tracked: {summary.tracked_files:,}")

        if summary.errors:
            self._write_line(f"Total errors: {len(summary.errors)}")
            self._write_line("Errors:")
            for error in summary.errors:
                self._write_line(f"  - {error}")

        if summary.interrupted:
            self._write_line("Session interrupted by user")
        self._write_line(f"Duration: {self._format_duration(summary.duration)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _format_duration(self, seconds: float) -> str:
        """Format a duration as "45s", "5m 23s" or "1h 5m 30s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation."""
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
            self._file_handle.flush()
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
