"""Console rendering for filetrack.

This module provides the ChangeDisplay class, a Rich-based renderer for
ChangeSets, Snapshots, walk diagnostics and watch session summaries.

Example:
    from filetrack.ui import ChangeDisplay

    display = ChangeDisplay()
    changes = tracker.rescan()
    display.display_changes(changes)
    display.display_diagnostics(tracker.current())
"""

from pathlib import Path
from typing import Iterable, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from filetrack.models import ChangeKind, ChangeSet, Snapshot, WatchSummary, sorted_paths


class ChangeDisplay:
    """Rich-based renderer for scan results.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with a
            StringIO file for output capture).

    Attributes:
        console: The Rich Console instance used for all output.
    """

    KIND_STYLES = {
        ChangeKind.ADDED: ("+", "green"),
        ChangeKind.MODIFIED: ("~", "yellow"),
        ChangeKind.REMOVED: ("-", "red"),
        ChangeKind.UNCHANGED: ("=", "dim"),
    }

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_changes(
        self,
        changes: ChangeSet,
        title: str = "Changes",
        show_unchanged: bool = False,
    ) -> None:
        """Display a ChangeSet as a table of changed paths.

        Args:
            changes: The ChangeSet to render.
            title: Table title.
            show_unchanged: Also list unchanged paths.
        """
        if not changes.has_changes and not show_unchanged:
            self.console.print(
                f"[dim]No changes ({len(changes.unchanged)} files unchanged).[/dim]"
            )
            return

        table = Table(title=title)
        table.add_column("", justify="center", no_wrap=True)
        table.add_column("Change", style="magenta")
        table.add_column("Path", style="white")

        kinds = [ChangeKind.ADDED, ChangeKind.MODIFIED, ChangeKind.REMOVED]
        if show_unchanged:
            kinds.append(ChangeKind.UNCHANGED)

        grouped = changes.as_dict()
        for kind in kinds:
            symbol, style = self.KIND_STYLES[kind]
            for path in sorted_paths(grouped[kind]):
                table.add_row(
                    f"[{style}]{symbol}[/{style}]",
                    kind.value,
                    self._truncate_path(path),
                )

        self.console.print(table)
        self.console.print(
            f"[green]{len(changes.added)} added[/green], "
            f"[yellow]{len(changes.modified)} modified[/yellow], "
            f"[red]{len(changes.removed)} removed[/red], "
            f"[dim]{len(changes.unchanged)} unchanged[/dim]"
        )

    def display_paths(self, paths: Iterable[Path], title: str = "Matching files") -> int:
        """Print a list of paths, one per line, followed by a count.

        Returns:
            Number of paths printed.
        """
        count = 0
        for path in paths:
            self.console.print(str(path), markup=False, highlight=False, soft_wrap=True)
            count += 1
        self.console.print(f"[dim]{title}: {count}[/dim]")
        return count

    def display_snapshot(self, snapshot: Snapshot) -> None:
        """Display every tracked file of a Snapshot with its fingerprint."""
        header_text = (
            f"Files tracked: {len(snapshot):,}\n"
            f"Roots: {len(snapshot.roots)}\n"
            f"Captured at: {snapshot.captured_at:%Y-%m-%d %H:%M:%S}"
        )
        self.console.print(Panel(header_text, title="Snapshot", border_style="blue"))

        if not snapshot:
            self.console.print("[yellow]No files matched.[/yellow]")
            return

        table = Table()
        table.add_column("Path", style="white")
        table.add_column("Size", justify="right", style="cyan")
        table.add_column("Modified", style="magenta")
        table.add_column("Hash", style="dim")

        for path in sorted_paths(snapshot):
            fingerprint = snapshot[path]
            table.add_row(
                self._truncate_path(path),
                self._format_size(fingerprint.size),
                f"{fingerprint.modified:%Y-%m-%d %H:%M:%S}",
                (fingerprint.content_hash or "")[:16],
            )
        self.console.print(table)

    def display_diagnostics(self, snapshot: Snapshot) -> None:
        """Display unreadable roots and entries recorded for ``snapshot``."""
        messages: List[str] = [
            f"Root unreadable (previous state kept): {root}" for root in snapshot.failed_roots
        ]
        messages.extend(problem.message for problem in snapshot.diagnostics)
        if messages:
            self._display_errors(messages, title="Warnings", border_style="yellow")

    def display_watch_summary(self, summary: WatchSummary) -> None:
        """Display the totals of a watch session."""
        summary_text = (
            f"Rescans: {summary.rescans}\n"
            f"Failed rescans: {summary.failed_rescans}\n"
            f"Files added: {summary.files_added:,}\n"
            f"Files modified: {summary.files_modified:,}\n"
            f"Files removed: {summary.files_removed:,}\n"
            f"Files tracked: {summary.tracked_files:,}\n"
            f"Duration: {self._format_duration(summary.duration)}"
        )
        border = "yellow" if summary.interrupted or summary.errors else "green"
        self.console.print(Panel(summary_text, title="Watch Summary", border_style=border))

        if summary.errors:
            self._display_errors(summary.errors)

    def _display_errors(
        self,
        errors: List[str],
        title: str = "Errors",
        border_style: str = "red",
    ) -> None:
        """Display error messages in a separate panel, capped at ten."""
        max_display = 10
        displayed_errors = errors[:max_display]
        remaining = len(errors) - max_display

        error_text = "\n".join(f"- {e}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more"

        self.console.print(
            Panel(error_text, title=f"{title} ({len(errors)})", border_style=border_style)
        )

    def _format_size(self, bytes_size: int) -> str:
        """Convert bytes to human-readable format (e.g., "10.5 MB")."""
        if bytes_size < 1024:
            return f"{bytes_size} B"
        elif bytes_size < 1024 * 1024:
            return f"{bytes_size / 1024:.1f} KB"
        elif bytes_size < 1024 * 1024 * 1024:
            return f"{bytes_size / (1024 * 1024):.1f} MB"
        else:
            return f"{bytes_size / (1024 * 1024 * 1024):.1f} GB"

    def _format_duration(self, seconds: float) -> str:
        if seconds < 0:
            seconds = 0
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"

    def _truncate_path(self, path: Path, max_length: int = 100) -> str:
        """Shorten long paths from the left, keeping the file name visible."""
        text = str(path)
        if len(text) > max_length:
            return "..." + text[-(max_length - 3):]
        return text
