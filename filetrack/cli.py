"""
filetrack - CLI Interface.

A command-line interface for finding files, capturing snapshots of a
directory tree and reporting what changed between scans.

Usage Examples:
    # List all Python files below two roots
    filetrack find src tests --ext py

    # Save a snapshot with content hashes
    filetrack snapshot src --output state.json --hash

    # Compare the tree against a saved snapshot and update it
    filetrack diff state.json --update

    # Poll for changes every second, logging to a file
    filetrack watch src --glob "*.py" --interval 1 --log-file watch.log
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from filetrack.errors import FatalScanError, FileAccessError
from filetrack.matching import AnyOf, ExtensionMatcher, GlobMatcher, MatchAll, PathMatcher
from filetrack.models import ScanOptions
from filetrack.orchestration import WatchOrchestrator
from filetrack.scanning import Walker, build_snapshot
from filetrack.tracking import Tracker, load_snapshot, save_snapshot
from filetrack.ui import ChangeDisplay

__version__ = "0.1.0"

# Initialize Typer app
app = typer.Typer(
    name="filetrack",
    help="filetrack - Find files and track changes across directory trees.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich consoles for consistent output formatting
console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"filetrack v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route the library's loggers to stderr through Rich.

    Debug output is shown with ``--verbose``; otherwise only errors.
    """
    package_logger = logging.getLogger("filetrack")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(RichHandler(console=error_console, show_path=False))
    package_logger.setLevel(logging.DEBUG if verbose else logging.ERROR)
    package_logger.propagate = False


def build_matcher(extensions: Optional[List[str]], patterns: Optional[List[str]]) -> PathMatcher:
    """Combine --ext and --glob options into one matcher (either may match)."""
    matchers: List[PathMatcher] = []
    if extensions:
        matchers.append(ExtensionMatcher(extensions))
    if patterns:
        matchers.append(GlobMatcher(patterns))
    if not matchers:
        return MatchAll()
    if len(matchers) == 1:
        return matchers[0]
    return AnyOf(matchers)


def build_options(
    hash_contents: bool,
    exclude_dirs: Optional[List[str]],
    no_follow_symlinks: bool,
    workers: int,
) -> ScanOptions:
    """Build ScanOptions from CLI options, exiting with an error if invalid."""
    try:
        return ScanOptions(
            hash_contents=hash_contents,
            follow_symlinks=not no_follow_symlinks,
            exclude_dirs=frozenset(exclude_dirs or ()),
            max_workers=workers,
        )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def validate_interval(value: float) -> float:
    """
    Validate the polling interval is positive.

    Raises:
        typer.BadParameter: If value is not positive.
    """
    if value <= 0:
        raise typer.BadParameter("Interval must be greater than 0")
    return value


EXT_OPTION = typer.Option(None, "--ext", "-e", help="File extension to include (repeatable).")
GLOB_OPTION = typer.Option(None, "--glob", "-g", help="Glob pattern to include (repeatable).")
EXCLUDE_OPTION = typer.Option(
    None, "--exclude-dir", "-x", help="Directory name to skip (repeatable)."
)
NO_FOLLOW_OPTION = typer.Option(
    False, "--no-follow-symlinks", help="Do not follow symbolic links."
)
HASH_OPTION = typer.Option(
    False, "--hash", help="Include content hashes in fingerprints (reads every file)."
)
WORKERS_OPTION = typer.Option(1, "--workers", "-w", help="Threads used to scan roots in parallel.")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-V", help="Enable verbose output.")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """filetrack - Find files and track changes across directory trees."""
    pass


@app.command()
def find(
    roots: List[Path] = typer.Argument(..., help="Directories to search."),
    ext: Optional[List[str]] = EXT_OPTION,
    glob: Optional[List[str]] = GLOB_OPTION,
    exclude_dir: Optional[List[str]] = EXCLUDE_OPTION,
    no_follow_symlinks: bool = NO_FOLLOW_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    List files matching the given extensions or glob patterns.

    Unreadable entries are skipped and reported as warnings. Exits with
    status 1 if a root cannot be read.
    """
    configure_logging(verbose)
    options = build_options(False, exclude_dir, no_follow_symlinks, 1)
    walker = Walker(roots, build_matcher(ext, glob), options)
    display = ChangeDisplay(console)

    try:
        display.display_paths(entry.path for entry in walker.iter_entries())
    except KeyboardInterrupt:
        console.print("\n[yellow]Search interrupted by user.[/yellow]")
        raise typer.Exit(130)

    diagnostics = walker.diagnostics
    if diagnostics:
        console.print(f"[yellow]Warning:[/yellow] {len(diagnostics)} unreadable entries skipped.")
        if verbose:
            for problem in diagnostics:
                console.print(f"  [dim]- {problem.message}[/dim]")

    failures = walker.root_failures
    for failure in failures:
        console.print(f"[red]Error:[/red] {failure}")
    if failures:
        raise typer.Exit(1)


@app.command()
def snapshot(
    roots: List[Path] = typer.Argument(..., help="Directories to snapshot."),
    output: Path = typer.Option(..., "--output", "-o", help="File to write the snapshot to."),
    ext: Optional[List[str]] = EXT_OPTION,
    glob: Optional[List[str]] = GLOB_OPTION,
    exclude_dir: Optional[List[str]] = EXCLUDE_OPTION,
    no_follow_symlinks: bool = NO_FOLLOW_OPTION,
    hash_contents: bool = HASH_OPTION,
    workers: int = WORKERS_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Capture the state of the matching files and save it as JSON.

    The saved file can later be compared against the tree with `diff`.
    """
    configure_logging(verbose)
    options = build_options(hash_contents, exclude_dir, no_follow_symlinks, workers)
    display = ChangeDisplay(console)

    try:
        captured = build_snapshot(roots, build_matcher(ext, glob), options)
        save_snapshot(captured, output)
    except FatalScanError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except FileAccessError as e:
        console.print(f"[red]Error:[/red] Cannot write snapshot - {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Snapshot interrupted by user.[/yellow]")
        raise typer.Exit(130)

    if verbose:
        display.display_snapshot(captured)
    display.display_diagnostics(captured)
    console.print(f"[green]Saved snapshot of {len(captured):,} file(s) to {output}[/green]")


@app.command()
def diff(
    state_file: Path = typer.Argument(..., help="Snapshot file written by `snapshot`."),
    roots: Optional[List[Path]] = typer.Argument(
        None, help="Directories to compare. Defaults to the snapshot's roots."
    ),
    ext: Optional[List[str]] = EXT_OPTION,
    glob: Optional[List[str]] = GLOB_OPTION,
    exclude_dir: Optional[List[str]] = EXCLUDE_OPTION,
    no_follow_symlinks: bool = NO_FOLLOW_OPTION,
    hash_contents: bool = HASH_OPTION,
    update: bool = typer.Option(
        False, "--update", "-u", help="Rewrite the snapshot file with the current state."
    ),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Compare a saved snapshot with the current state of the tree.

    Reports added, modified and removed files. With --update the snapshot
    file is replaced by the new state.
    """
    configure_logging(verbose)
    options = build_options(hash_contents, exclude_dir, no_follow_symlinks, 1)
    display = ChangeDisplay(console)

    try:
        previous = load_snapshot(state_file)
    except FileAccessError as e:
        console.print(f"[red]Error:[/red] Cannot read snapshot - {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    scan_roots = list(roots) if roots else list(previous.roots)
    if not scan_roots:
        console.print("[red]Error:[/red] No roots given and none recorded in the snapshot.")
        raise typer.Exit(1)

    tracker = Tracker(scan_roots, build_matcher(ext, glob), options, initial=previous)
    try:
        changes = tracker.rescan()
    except FatalScanError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Diff interrupted by user.[/yellow]")
        raise typer.Exit(130)

    display.display_changes(changes)
    display.display_diagnostics(tracker.current())

    if update:
        try:
            save_snapshot(tracker.current(), state_file)
        except FileAccessError as e:
            console.print(f"[red]Error:[/red] Cannot write snapshot - {e}")
            raise typer.Exit(1)
        console.print(f"[dim]Snapshot updated: {state_file}[/dim]")


@app.command()
def watch(
    roots: List[Path] = typer.Argument(..., help="Directories to watch."),
    ext: Optional[List[str]] = EXT_OPTION,
    glob: Optional[List[str]] = GLOB_OPTION,
    exclude_dir: Optional[List[str]] = EXCLUDE_OPTION,
    no_follow_symlinks: bool = NO_FOLLOW_OPTION,
    hash_contents: bool = HASH_OPTION,
    workers: int = WORKERS_OPTION,
    interval: float = typer.Option(
        2.0,
        "--interval",
        "-i",
        help="Seconds between rescans.",
        callback=validate_interval,
    ),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations",
        "-n",
        min=1,
        help="Stop after this many rescans (default: run until Ctrl+C).",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Poll the roots for changes and print them as they happen.

    The first rescan records the initial state; every later rescan lists
    added, modified and removed files.
    """
    configure_logging(verbose)
    options = build_options(hash_contents, exclude_dir, no_follow_symlinks, workers)

    try:
        orchestrator = WatchOrchestrator(
            roots=roots,
            matcher=build_matcher(ext, glob),
            options=options,
            interval=interval,
            iterations=iterations,
            log_file_path=log_file,
            verbose=verbose,
            display=ChangeDisplay(console),
        )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    summary = orchestrator.run()

    if log_file and verbose:
        console.print(f"[dim]Log written to: {log_file}[/dim]")

    if summary.interrupted:
        raise typer.Exit(130)
    elif summary.failed_rescans:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
