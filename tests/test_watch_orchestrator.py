"""Tests for the WatchOrchestrator class."""

import io
import shutil
from pathlib import Path
from typing import Callable, List, Tuple

import pytest
from rich.console import Console

from conftest import write_file
from filetrack.orchestration import WatchOrchestrator
from filetrack.scanning import build_snapshot
from filetrack.ui import ChangeDisplay


def scripted_sleep(actions: List[Callable[[], None]], calls: List[float]) -> Callable[[float], None]:
    """Return a sleep replacement running one scripted tree edit per call."""

    def sleep(seconds: float) -> None:
        calls.append(seconds)
        if actions:
            actions.pop(0)()

    return sleep


@pytest.fixture
def display_with_output(console_output: Tuple[Console, io.StringIO]) -> Tuple[ChangeDisplay, io.StringIO]:
    console, output = console_output
    return ChangeDisplay(console=console), output


class TestWatchOrchestratorInit:
    """Argument validation."""

    def test_interval_must_be_positive(self, sample_tree: Path) -> None:
        with pytest.raises(ValueError, match="interval"):
            WatchOrchestrator([sample_tree], interval=0)

    def test_iterations_must_be_positive(self, sample_tree: Path) -> None:
        with pytest.raises(ValueError, match="iterations"):
            WatchOrchestrator([sample_tree], iterations=0)


class TestWatchOrchestratorRun:
    """Watch loop behavior."""

    def test_reports_changes_between_rescans(self, sample_tree: Path, display_with_output) -> None:
        display, output = display_with_output
        calls: List[float] = []
        actions = [
            lambda: write_file(sample_tree / "new.txt", "new"),
            lambda: (sample_tree / "c.txt").unlink(),
        ]
        orchestrator = WatchOrchestrator(
            [sample_tree],
            matcher="*.txt",
            interval=0.5,
            iterations=3,
            display=display,
            sleep=scripted_sleep(actions, calls),
        )

        summary = orchestrator.run()

        result = output.getvalue()
        assert calls == [0.5, 0.5]
        assert summary.rescans == 3
        assert summary.files_added == 4
        assert summary.files_removed == 1
        assert summary.tracked_files == 3
        assert summary.failed_rescans == 0
        assert not summary.interrupted
        assert "Tracking 3 file(s)." in result
        assert "Rescan 2" in result
        assert str(sample_tree / "new.txt") in result
        assert "Rescan 3" in result
        assert "Watch Summary" in result

    def test_quiet_rescans_print_nothing(self, sample_tree: Path, display_with_output) -> None:
        display, output = display_with_output
        orchestrator = WatchOrchestrator(
            [sample_tree], iterations=2, display=display, sleep=lambda s: None
        )

        orchestrator.run()

        assert "Rescan 2" not in output.getvalue()

    def test_verbose_reports_quiet_rescans(self, sample_tree: Path, display_with_output) -> None:
        display, output = display_with_output
        orchestrator = WatchOrchestrator(
            [sample_tree], iterations=2, verbose=True, display=display, sleep=lambda s: None
        )

        orchestrator.run()

        assert "Rescan 2: no changes." in output.getvalue()

    def test_seeded_first_rescan_shows_changes(self, sample_tree: Path, display_with_output) -> None:
        display, output = display_with_output
        initial = build_snapshot(sample_tree, "*.txt")
        (sample_tree / "a.txt").unlink()

        orchestrator = WatchOrchestrator(
            [sample_tree], matcher="*.txt", iterations=1, display=display, initial=initial
        )
        summary = orchestrator.run()

        result = output.getvalue()
        assert "Tracking" not in result
        assert str(sample_tree / "a.txt") in result
        assert summary.files_removed == 1
        assert summary.files_added == 0

    def test_failed_rescans_counted(self, sample_tree: Path, temp_dir: Path, display_with_output) -> None:
        display, output = display_with_output
        actions = [lambda: shutil.rmtree(sample_tree)]
        orchestrator = WatchOrchestrator(
            [sample_tree],
            iterations=3,
            display=display,
            sleep=scripted_sleep(actions, []),
        )

        summary = orchestrator.run()

        assert summary.rescans == 1
        assert summary.failed_rescans == 2
        assert len(summary.errors) == 2
        assert summary.tracked_files == 5
        assert "Error:" in output.getvalue()

    def test_keyboard_interrupt(self, sample_tree: Path, display_with_output) -> None:
        display, output = display_with_output

        def interrupt(seconds: float) -> None:
            raise KeyboardInterrupt

        orchestrator = WatchOrchestrator([sample_tree], display=display, sleep=interrupt)

        summary = orchestrator.run()

        assert summary.interrupted
        assert summary.rescans == 1
        assert "Watch interrupted by user." in output.getvalue()
        assert "Watch Summary" in output.getvalue()

    def test_log_file_written(self, sample_tree: Path, temp_dir: Path, display_with_output) -> None:
        display, _ = display_with_output
        log_path = temp_dir / "watch.log"
        actions = [lambda: write_file(sample_tree / "new.txt", "new")]

        orchestrator = WatchOrchestrator(
            [sample_tree],
            matcher="*.txt",
            iterations=2,
            log_file_path=log_path,
            display=display,
            sleep=scripted_sleep(actions, []),
        )
        orchestrator.run()

        content = log_path.read_text()
        assert "filetrack - Watch Log" in content
        assert "Rescan 1: 3 files tracked" in content
        assert f"+ {sample_tree / 'new.txt'}" in content
        assert "SUMMARY" in content
        assert "Rescans: 2" in content

    def test_unwritable_log_location_does_not_stop_watch(
        self, sample_tree: Path, temp_dir: Path, display_with_output, capsys
    ) -> None:
        display, _ = display_with_output
        orchestrator = WatchOrchestrator(
            [sample_tree],
            iterations=1,
            log_file_path=temp_dir / "missing" / "watch.log",
            display=display,
        )

        summary = orchestrator.run()

        assert summary.rescans == 1
        assert "Could not create log file" in capsys.readouterr().err
