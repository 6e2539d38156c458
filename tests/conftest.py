"""Pytest fixtures for filetrack tests."""

import dataclasses
import io
import os
import platform
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Set, Tuple

import pytest
from rich.console import Console

from filetrack.errors import ErrorKind, FileAccessError
from filetrack.models import EntryKind, FileMetadata
from filetrack.scanning import LocalFilesystem


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests touching the real filesystem end to end")
    config.addinivalue_line("markers", "slow: tests that take more than a second")


class FailingFilesystem(LocalFilesystem):
    """LocalFilesystem that raises FileAccessError for chosen paths.

    Failures are registered per operation: "list" (list_directory),
    "stat" (read_metadata and directory_id) and "open" (open_binary).
    Every call is counted in ``calls`` for assertions on I/O.
    """

    def __init__(self) -> None:
        self._failures: Dict[Tuple[str, Path], ErrorKind] = {}
        self.calls: List[Tuple[str, Path]] = []

    def fail(self, path: Path, kind: ErrorKind = ErrorKind.PERMISSION_DENIED, on: str = "list") -> None:
        self._failures[(on, Path(os.path.abspath(path)))] = kind

    def reset(self) -> None:
        self._failures.clear()
        self.calls.clear()

    def _check(self, operation: str, path: Path) -> None:
        self.calls.append((operation, path))
        kind = self._failures.get((operation, path))
        if kind is not None:
            raise FileAccessError(kind, path, f"Injected {kind.value}: {path}")

    def list_directory(self, path: Path) -> List[Tuple[str, EntryKind]]:
        self._check("list", path)
        return super().list_directory(path)

    def read_metadata(self, path: Path, follow_symlinks: bool = True) -> FileMetadata:
        self._check("stat", path)
        return super().read_metadata(path, follow_symlinks)

    def directory_id(self, path: Path):
        self._check("stat", path)
        return super().directory_id(path)

    def open_binary(self, path: Path):
        self._check("open", path)
        return super().open_binary(path)

    def stat_calls(self) -> Set[Path]:
        return {path for operation, path in self.calls if operation == "stat"}


class FrozenClockFilesystem(LocalFilesystem):
    """LocalFilesystem whose timestamps never advance.

    Mimics a filesystem with a coarse clock where every write lands in the
    same tick: files report their real size but fixed mtime and ctime.
    """

    def __init__(self, timestamp_ns: int = 1_600_000_000_000_000_000) -> None:
        self.timestamp_ns = timestamp_ns

    def read_metadata(self, path: Path, follow_symlinks: bool = True) -> FileMetadata:
        metadata = super().read_metadata(path, follow_symlinks)
        return dataclasses.replace(
            metadata, modified_ns=self.timestamp_ns, changed_ns=self.timestamp_ns
        )


def write_file(path: Path, content: str, mtime_ns: int = None) -> Path:
    """Write ``content`` to ``path`` and optionally pin its modification time.

    Pinning the time keeps tests independent of the filesystem's timestamp
    resolution.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mtime_ns is not None:
        os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


def bump_mtime(path: Path, seconds: int = 10) -> None:
    """Move the modification time of ``path`` forward by ``seconds``."""
    current = path.stat().st_mtime_ns
    new_time = current + seconds * 1_000_000_000
    os.utime(path, ns=(new_time, new_time))


def symlinks_supported(temp_dir: Path) -> bool:
    marker = temp_dir / ".symlink_check"
    try:
        marker.symlink_to(temp_dir, target_is_directory=True)
    except (OSError, NotImplementedError):
        return False
    marker.unlink()
    return True


def running_as_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


skip_if_no_permissions = pytest.mark.skipif(
    platform.system() == "Windows" or running_as_root(),
    reason="Permission bits are not enforced on Windows or for root",
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory (absolute, symlinks resolved).
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def sample_tree(temp_dir: Path) -> Path:
    """Create a small tree used by most walker and tracker tests.

    Creates:
        temp_dir/root/
        ├── a.txt
        ├── b.log
        ├── c.txt
        └── sub/
            ├── d.txt
            └── deeper/
                └── e.md

    Returns:
        Path to the root directory.
    """
    root = temp_dir / "root"
    write_file(root / "a.txt", "alpha")
    write_file(root / "b.log", "log line")
    write_file(root / "c.txt", "gamma")
    write_file(root / "sub" / "d.txt", "delta")
    write_file(root / "sub" / "deeper" / "e.md", "# epsilon")
    return root


@pytest.fixture
def failing_fs() -> FailingFilesystem:
    """Return a filesystem with injectable per-path failures."""
    return FailingFilesystem()


@pytest.fixture
def frozen_clock_fs() -> FrozenClockFilesystem:
    """Return a filesystem whose timestamps never change."""
    return FrozenClockFilesystem()


@pytest.fixture
def symlink_support(temp_dir: Path) -> None:
    """Skip the test if symbolic links cannot be created here."""
    if not symlinks_supported(temp_dir):
        pytest.skip("Symlinks are not supported on this platform")


@pytest.fixture
def console_output() -> Tuple[Console, io.StringIO]:
    """Create a Rich Console writing to a StringIO, without colors.

    Returns:
        Tuple of (Console, StringIO for reading output).
    """
    output = io.StringIO()
    console = Console(file=output, force_terminal=False, color_system=None, width=200)
    return console, output


@pytest.fixture
def file_writer() -> Callable[..., Path]:
    """Expose write_file to tests."""
    return write_file


@pytest.fixture
def mtime_bumper() -> Callable[..., None]:
    """Expose bump_mtime to tests."""
    return bump_mtime
