"""
Integration tests for the complete tracking workflow.

Tests cover:
- Snapshot, persist, restore and diff across a simulated restart
- Multi-root tracking with hashing and parallel workers
- Combined matchers over a realistic project tree
- Deep trees that would exceed the recursion limit
"""

import sys
from pathlib import Path

import pytest

from conftest import bump_mtime, write_file
from filetrack import (
    ExtensionMatcher,
    GlobMatcher,
    ScanOptions,
    SizeMatcher,
    Tracker,
    build_snapshot,
    diff,
    find_files,
    load_snapshot,
    save_snapshot,
    walk,
)


@pytest.fixture
def project_tree(temp_dir: Path) -> Path:
    """Create a project-like tree with sources, build output and VCS data.

    Creates:
        temp_dir/project/
        ├── README.md
        ├── setup.py
        ├── .git/
        │   └── HEAD
        ├── build/
        │   └── lib/
        │       └── app.py
        ├── src/
        │   ├── app.py
        │   ├── empty.py
        │   └── pkg/
        │       ├── __init__.py
        │       └── core.py
        └── tests/
            └── test_app.py
    """
    root = temp_dir / "project"
    write_file(root / "README.md", "# Project\n")
    write_file(root / "setup.py", "from setuptools import setup\nsetup()\n")
    write_file(root / ".git" / "HEAD", "ref: refs/heads/main\n")
    write_file(root / "build" / "lib" / "app.py", "# built copy\n")
    write_file(root / "src" / "app.py", "import pkg\n")
    write_file(root / "src" / "empty.py", "")
    write_file(root / "src" / "pkg" / "__init__.py", "")
    write_file(root / "src" / "pkg" / "core.py", "VALUE = 1\n")
    write_file(root / "tests" / "test_app.py", "def test_app(): pass\n")
    return root


@pytest.mark.integration
class TestRestartWorkflow:
    """Persisted snapshots survive a process restart."""

    def test_snapshot_restore_and_diff(self, project_tree: Path, temp_dir: Path):
        options = ScanOptions(exclude_dirs={".git", "build"}, hash_contents=True)
        state_file = temp_dir / "state.json"

        # First session
        tracker = Tracker(project_tree, ExtensionMatcher(["py"]), options)
        assert len(tracker.rescan().added) == 6
        save_snapshot(tracker.current(), state_file)

        # Edits while nothing is running
        (project_tree / "src" / "pkg" / "core.py").write_text("VALUE = 2\n")
        bump_mtime(project_tree / "src" / "pkg" / "core.py")
        (project_tree / "tests" / "test_app.py").unlink()
        write_file(project_tree / "src" / "pkg" / "extra.py", "EXTRA = True\n")

        # Second session seeded from disk
        restored = load_snapshot(state_file)
        tracker = Tracker(project_tree, ExtensionMatcher(["py"]), options, initial=restored)
        changes = tracker.rescan()

        assert changes.modified == {project_tree / "src" / "pkg" / "core.py"}
        assert changes.removed == {project_tree / "tests" / "test_app.py"}
        assert changes.added == {project_tree / "src" / "pkg" / "extra.py"}
        assert len(changes.unchanged) == 4

    def test_one_shot_diff_matches_tracker(self, project_tree: Path):
        before = build_snapshot(project_tree, "*.py")
        write_file(project_tree / "src" / "new.py", "NEW = 1\n")
        after = build_snapshot(project_tree, "*.py")

        assert diff(before, after).added == {project_tree / "src" / "new.py"}


@pytest.mark.integration
class TestMultiRootWorkflow:
    """Several roots scanned in parallel."""

    def test_parallel_hashing_roots(self, project_tree: Path):
        roots = [project_tree / "src", project_tree / "tests", project_tree / "build"]
        options = ScanOptions(hash_contents=True, max_workers=3)

        tracker = Tracker(roots, "*.py", options)
        first = tracker.rescan()
        second = tracker.rescan()

        assert len(first.added) == 6
        assert not second.has_changes
        assert tracker.fingerprinter.get_hash_stats()["files"] == 12

    def test_combined_matchers(self, project_tree: Path):
        matcher = (ExtensionMatcher(["py", "md"]) & ~GlobMatcher(["test_*"])) & SizeMatcher(min_size=1)
        options = ScanOptions(exclude_dirs={"build"})

        names = sorted(path.name for path in walk(project_tree, matcher, options))

        assert names == ["README.md", "app.py", "core.py", "setup.py"]

    def test_find_files_across_roots(self, project_tree: Path):
        found = find_files([project_tree / "src", project_tree / "build"], ["app.py", "core.py"])

        assert found["app.py"] == project_tree / "src" / "app.py"
        assert found["core.py"] == project_tree / "src" / "pkg" / "core.py"


@pytest.mark.integration
@pytest.mark.slow
def test_deep_tree_beyond_recursion_limit(temp_dir: Path):
    """Traversal depth is not bounded by the interpreter's recursion limit."""
    depth = 300
    root = temp_dir / "deep"
    current = root
    current.mkdir()
    for _ in range(depth):
        current = current / "d"
        current.mkdir()
    (current / "leaf.txt").write_text("bottom")

    original_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(200)
    try:
        paths = list(walk(root, "*.txt"))
    finally:
        sys.setrecursionlimit(original_limit)

    assert len(paths) == 1
    assert paths[0].name == "leaf.txt"
