"""
File loading and one-shot search helpers for filetrack.

These are thin wrappers over the Walker for callers that need to find and
read files once, without tracking changes:

- load_bytes / load_text: Read a whole file or fail with no partial output
- find_files: Locate files by exact name, suggesting close names when missing
- find_and_load: Locate files by name and load their bytes
- find_by_extension: List files with the given extensions
- for_each_match: Run a callback on every matching file
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set

from rapidfuzz import fuzz, process

from filetrack.errors import FatalScanError, FileAccessError, MissingFilesError
from filetrack.matching import ExtensionMatcher, MatcherLike
from filetrack.scanning import Filesystem, LocalFilesystem, Walker
from filetrack.scanning.walker import RootsLike

logger = logging.getLogger(__name__)

# Minimum similarity (0-100) for a file name to be offered as a suggestion
SUGGESTION_CUTOFF = 80.0
MAX_SUGGESTIONS = 3


def load_bytes(path: Path, filesystem: Optional[Filesystem] = None) -> bytes:
    """Read the full contents of ``path``.

    Raises:
        FileAccessError: If the file cannot be read.
    """
    fs = filesystem if filesystem is not None else LocalFilesystem()
    return fs.read_bytes(Path(path))


def load_text(
    path: Path,
    encoding: str = "utf-8",
    filesystem: Optional[Filesystem] = None,
) -> str:
    """Read the full contents of ``path`` as text.

    Raises:
        FileAccessError: If the file cannot be read, or with kind
            INVALID_DATA if the content is not valid in ``encoding``.
    """
    fs = filesystem if filesystem is not None else LocalFilesystem()
    return fs.read_text(Path(path), encoding)


def _check_walk(walker: Walker, ignore_fail: bool) -> None:
    """Raise for failures recorded by a completed walk.

    Unreadable roots always raise. Per-entry failures raise the first one
    unless ``ignore_fail`` is set, in which case they are only logged.
    """
    failures = walker.root_failures
    if failures:
        first = failures[0]
        raise FatalScanError(first.root, first.cause, other_failures=failures[1:])

    for problem in walker.diagnostics:
        if not ignore_fail:
            raise FileAccessError(problem.kind, problem.path, problem.message)
        logger.warning("Ignoring unreadable entry: %s", problem.message)


def _suggest(name: str, candidates: Set[str]) -> List[str]:
    matches = process.extract(
        name,
        candidates,
        scorer=fuzz.ratio,
        limit=MAX_SUGGESTIONS,
        score_cutoff=SUGGESTION_CUTOFF,
    )
    return [choice for choice, _score, _key in matches]


def find_files(
    roots: RootsLike,
    names: Iterable[str],
    matcher: MatcherLike = None,
    ignore_fail: bool = False,
    filesystem: Optional[Filesystem] = None,
) -> Dict[str, Path]:
    """Locate files by exact file name.

    When a name occurs more than once, the first occurrence in walk order
    (roots in order given, then lexical) wins.

    Args:
        roots: One root or an iterable of roots to search.
        names: File names to look for.
        matcher: Optional additional filter on candidate files.
        ignore_fail: Skip unreadable entries instead of raising.
        filesystem: Filesystem collaborator; defaults to LocalFilesystem.

    Returns:
        Mapping of each requested name to the path where it was found, in
        request order.

    Raises:
        MissingFilesError: If any name was not found. Close file names seen
            during the search are attached as suggestions.
        FatalScanError: If a root cannot be read.
        FileAccessError: If an entry cannot be read and ``ignore_fail`` is
            False.

    Example:
        >>> found = find_files("/etc", ["hosts", "resolv.conf"])
        >>> found["hosts"]
        PosixPath('/etc/hosts')
    """
    wanted = list(dict.fromkeys(names))
    wanted_set = set(wanted)
    found: Dict[str, Path] = {}
    seen_names: Set[str] = set()

    walker = Walker(roots, matcher, filesystem=filesystem)
    for entry in walker.iter_entries():
        name = entry.path.name
        seen_names.add(name)
        if name in wanted_set and name not in found:
            found[name] = entry.path
    _check_walk(walker, ignore_fail)

    missing = [name for name in wanted if name not in found]
    if missing:
        suggestions = {name: _suggest(name, seen_names) for name in missing}
        raise MissingFilesError(missing, suggestions)

    return {name: found[name] for name in wanted}


def find_and_load(
    roots: RootsLike,
    names: Iterable[str],
    process_path: Optional[Callable[[Path], Path]] = None,
    ignore_fail: bool = False,
    filesystem: Optional[Filesystem] = None,
) -> Dict[str, bytes]:
    """Locate files by name, optionally transform each path, and load bytes.

    Args:
        roots: One root or an iterable of roots to search.
        names: File names to look for.
        process_path: Optional callable mapping a found path to the path
            that should be loaded instead (e.g. a generated artifact).
        ignore_fail: Skip unreadable entries instead of raising.
        filesystem: Filesystem collaborator; defaults to LocalFilesystem.

    Returns:
        Mapping of each requested name to the loaded bytes.

    Raises:
        MissingFilesError: If any name was not found.
        FileAccessError: If a found file cannot be loaded.
    """
    found = find_files(roots, names, ignore_fail=ignore_fail, filesystem=filesystem)
    loaded: Dict[str, bytes] = {}
    for name, path in found.items():
        target = process_path(path) if process_path is not None else path
        loaded[name] = load_bytes(target, filesystem)
    return loaded


def find_by_extension(
    roots: RootsLike,
    extensions: Iterable[str],
    ignore_fail: bool = False,
    filesystem: Optional[Filesystem] = None,
) -> List[Path]:
    """List files with any of ``extensions`` in walk order.

    Raises:
        ValueError: If no extension is given.
        FatalScanError: If a root cannot be read.
        FileAccessError: If an entry cannot be read and ``ignore_fail`` is
            False.
    """
    walker = Walker(roots, ExtensionMatcher(extensions), filesystem=filesystem)
    paths = [entry.path for entry in walker.iter_entries()]
    _check_walk(walker, ignore_fail)
    return paths


def for_each_match(
    roots: RootsLike,
    matcher: MatcherLike,
    callback: Callable[[Path], None],
    ignore_fail: bool = False,
    filesystem: Optional[Filesystem] = None,
) -> int:
    """Call ``callback`` on every matching file.

    Failures recorded during the walk are checked once the walk completes,
    after the callback has run for every readable file.

    Returns:
        Number of files the callback was called on.
    """
    walker = Walker(roots, matcher, filesystem=filesystem)
    count = 0
    for entry in walker.iter_entries():
        callback(entry.path)
        count += 1
    _check_walk(walker, ignore_fail)
    return count
