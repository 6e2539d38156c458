"""Snapshot comparison.

``diff`` classifies every path of two snapshots into exactly one of Added,
Modified, Removed or Unchanged using set and mapping membership, in time
linear in the number of tracked files.

A file deleted and recreated with an identical fingerprint between two scans
cannot be told apart from one that never changed and is reported Unchanged.
"""

from pathlib import Path
from typing import Mapping, Optional, Set

from filetrack.models import ChangeSet, Fingerprint


def diff(
    old: Optional[Mapping[Path, Fingerprint]],
    new: Mapping[Path, Fingerprint],
) -> ChangeSet:
    """Compare two snapshots.

    Args:
        old: The previous snapshot, or None before the first scan.
        new: The current snapshot.

    Returns:
        ChangeSet partitioning the union of both snapshots' paths.

    Example:
        >>> changes = diff(tracker_snapshot, build_snapshot("/src"))
        >>> for path in changes.modified:
        ...     print(f"changed: {path}")
    """
    if not old:
        return ChangeSet(added=frozenset(new))

    added: Set[Path] = set()
    modified: Set[Path] = set()
    unchanged: Set[Path] = set()

    for path, fingerprint in new.items():
        previous = old.get(path)
        if previous is None:
            added.add(path)
        elif previous != fingerprint:
            modified.add(path)
        else:
            unchanged.add(path)

    removed = {path for path in old if path not in new}

    return ChangeSet(
        added=frozenset(added),
        modified=frozenset(modified),
        removed=frozenset(removed),
        unchanged=frozenset(unchanged),
    )
