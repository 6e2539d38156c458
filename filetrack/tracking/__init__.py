"""Change tracking package for filetrack.

- diff: Classifies the delta between two snapshots.
- Tracker: Owns the current Snapshot and reports changes on every rescan.
- save_snapshot / load_snapshot: Caller-side JSON persistence.
"""

from .delta import diff
from .persistence import (
    load_snapshot,
    save_snapshot,
    snapshot_from_dict,
    snapshot_to_dict,
)
from .tracker import Tracker

__all__ = [
    "diff",
    "Tracker",
    "load_snapshot",
    "save_snapshot",
    "snapshot_from_dict",
    "snapshot_to_dict",
]
