"""Snapshot serialization.

The engine never persists anything on its own. These helpers let a caller
save a Snapshot as JSON and restore it later, for example to seed a Tracker
after a process restart:

    >>> save_snapshot(tracker.current(), Path("state.json"))
    >>> tracker = Tracker(roots, matcher, initial=load_snapshot(Path("state.json")))

Diagnostics are not persisted.
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from filetrack.models import Fingerprint, Snapshot
from filetrack.scanning.filesystem import translate_os_errors

FORMAT_VERSION = 1


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    """Convert a Snapshot into a JSON-serializable dictionary."""
    files = {}
    for path in sorted(snapshot, key=str):
        fingerprint = snapshot[path]
        files[str(path)] = {
            "size": fingerprint.size,
            "modified_ns": fingerprint.modified_ns,
            "content_hash": fingerprint.content_hash,
        }
    return {
        "format_version": FORMAT_VERSION,
        "captured_at": snapshot.captured_at.isoformat(),
        "roots": [str(root) for root in snapshot.roots],
        "failed_roots": [str(root) for root in snapshot.failed_roots],
        "files": files,
    }


def snapshot_from_dict(data: Dict[str, Any]) -> Snapshot:
    """Rebuild a Snapshot from ``snapshot_to_dict`` output.

    Raises:
        ValueError: If the data has an unsupported format version or is
            malformed.
    """
    version = data.get("format_version")
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported snapshot format version: {version!r}")
    try:
        entries = {
            Path(path): Fingerprint(
                size=int(record["size"]),
                modified_ns=int(record["modified_ns"]),
                content_hash=record.get("content_hash"),
            )
            for path, record in data["files"].items()
        }
        return Snapshot(
            entries,
            captured_at=datetime.fromisoformat(data["captured_at"]),
            roots=[Path(root) for root in data.get("roots", [])],
            failed_roots=[Path(root) for root in data.get("failed_roots", [])],
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed snapshot data: {e}") from e


def save_snapshot(snapshot: Snapshot, path: Path) -> None:
    """Write ``snapshot`` to ``path`` as JSON.

    The file is written to a temporary sibling first and moved into place,
    so readers never see a half-written file.

    Raises:
        FileAccessError: If the file cannot be written.
    """
    path = Path(path)
    payload = json.dumps(snapshot_to_dict(snapshot), indent=2)
    with translate_os_errors(path):
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            os.unlink(tmp_name)
            raise


def load_snapshot(path: Path) -> Snapshot:
    """Read a Snapshot previously written by ``save_snapshot``.

    Raises:
        FileAccessError: If the file cannot be read.
        ValueError: If the content is not a valid snapshot.
    """
    path = Path(path)
    with translate_os_errors(path):
        text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid snapshot file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid snapshot file {path}: expected a JSON object")
    return snapshot_from_dict(data)
