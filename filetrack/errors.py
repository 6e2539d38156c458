"""Exception types for filetrack.

Filesystem failures are normalized into FileAccessError carrying an ErrorKind,
so callers can branch on "not found" vs "permission denied" without inspecting
errno values. Root-level scan failures surface as FatalScanError; per-entry
failures never raise and are reported as TraversalError diagnostics instead
(see filetrack.models).
"""

import errno
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence


class ErrorKind(Enum):
    """Classification of a filesystem access failure."""
    NOT_FOUND = "not_found"                  # Entry does not exist (or vanished)
    PERMISSION_DENIED = "permission_denied"  # Access refused by the OS
    INVALID_DATA = "invalid_data"            # Content cannot be decoded as requested
    OTHER = "other"                          # Any other I/O failure


class FileTrackError(Exception):
    """Base class for all filetrack errors."""


class FileAccessError(FileTrackError, OSError):
    """A filesystem call failed.

    Attributes:
        kind: The ErrorKind classification.
        path: Path the failing call was made on.
        cause: The underlying OSError or decoding error, if any.
    """

    def __init__(
        self,
        kind: ErrorKind,
        path: Path,
        message: str,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.path = path
        self.cause = cause

    @classmethod
    def from_os_error(cls, path: Path, error: OSError) -> "FileAccessError":
        """Build a FileAccessError from an OSError raised on ``path``.

        Args:
            path: Path the failing call was made on.
            error: The OSError to classify.

        Returns:
            FileAccessError with the matching ErrorKind.

        Example:
            >>> try:
            ...     os.stat("/missing")
            ... except OSError as e:
            ...     err = FileAccessError.from_os_error(Path("/missing"), e)
            >>> err.kind
            <ErrorKind.NOT_FOUND: 'not_found'>
        """
        if isinstance(error, FileAccessError):
            return error
        if isinstance(error, FileNotFoundError) or error.errno == errno.ENOENT:
            kind = ErrorKind.NOT_FOUND
            message = f"Not found: {path}"
        elif isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
            kind = ErrorKind.PERMISSION_DENIED
            message = f"Permission denied: {path}"
        else:
            kind = ErrorKind.OTHER
            message = f"Error accessing {path}: {error}"
        return cls(kind, path, message, cause=error)

    def __str__(self) -> str:
        return self.args[0] if self.args else f"Error accessing {self.path}"


class FatalScanError(FileTrackError):
    """A scan root could not be traversed.

    Attributes:
        root: The root that failed.
        cause: The FileAccessError explaining why.
        other_failures: Further root failures from the same scan, if any.
    """

    def __init__(
        self,
        root: Path,
        cause: FileAccessError,
        other_failures: Sequence["FatalScanError"] = (),
    ) -> None:
        super().__init__(f"Cannot scan root {root}: {cause}")
        self.root = root
        self.cause = cause
        self.other_failures: List[FatalScanError] = list(other_failures)


class ScanCancelled(FileTrackError):
    """A scan was cancelled cooperatively before completion."""


class MissingFilesError(FileTrackError):
    """Some requested file names were not found during a search.

    Attributes:
        missing: Requested names that were not found, in request order.
        suggestions: For each missing name, close file names seen during the
            walk (possibly empty).
    """

    def __init__(
        self,
        missing: Sequence[str],
        suggestions: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        self.missing: List[str] = list(missing)
        self.suggestions: Dict[str, List[str]] = suggestions or {}
        lines = ["Could not find all files", "Missing files:"]
        for name in self.missing:
            hint = self.suggestions.get(name)
            if hint:
                lines.append(f"  - {name} (did you mean: {', '.join(hint)}?)")
            else:
                lines.append(f"  - {name}")
        super().__init__("\n".join(lines))
