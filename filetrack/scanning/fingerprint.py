"""File fingerprinting with optional content hashing.

This module provides the Fingerprinter class, which turns the metadata the
Walker already read into a Fingerprint. When content hashing is enabled the
file is additionally streamed through ``hashlib`` in fixed-size chunks.

Content is read on every fingerprint. Digests are never reused on the
strength of unchanged metadata: on filesystems with coarse timestamps a
same-size rewrite within one clock tick leaves size, mtime and ctime
identical, and only the content tells the two versions apart.

Metadata and content are read by separate calls. A file rewritten between the
two may produce a fingerprint pairing old metadata with new content; the next
rescan observes the settled state.

Example:
    >>> from filetrack.scanning import Fingerprinter
    >>> fingerprinter = Fingerprinter(hash_contents=True)
    >>> fp = fingerprinter.fingerprint_path(Path("/path/to/file.txt"))
    >>> print(fp.size, fp.content_hash)
"""

import hashlib
import threading
from pathlib import Path
from typing import Dict, Optional

from filetrack.errors import ErrorKind, FileAccessError
from filetrack.models import FileEntry, FileMetadata, Fingerprint

from .filesystem import Filesystem, LocalFilesystem, translate_os_errors

# Buffer size for chunked file reading (8KB)
CHUNK_SIZE = 8192


class Fingerprinter:
    """Computes Fingerprints, optionally including a content digest.

    Attributes:
        hash_contents: Whether fingerprints carry a content hash.
        algorithm: ``hashlib`` algorithm name used for content hashes.

    Example:
        >>> fingerprinter = Fingerprinter(hash_contents=True)
        >>> fp = fingerprinter.fingerprint(entry)
        >>> stats = fingerprinter.get_hash_stats()
        >>> print(f"Files: {stats['files']}, Bytes: {stats['bytes']}")
    """

    def __init__(
        self,
        hash_contents: bool = False,
        algorithm: str = "sha256",
        filesystem: Optional[Filesystem] = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        """Initialize the Fingerprinter.

        Raises:
            ValueError: If ``algorithm`` is not available in hashlib or
                ``chunk_size`` is not positive.
        """
        if algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unknown hash algorithm: {algorithm}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.hash_contents = hash_contents
        self.algorithm = algorithm
        self._fs = filesystem if filesystem is not None else LocalFilesystem()
        self._chunk_size = chunk_size
        # Parallel root scans share one Fingerprinter
        self._lock = threading.Lock()
        self._files_hashed: int = 0
        self._bytes_hashed: int = 0

    def fingerprint(self, entry: FileEntry) -> Fingerprint:
        """Build the Fingerprint of a walked file.

        No I/O happens unless content hashing is enabled.

        Args:
            entry: FileEntry produced by the Walker.

        Returns:
            The file's Fingerprint.

        Raises:
            FileAccessError: If content hashing is enabled and the file
                cannot be read.
        """
        return self._build(entry.path, entry.metadata)

    def fingerprint_path(self, path: Path) -> Fingerprint:
        """Read metadata for ``path`` and fingerprint it.

        Raises:
            FileAccessError: If the path cannot be read or is not a file.
        """
        metadata = self._fs.read_metadata(path)
        if not metadata.is_file:
            raise FileAccessError(ErrorKind.OTHER, path, f"Not a file: {path}")
        return self._build(path, metadata)

    def _build(self, path: Path, metadata: FileMetadata) -> Fingerprint:
        content_hash = None
        if self.hash_contents:
            content_hash = self.hash_file(path)
        return Fingerprint(
            size=metadata.size,
            modified_ns=metadata.modified_ns,
            content_hash=content_hash,
        )

    def hash_file(self, path: Path) -> str:
        """Return the content digest of ``path``.

        Args:
            path: File to hash.

        Raises:
            FileAccessError: If the file cannot be read.
        """
        hasher = hashlib.new(self.algorithm)
        total = 0
        with self._fs.open_binary(path) as f:
            with translate_os_errors(path):
                # Read file in chunks to handle large files efficiently
                while True:
                    chunk = f.read(self._chunk_size)
                    if not chunk:
                        break
                    hasher.update(chunk)
                    total += len(chunk)

        with self._lock:
            self._files_hashed += 1
            self._bytes_hashed += total
        return hasher.hexdigest()

    def reset_stats(self) -> None:
        """Reset the hashing counters."""
        with self._lock:
            self._files_hashed = 0
            self._bytes_hashed = 0

    def get_hash_stats(self) -> Dict[str, int]:
        """Get hashing statistics for debugging and monitoring.

        Returns:
            Dictionary containing:
            - 'files': Number of files hashed
            - 'bytes': Number of content bytes read while hashing
        """
        with self._lock:
            return {
                "files": self._files_hashed,
                "bytes": self._bytes_hashed,
            }
