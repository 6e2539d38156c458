"""Filesystem access layer for filetrack.

Every filesystem call made by the scan engine goes through a Filesystem
object. LocalFilesystem is the default implementation over ``os``; tests and
callers with virtual trees can substitute their own.

All methods raise FileAccessError (never a bare OSError) so the Walker can
classify failures without inspecting errno values.
"""

import os
import stat
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, List, Tuple

from filetrack.errors import ErrorKind, FileAccessError
from filetrack.models import EntryKind, FileMetadata

DirectoryId = Tuple[int, int]


@contextmanager
def translate_os_errors(path: Path) -> Iterator[None]:
    """Re-raise any OSError inside the block as a FileAccessError for ``path``."""
    try:
        yield
    except FileAccessError:
        raise
    except OSError as e:
        raise FileAccessError.from_os_error(path, e) from e


def _kind_from_mode(mode: int) -> EntryKind:
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    return EntryKind.OTHER


class Filesystem:
    """Interface of the filesystem collaborator used by the scan engine."""

    def list_directory(self, path: Path) -> List[Tuple[str, EntryKind]]:
        """List the entries of a directory as ``(name, kind)`` pairs.

        The kind is reported without following symbolic links.
        """
        raise NotImplementedError

    def read_metadata(self, path: Path, follow_symlinks: bool = True) -> FileMetadata:
        """Read size, timestamps and kind of ``path``.

        With ``follow_symlinks`` the metadata describes the link target and
        a dangling link fails with NOT_FOUND; otherwise the link itself is
        described.
        """
        raise NotImplementedError

    def directory_id(self, path: Path) -> DirectoryId:
        """Identity of the directory ``path`` resolves to, for cycle detection.

        Two paths naming the same directory (through links or bind mounts)
        return the same ``(st_dev, st_ino)`` pair.
        """
        raise NotImplementedError

    def open_binary(self, path: Path) -> BinaryIO:
        """Open ``path`` for reading bytes. The caller closes the stream."""
        raise NotImplementedError

    def read_bytes(self, path: Path) -> bytes:
        with self.open_binary(path) as f:
            with translate_os_errors(path):
                return f.read()

    def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        """Read ``path`` and decode it with ``encoding``.

        Raises:
            FileAccessError: If the file cannot be read (kind from the OS
                error), or its content is not valid in ``encoding`` or the
                encoding is unknown (kind INVALID_DATA).
        """
        data = self.read_bytes(path)
        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise FileAccessError(
                ErrorKind.INVALID_DATA,
                path,
                f"Cannot decode {path} as {encoding}: {e}",
                cause=e,
            ) from e


class LocalFilesystem(Filesystem):
    """Filesystem implementation backed by the operating system."""

    def list_directory(self, path: Path) -> List[Tuple[str, EntryKind]]:
        entries: List[Tuple[str, EntryKind]] = []
        with translate_os_errors(path):
            with os.scandir(path) as it:
                for entry in it:
                    entries.append((entry.name, self._entry_kind(entry)))
        return entries

    @staticmethod
    def _entry_kind(entry: "os.DirEntry[str]") -> EntryKind:
        try:
            if entry.is_symlink():
                return EntryKind.SYMLINK
            if entry.is_dir(follow_symlinks=False):
                return EntryKind.DIRECTORY
            if entry.is_file(follow_symlinks=False):
                return EntryKind.FILE
        except OSError:
            # The Walker stats the entry again and records the real failure
            pass
        return EntryKind.OTHER

    def read_metadata(self, path: Path, follow_symlinks: bool = True) -> FileMetadata:
        with translate_os_errors(path):
            stat_result = os.stat(path, follow_symlinks=follow_symlinks)
        return FileMetadata(
            size=stat_result.st_size,
            modified_ns=stat_result.st_mtime_ns,
            kind=_kind_from_mode(stat_result.st_mode),
            changed_ns=stat_result.st_ctime_ns,
        )

    def directory_id(self, path: Path) -> DirectoryId:
        with translate_os_errors(path):
            stat_result = os.stat(path)
        return (stat_result.st_dev, stat_result.st_ino)

    def open_binary(self, path: Path) -> BinaryIO:
        with translate_os_errors(path):
            return open(path, "rb")
