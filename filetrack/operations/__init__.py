"""File operations package for filetrack.

This package provides file loading and one-shot search helpers built on the
Walker.

Example:
    >>> from filetrack.operations import find_files, load_text
    >>> config = find_files("/project", ["settings.toml"])["settings.toml"]
    >>> print(load_text(config))
"""

from .loader import (
    find_and_load,
    find_by_extension,
    find_files,
    for_each_match,
    load_bytes,
    load_text,
)

__all__ = [
    "find_and_load",
    "find_by_extension",
    "find_files",
    "for_each_match",
    "load_bytes",
    "load_text",
]
