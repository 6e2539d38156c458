"""Path matching predicates for filetrack.

A PathMatcher decides whether a candidate file is part of a scan. Matchers
must be pure: the Walker evaluates each one exactly once per candidate and
relies on the answer being stable for an unchanged tree.

Matchers that only look at the path set ``needs_metadata = False``; the
Walker then evaluates them before reading any metadata so that excluded files
cost no stat call.

Example:
    >>> from filetrack.matching import ExtensionMatcher, GlobMatcher
    >>> matcher = ExtensionMatcher(["py"]) | GlobMatcher(["Makefile"])
    >>> matcher.matches(Path("/src/app.py"))
    True
"""

import fnmatch
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from filetrack.models import FileMetadata


class PathMatcher:
    """Base class for inclusion predicates.

    Subclasses implement ``matches``. Matchers compose with ``&``, ``|`` and
    ``~``.

    Attributes:
        needs_metadata: Whether ``matches`` inspects the metadata argument.
    """

    needs_metadata: bool = False

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        """Return True if ``path`` should be included.

        Args:
            path: Absolute path of the candidate file.
            metadata: Entry metadata, always provided when
                ``needs_metadata`` is True.
        """
        raise NotImplementedError

    def __call__(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        return self.matches(path, metadata)

    def __and__(self, other: "PathMatcher") -> "PathMatcher":
        return AllOf([self, other])

    def __or__(self, other: "PathMatcher") -> "PathMatcher":
        return AnyOf([self, other])

    def __invert__(self) -> "PathMatcher":
        return Not(self)


class MatchAll(PathMatcher):
    """Matches every file."""

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        return True

    def __repr__(self) -> str:
        return "MatchAll()"


class ExtensionMatcher(PathMatcher):
    """Matches files by extension.

    Extensions may be given with or without the leading dot. Comparison is
    case-insensitive unless ``case_sensitive`` is set.

    Example:
        >>> ExtensionMatcher(["txt", ".md"]).matches(Path("notes.TXT"))
        True
    """

    def __init__(self, extensions: Iterable[str], case_sensitive: bool = False) -> None:
        self.case_sensitive = case_sensitive
        normalized = set()
        for ext in extensions:
            ext = ext if ext.startswith(".") else f".{ext}"
            normalized.add(ext if case_sensitive else ext.lower())
        if not normalized:
            raise ValueError("ExtensionMatcher requires at least one extension")
        self.extensions = frozenset(normalized)

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        suffix = path.suffix if self.case_sensitive else path.suffix.lower()
        return suffix in self.extensions

    def __repr__(self) -> str:
        return f"ExtensionMatcher({sorted(self.extensions)!r})"


class GlobMatcher(PathMatcher):
    """Matches files against shell-style glob patterns.

    Patterns without a path separator are matched against the file name
    (``*.txt``). Patterns containing ``/`` are matched against the trailing
    components of the full path (``docs/*.md``), as ``PurePath.match`` does.
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns: List[str] = list(patterns)
        if not self.patterns:
            raise ValueError("GlobMatcher requires at least one pattern")

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        for pattern in self.patterns:
            if "/" in pattern:
                if path.match(pattern):
                    return True
            elif fnmatch.fnmatchcase(path.name, pattern):
                return True
        return False

    def __repr__(self) -> str:
        return f"GlobMatcher({self.patterns!r})"


class NameMatcher(PathMatcher):
    """Matches files whose name is exactly one of ``names``."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = frozenset(names)

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        return path.name in self.names

    def __repr__(self) -> str:
        return f"NameMatcher({sorted(self.names)!r})"


class SizeMatcher(PathMatcher):
    """Matches files whose size lies within ``[min_size, max_size]``."""

    needs_metadata = True

    def __init__(self, min_size: int = 0, max_size: Optional[int] = None) -> None:
        if min_size < 0:
            raise ValueError(f"min_size must be non-negative, got {min_size}")
        if max_size is not None and max_size < min_size:
            raise ValueError("max_size must not be smaller than min_size")
        self.min_size = min_size
        self.max_size = max_size

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        if metadata is None:
            return False
        if metadata.size < self.min_size:
            return False
        return self.max_size is None or metadata.size <= self.max_size


class PredicateMatcher(PathMatcher):
    """Adapts a plain callable to the PathMatcher interface.

    The callable receives ``(path, metadata)`` when ``needs_metadata`` is
    True and ``(path,)`` otherwise.
    """

    def __init__(self, predicate: Callable[..., bool], needs_metadata: bool = False) -> None:
        self.predicate = predicate
        self.needs_metadata = needs_metadata

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        if self.needs_metadata:
            return bool(self.predicate(path, metadata))
        return bool(self.predicate(path))


class AllOf(PathMatcher):
    """Matches when every child matcher matches."""

    def __init__(self, matchers: Iterable[PathMatcher]) -> None:
        self.matchers: List[PathMatcher] = list(matchers)
        self.needs_metadata = any(m.needs_metadata for m in self.matchers)

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        return all(m.matches(path, metadata) for m in self.matchers)


class AnyOf(PathMatcher):
    """Matches when at least one child matcher matches."""

    def __init__(self, matchers: Iterable[PathMatcher]) -> None:
        self.matchers: List[PathMatcher] = list(matchers)
        self.needs_metadata = any(m.needs_metadata for m in self.matchers)

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        return any(m.matches(path, metadata) for m in self.matchers)


class Not(PathMatcher):
    """Inverts a matcher."""

    def __init__(self, matcher: PathMatcher) -> None:
        self.matcher = matcher
        self.needs_metadata = matcher.needs_metadata

    def matches(self, path: Path, metadata: Optional[FileMetadata] = None) -> bool:
        return not self.matcher.matches(path, metadata)


MatcherLike = Union[PathMatcher, Callable[..., bool], str, None]


def as_matcher(value: MatcherLike) -> PathMatcher:
    """Coerce ``value`` into a PathMatcher.

    Args:
        value: A PathMatcher (returned as is), None (matches everything), a
            glob pattern string, or a callable taking a path.

    Returns:
        The corresponding PathMatcher.

    Raises:
        TypeError: If ``value`` cannot be interpreted as a matcher.
    """
    if value is None:
        return MatchAll()
    if isinstance(value, PathMatcher):
        return value
    if isinstance(value, str):
        return GlobMatcher([value])
    if callable(value):
        return PredicateMatcher(value)
    raise TypeError(f"Cannot use {type(value).__name__} as a path matcher")
