"""Path matching package for filetrack.

This package contains the PathMatcher interface and the stock matchers used
to select which files a scan includes.

Example:
    >>> from filetrack.matching import ExtensionMatcher, GlobMatcher
    >>> matcher = ExtensionMatcher(["txt"]) & ~GlobMatcher(["draft_*"])
    >>> matcher.matches(Path("/notes/todo.txt"))
    True
"""

from .path_matcher import (
    AllOf,
    AnyOf,
    ExtensionMatcher,
    GlobMatcher,
    MatchAll,
    MatcherLike,
    NameMatcher,
    Not,
    PathMatcher,
    PredicateMatcher,
    SizeMatcher,
    as_matcher,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "ExtensionMatcher",
    "GlobMatcher",
    "MatchAll",
    "MatcherLike",
    "NameMatcher",
    "Not",
    "PathMatcher",
    "PredicateMatcher",
    "SizeMatcher",
    "as_matcher",
]
