"""
Unit tests for the path matchers in filetrack.matching.

Tests cover:
- Extension, glob, name, size and predicate matchers
- Composition with &, | and ~
- needs_metadata propagation
- as_matcher coercion
"""

from pathlib import Path

import pytest

from filetrack.matching import (
    AllOf,
    AnyOf,
    ExtensionMatcher,
    GlobMatcher,
    MatchAll,
    NameMatcher,
    Not,
    PathMatcher,
    PredicateMatcher,
    SizeMatcher,
    as_matcher,
)
from filetrack.models import EntryKind, FileMetadata


def metadata(size: int) -> FileMetadata:
    return FileMetadata(size=size, modified_ns=0, kind=EntryKind.FILE)


@pytest.mark.unit
class TestExtensionMatcher:
    """Tests for ExtensionMatcher."""

    @pytest.mark.parametrize("extensions", [["txt"], [".txt"], ["TXT"]])
    def test_extension_forms(self, extensions):
        matcher = ExtensionMatcher(extensions)
        assert matcher.matches(Path("/notes/todo.txt"))
        assert not matcher.matches(Path("/notes/todo.md"))

    def test_case_insensitive_by_default(self):
        assert ExtensionMatcher(["txt"]).matches(Path("README.TXT"))

    def test_case_sensitive(self):
        matcher = ExtensionMatcher(["txt"], case_sensitive=True)
        assert matcher.matches(Path("a.txt"))
        assert not matcher.matches(Path("a.TXT"))

    def test_only_last_suffix_counts(self):
        matcher = ExtensionMatcher(["gz"])
        assert matcher.matches(Path("archive.tar.gz"))
        assert not ExtensionMatcher(["tar"]).matches(Path("archive.tar.gz"))

    def test_no_extension(self):
        assert not ExtensionMatcher(["txt"]).matches(Path("Makefile"))

    def test_requires_extension(self):
        with pytest.raises(ValueError):
            ExtensionMatcher([])

    def test_path_only(self):
        assert ExtensionMatcher(["txt"]).needs_metadata is False


@pytest.mark.unit
class TestGlobMatcher:
    """Tests for GlobMatcher."""

    def test_name_pattern(self):
        matcher = GlobMatcher(["*.py"])
        assert matcher.matches(Path("/src/pkg/module.py"))
        assert not matcher.matches(Path("/src/pkg/module.pyc"))

    def test_multiple_patterns(self):
        matcher = GlobMatcher(["*.py", "Makefile"])
        assert matcher.matches(Path("/src/Makefile"))

    def test_case_sensitive(self):
        assert not GlobMatcher(["*.py"]).matches(Path("/src/MODULE.PY"))

    def test_pattern_with_separator_matches_trailing_components(self):
        matcher = GlobMatcher(["docs/*.md"])
        assert matcher.matches(Path("/project/docs/index.md"))
        assert not matcher.matches(Path("/project/other/index.md"))

    def test_requires_pattern(self):
        with pytest.raises(ValueError):
            GlobMatcher([])


@pytest.mark.unit
class TestNameAndSizeMatchers:
    """Tests for NameMatcher and SizeMatcher."""

    def test_name_matcher(self):
        matcher = NameMatcher(["setup.py", "README.md"])
        assert matcher.matches(Path("/p/setup.py"))
        assert not matcher.matches(Path("/p/setup.cfg"))

    def test_size_matcher_needs_metadata(self):
        assert SizeMatcher(min_size=1).needs_metadata is True

    def test_size_range(self):
        matcher = SizeMatcher(min_size=10, max_size=20)
        assert not matcher.matches(Path("/f"), metadata(9))
        assert matcher.matches(Path("/f"), metadata(10))
        assert matcher.matches(Path("/f"), metadata(20))
        assert not matcher.matches(Path("/f"), metadata(21))

    def test_size_unbounded_max(self):
        assert SizeMatcher(min_size=1).matches(Path("/f"), metadata(10 ** 12))

    def test_size_without_metadata_is_false(self):
        assert not SizeMatcher().matches(Path("/f"))

    def test_size_validation(self):
        with pytest.raises(ValueError):
            SizeMatcher(min_size=-1)
        with pytest.raises(ValueError):
            SizeMatcher(min_size=10, max_size=5)


@pytest.mark.unit
class TestPredicateMatcher:
    """Tests for PredicateMatcher."""

    def test_path_only_predicate(self):
        matcher = PredicateMatcher(lambda path: path.stem.startswith("test_"))
        assert matcher.matches(Path("/t/test_walker.py"))
        assert not matcher.matches(Path("/t/walker.py"))

    def test_metadata_predicate(self):
        matcher = PredicateMatcher(lambda path, meta: meta.size == 0, needs_metadata=True)
        assert matcher.needs_metadata
        assert matcher.matches(Path("/empty"), metadata(0))
        assert not matcher.matches(Path("/full"), metadata(3))

    def test_result_coerced_to_bool(self):
        matcher = PredicateMatcher(lambda path: path.name)
        assert matcher.matches(Path("/x")) is True


@pytest.mark.unit
class TestComposition:
    """Tests for combining matchers."""

    def test_and(self):
        matcher = ExtensionMatcher(["txt"]) & ~GlobMatcher(["draft_*"])
        assert isinstance(matcher, AllOf)
        assert matcher.matches(Path("/n/todo.txt"))
        assert not matcher.matches(Path("/n/draft_todo.txt"))

    def test_or(self):
        matcher = ExtensionMatcher(["py"]) | NameMatcher(["Makefile"])
        assert isinstance(matcher, AnyOf)
        assert matcher.matches(Path("/p/Makefile"))
        assert matcher.matches(Path("/p/a.py"))
        assert not matcher.matches(Path("/p/a.rs"))

    def test_not(self):
        matcher = ~ExtensionMatcher(["log"])
        assert isinstance(matcher, Not)
        assert matcher.matches(Path("/a.txt"))
        assert not matcher.matches(Path("/a.log"))

    def test_needs_metadata_propagates(self):
        path_only = ExtensionMatcher(["txt"])
        sized = SizeMatcher(min_size=1)

        assert (path_only & sized).needs_metadata
        assert (path_only | sized).needs_metadata
        assert (~sized).needs_metadata
        assert not (path_only | GlobMatcher(["*.md"])).needs_metadata

    def test_callable(self):
        assert ExtensionMatcher(["txt"])(Path("a.txt"))

    def test_empty_all_of_matches_everything(self):
        assert AllOf([]).matches(Path("/anything"))

    def test_empty_any_of_matches_nothing(self):
        assert not AnyOf([]).matches(Path("/anything"))


@pytest.mark.unit
class TestAsMatcher:
    """Tests for as_matcher coercion."""

    def test_none_matches_all(self):
        assert isinstance(as_matcher(None), MatchAll)

    def test_matcher_returned_as_is(self):
        matcher = ExtensionMatcher(["txt"])
        assert as_matcher(matcher) is matcher

    def test_string_is_glob(self):
        matcher = as_matcher("*.txt")
        assert isinstance(matcher, GlobMatcher)
        assert matcher.matches(Path("/a/b.txt"))

    def test_callable_is_predicate(self):
        matcher = as_matcher(lambda path: path.suffix == ".md")
        assert isinstance(matcher, PredicateMatcher)
        assert matcher.matches(Path("/x.md"))

    def test_invalid_type(self):
        with pytest.raises(TypeError):
            as_matcher(42)

    def test_base_class_is_abstract(self):
        with pytest.raises(NotImplementedError):
            PathMatcher().matches(Path("/x"))
