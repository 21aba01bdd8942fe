from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_typed_config.domain.path import KeyPath, as_key_path

segments = st.lists(st.text(min_size=1, max_size=8), max_size=5)


def test_root_is_empty_and_distinct_from_children() -> None:
    root = KeyPath.root()
    assert root.is_root
    assert len(root) == 0
    assert str(root) == ""
    assert root.push("a") != root
    assert root.name is None and root.parent is None


def test_push_returns_new_path() -> None:
    base = KeyPath.of("service")
    child = base.push("timeout")
    assert base.segments == ("service",)
    assert child.segments == ("service", "timeout")
    assert child.name == "timeout"
    assert child.parent == base
    assert base + "timeout" == child


def test_push_rejects_non_strings() -> None:
    with pytest.raises(TypeError):
        KeyPath.root().push(3)  # type: ignore[arg-type]


def test_segments_are_not_normalised() -> None:
    assert KeyPath.of("a.b") != KeyPath.of("a", "b")
    assert KeyPath.of("Key") != KeyPath.of("key")
    assert str(KeyPath.of("a.b")) == str(KeyPath.of("a", "b"))


def test_parse_rejects_empty_segments() -> None:
    with pytest.raises(ValueError):
        KeyPath.parse("a..b")
    with pytest.raises(ValueError):
        KeyPath.parse(".a")


def test_as_key_path_accepts_paths_and_dotted_strings() -> None:
    path = KeyPath.of("db", "host")
    assert as_key_path(path) is path
    assert as_key_path("db.host") == path
    with pytest.raises(TypeError):
        as_key_path(["db", "host"])  # type: ignore[arg-type]


@given(segments, segments)
def test_ordering_matches_segment_tuples(left, right) -> None:
    a, b = KeyPath(tuple(left)), KeyPath(tuple(right))
    assert (a < b) == (tuple(left) < tuple(right))
    assert (a == b) == (left == right)
    if a == b:
        assert hash(a) == hash(b)


@given(segments)
def test_pop_undoes_push(parts) -> None:
    path = KeyPath.root().push_all(parts)
    assert list(path) == parts
    if parts:
        tail, parent = path.pop()
        assert parent.push(tail) == path
        assert parent.is_prefix_of(path)
    else:
        assert path.pop() is None
