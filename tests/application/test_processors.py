from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_typed_config.application.processors import (
    apply,
    expand,
    expand_env,
    explode,
    not_empty,
    trim,
    trim_end,
    trim_start,
    unescape,
    unquote,
)
from lib_typed_config.domain.errors import ProcessingError


def test_explode_splits_each_value() -> None:
    assert explode(":")("a:b:c") == ["a", "b", "c"]


def test_explode_over_several_raw_values_preserves_order() -> None:
    assert apply([explode(":")], ["a:b", "c"]) == ["a", "b", "c"]


def test_explode_rejects_empty_delimiter() -> None:
    with pytest.raises(ValueError):
        explode("")


@given(st.lists(st.text(alphabet="abc ", max_size=5), min_size=1, max_size=5))
def test_explode_is_inverse_of_join(parts) -> None:
    assert explode(":")(":".join(parts)) == parts


def test_trim_variants() -> None:
    assert trim()("  x  ") == ["x"]
    assert trim_start()("  x  ") == ["x  "]
    assert trim_end()("  x  ") == ["  x"]


def test_not_empty_drops_blank_values() -> None:
    assert apply([explode(","), not_empty()], ["a,, ,b"]) == ["a", "b"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("line\\nnext", "line\nnext"),
        ("tab\\there", "tab\there"),
        ("cr\\r", "cr\r"),
        ("hash \\# kept", "hash # kept"),
        ("double \\\\ slash", "double \\ slash"),
        ("trailing\\", "trailing\\"),
        ("plain", "plain"),
    ],
)
def test_unescape(raw, expected) -> None:
    assert unescape()(raw) == [expected]


def test_unquote_strips_quotes_after_trimming() -> None:
    assert unquote()('  "  padded "  ') == ["  padded "]
    assert unquote()('""') == [""]


@pytest.mark.parametrize("raw", ["bare", '"open', 'close"', '"'])
def test_unquote_rejects_unquoted_values(raw) -> None:
    with pytest.raises(ProcessingError, match="value must be quoted"):
        unquote()(raw)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("${name}", "value"),
        ("pre-${name}-post", "pre-value-post"),
        ("${name}${name}", "valuevalue"),
        ("$${name}", "${name}"),
        ("$$", "$$"),
        ("$$x", "$$x"),
        ("cost $5", "cost $5"),
        ("${}", "${}"),
        ("${name", "${name"),
        ("trailing $", "trailing $"),
    ],
)
def test_expand(raw, expected) -> None:
    assert expand({"name": "value"}.__getitem__)(raw) == [expected]


def test_expand_custom_delimiters() -> None:
    assert expand({"x": "1"}.__getitem__, start="(", end=")")("$(x) ${x}") == ["1 ${x}"]


def test_expand_rejects_dollar_delimiters() -> None:
    with pytest.raises(ValueError):
        expand(str, start="$")


def test_expand_wraps_resolver_failures() -> None:
    with pytest.raises(ProcessingError, match="missing"):
        expand({}.__getitem__)("${missing}")


def test_expand_env_reads_environment_at_call_time(monkeypatch) -> None:
    processor = expand_env()
    monkeypatch.setenv("LIB_TYPED_CONFIG_TEST_HOME", "/home/ada")
    monkeypatch.delenv("LIB_TYPED_CONFIG_TEST_UNSET", raising=False)
    assert processor("${LIB_TYPED_CONFIG_TEST_HOME}/x${LIB_TYPED_CONFIG_TEST_UNSET}") == ["/home/ada/x"]
