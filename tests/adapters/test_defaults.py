from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_typed_config.adapters.defaults.memory import Defaults
from lib_typed_config.domain.path import KeyPath

keys = st.lists(st.text(alphabet="abc", min_size=1, max_size=3), min_size=1, max_size=3).map(tuple).map(KeyPath)


@given(keys, st.text())
def test_lookup_returns_declared_values(path, value) -> None:
    assert Defaults({path: [value]}).get(path) == (value,)
    assert Defaults({}).get(path) == ()


def test_dotted_keys_and_single_values() -> None:
    defaults = Defaults({"db.host": "localhost", "db.replicas": ["r1", "r2"]})
    assert defaults.get(KeyPath.of("db", "host")) == ("localhost",)
    assert defaults.get(KeyPath.of("db", "replicas")) == ("r1", "r2")
    assert [str(path) for path in defaults.paths()] == ["db.host", "db.replicas"]


def test_set_put_clear() -> None:
    defaults = Defaults()
    defaults.put("tag", "a")
    defaults.put("tag", ["b"])
    assert defaults.get(KeyPath.of("tag")) == ("a", "b")
    defaults.set("tag", "c")
    assert defaults.get(KeyPath.of("tag")) == ("c",)
    defaults.clear("tag")
    defaults.clear("never-declared")
    assert defaults.get(KeyPath.of("tag")) == ()


def test_rejects_non_string_values() -> None:
    with pytest.raises(TypeError):
        Defaults({"port": [8080]})  # type: ignore[list-item]


def test_locations_describe_where_defaults_are_declared() -> None:
    assert Defaults({"tag": ["a", "b"]}).locations("tag") == ["default from defaults", "default from defaults"]
    assert Defaults({"tag": "a"}, name="base", location="app.settings").locations("tag") == [
        "default from app.settings"
    ]
    assert Defaults().locations("tag") == []
