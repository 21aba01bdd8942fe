"""In-memory defaults source.

Purpose
-------
Supply static values declared by the application. Registered first, the
source acts as the last-resort fallback; registered last, it overrides every
other source (useful for command-line overrides).

Contents
--------
* :class:`Defaults` – ordered ``KeyPath -> values`` table implementing the
  :class:`~lib_typed_config.application.ports.Source` port.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence, Union

from ...domain.path import KeyPath, as_key_path

ValueSpec = Union[str, Sequence[str]]


class Defaults:
    """Static table of raw values.

    Why
    ----
    Applications need a central place for fallback values that flows through
    the same pipeline (processors, validators, cardinality) as file and
    environment values.

    What
    ----
    Keys may be :class:`KeyPath` instances or dotted strings. A value may be a
    single string or a sequence of strings; declaration order is preserved.

    Examples
    --------
    >>> defaults = Defaults({"search_path": ["/usr/share", "/opt"], "port": "8080"})
    >>> defaults.get(KeyPath.of("search_path"))
    ('/usr/share', '/opt')
    >>> defaults.get(KeyPath.of("unknown"))
    ()
    """

    def __init__(
        self,
        values: Mapping[KeyPath | str, ValueSpec] | None = None,
        *,
        name: str = "defaults",
        location: str | None = None,
    ) -> None:
        """Create the table.

        *location* describes where the defaults are declared (a module or
        settings name) and shows up in extraction errors; it defaults to
        *name*.
        """

        self.name = name
        self.location = name if location is None else location
        self._items: dict[KeyPath, list[str]] = {}
        for path, value in (values or {}).items():
            self.set(path, value)

    def set(self, path: KeyPath | str, value: ValueSpec) -> None:
        """Replace every value stored at *path*."""

        self._items[as_key_path(path)] = _as_list(value)

    def put(self, path: KeyPath | str, value: ValueSpec) -> None:
        """Append one or more values after those already stored at *path*.

        >>> defaults = Defaults()
        >>> defaults.put("tag", "a")
        >>> defaults.put("tag", ["b", "c"])
        >>> defaults.get(KeyPath.of("tag"))
        ('a', 'b', 'c')
        """

        self._items.setdefault(as_key_path(path), []).extend(_as_list(value))

    def clear(self, path: KeyPath | str) -> None:
        """Forget *path*; lookups fall through to lower-priority sources again."""

        self._items.pop(as_key_path(path), None)

    def get(self, path: KeyPath) -> tuple[str, ...]:
        return tuple(self._items.get(path, ()))

    def locations(self, path: KeyPath | str) -> list[str]:
        """Return one ``default from <location>`` entry per value of *path*.

        >>> Defaults({"port": "80"}, location="app.settings").locations("port")
        ['default from app.settings']
        """

        return [f"default from {self.location}"] * len(self._items.get(as_key_path(path), ()))

    def paths(self) -> Iterable[KeyPath]:
        """Yield declared keys in declaration order."""

        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"Defaults(name={self.name!r}, keys={len(self._items)})"


def _as_list(value: ValueSpec) -> list[str]:
    if isinstance(value, str):
        return [value]
    values = list(value)
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"Default values must be str, not {type(item).__name__}")
    return values
