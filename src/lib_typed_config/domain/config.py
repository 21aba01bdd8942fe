"""Source registry and lookup composition.

Purpose
-------
Hold the explicitly owned, priority-ordered list of sources and resolve a key
by asking them from highest to lowest priority. This module replaces any idea
of a process-wide registry: every :class:`SourceRegistry` is independent, so
several can coexist in one process and be tested in isolation.

Contents
--------
* :class:`Resolution` – raw values for a key plus the name of the source that
  supplied them and where each value was defined.
* :class:`SourceRegistry` – ``add_source``, ``get``, ``lookup``, ``origin``.
  The application ring extends it with the extraction entry points
  (:class:`lib_typed_config.application.config.Config`).
* :func:`source_name` / :func:`source_locations` – provenance of a source and
  of its values.

System Role
-----------
Priority is whole-path override: the first source (from the most recently
added backwards) that reports any value for a key wins outright. Values are
never merged across sources. A source that returns nothing for the key lets
the search fall through to the next lower-priority source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Sequence

from .path import KeyPath, as_key_path

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..application.ports import Source


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of a registry lookup.

    Attributes
    ----------
    path:
        Key that was looked up.
    values:
        Raw values of the winning source, in source order; empty when no
        source knows the key.
    source:
        Name of the winning source or ``None`` when nothing matched.
    locations:
        One location per value (``conf:app.conf:3``, ``env:APP_PORT``...).
    """

    path: KeyPath
    values: tuple[str, ...]
    source: str | None
    locations: tuple[str, ...] = ()


class SourceRegistry:
    """Ordered collection of sources with first-match-wins lookup.

    Why
    ----
    Applications layer defaults, files, and environment overrides. Keeping the
    order explicit makes precedence visible at the call site.

    What
    ----
    Sources are registered in ascending priority: the first registered source
    is the last-resort fallback, the most recently added one overrides all
    others.

    Examples
    --------
    >>> from lib_typed_config.adapters.defaults.memory import Defaults
    >>> registry = SourceRegistry()
    >>> _ = registry.add_source(Defaults({"greeting": "hello"}, name="base"))
    >>> _ = registry.add_source(Defaults({"greeting": "hi"}, name="override"))
    >>> registry.get("greeting")
    ('hi',)
    >>> registry.origin("greeting")
    'override'
    >>> registry.lookup("greeting").locations
    ('default from override',)
    >>> registry.get("missing")
    ()
    """

    def __init__(self, sources: Iterable[Source] = ()) -> None:
        self._sources: list[Source] = []
        for source in sources:
            self.add_source(source)

    @property
    def sources(self) -> tuple[Source, ...]:
        """Registered sources in ascending priority."""

        return tuple(self._sources)

    def add_source(self, source: Source) -> SourceRegistry:
        """Register *source* with a higher priority than every earlier source.

        Returns ``self`` so setup code can chain registrations.
        """

        if not callable(getattr(source, "get", None)):
            raise TypeError(f"{type(source).__name__} does not provide a get(path) method")
        self._sources.append(source)
        return self

    def lookup(self, path: KeyPath | str) -> Resolution:
        """Resolve *path* and report which source supplied the values."""

        key = as_key_path(path)
        for source in reversed(self._sources):
            values = tuple(source.get(key))
            if values:
                return Resolution(key, values, source_name(source), source_locations(source, key, values))
        return Resolution(key, (), None)

    def get(self, path: KeyPath | str) -> tuple[str, ...]:
        """Return the raw values of the highest-priority source knowing *path*."""

        return self.lookup(path).values

    def origin(self, path: KeyPath | str) -> str | None:
        """Return the name of the source that wins for *path*, if any."""

        return self.lookup(path).source

    def __len__(self) -> int:
        return len(self._sources)

    def __repr__(self) -> str:
        names = ", ".join(source_name(source) for source in self._sources)
        return f"{type(self).__name__}([{names}])"


def source_name(source: object) -> str:
    """Return the provenance label of *source*.

    >>> source_name(object())
    'object'
    """

    name = getattr(source, "name", None)
    return name if isinstance(name, str) and name else type(source).__name__


def source_locations(source: object, path: KeyPath, values: Sequence[str]) -> tuple[str, ...]:
    """Return one location per value of *path* in *source*.

    Sources may offer an optional ``locations(path)`` method. When it is
    missing or disagrees with the number of values, every value is attributed
    to the source name.

    >>> source_locations(object(), KeyPath.of("a"), ["1", "2"])
    ('object', 'object')
    """

    describe = getattr(source, "locations", None)
    if callable(describe):
        found = tuple(describe(path))
        if len(found) == len(values):
            return found
    return (source_name(source),) * len(values)
