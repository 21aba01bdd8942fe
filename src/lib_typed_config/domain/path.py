"""Hierarchical key addressing.

Purpose
-------
Provide the immutable :class:`KeyPath` value object used by every source, the
registry, and the extraction pipeline to address configuration values
independently of where they are stored.

Contents
--------
* :class:`KeyPath` – ordered tuple of segment strings with ``push``/``pop``
  helpers and dotted rendering.
* :func:`as_key_path` – coerce user input (``KeyPath`` or dotted string).

System Role
-----------
Lives in the domain layer and performs no I/O. Segments are compared exactly;
no case folding or escaping is applied, so ``KeyPath.of("a.b")`` and
``KeyPath.of("a", "b")`` are different keys even though both render as
``"a.b"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True, slots=True, order=True)
class KeyPath:
    """Immutable, hierarchical configuration key.

    Why
    ----
    Sources use different native key shapes (environment variable names,
    dotted text keys, in-memory tables). A single segment-based key lets the
    registry compose them without knowing those shapes.

    What
    ----
    Wraps a tuple of segments. Equality, hashing, and ordering are segment-wise
    because they are delegated to the tuple. Every modifying operation returns a
    new instance.

    Examples
    --------
    >>> root = KeyPath.root()
    >>> child = root.push("service").push("timeout")
    >>> str(child)
    'service.timeout'
    >>> root.is_root, child.is_root
    (True, False)
    >>> child == KeyPath.parse("service.timeout")
    True
    """

    segments: tuple[str, ...] = ()

    @classmethod
    def root(cls) -> KeyPath:
        """Return the empty path."""

        return _ROOT

    @classmethod
    def of(cls, *segments: str) -> KeyPath:
        """Build a path from explicit segments.

        >>> KeyPath.of("a", "b").segments
        ('a', 'b')
        """

        return _ROOT.push_all(segments)

    @classmethod
    def parse(cls, dotted: str) -> KeyPath:
        """Split *dotted* on ``.`` into a path.

        An empty string yields the root path. Empty segments (``"a..b"``,
        ``".a"``) are rejected because no source could address them.

        Examples
        --------
        >>> KeyPath.parse("db.host").segments
        ('db', 'host')
        >>> KeyPath.parse("") == KeyPath.root()
        True
        >>> KeyPath.parse("db..host")
        Traceback (most recent call last):
        ...
        ValueError: Empty segment in key path 'db..host'
        """

        if dotted == "":
            return _ROOT
        parts = dotted.split(".")
        if any(part == "" for part in parts):
            raise ValueError(f"Empty segment in key path {dotted!r}")
        return cls(tuple(parts))

    def push(self, segment: str) -> KeyPath:
        """Return a child path with *segment* appended."""

        if not isinstance(segment, str):
            raise TypeError(f"Key path segments must be str, not {type(segment).__name__}")
        return KeyPath(self.segments + (segment,))

    def push_all(self, segments: Iterable[str]) -> KeyPath:
        """Return a descendant path with every segment of *segments* appended.

        >>> KeyPath.root().push_all(["a", "b", "c"]).segments
        ('a', 'b', 'c')
        """

        path = self
        for segment in segments:
            path = path.push(segment)
        return path

    def pop(self) -> tuple[str, KeyPath] | None:
        """Split off the tail segment, returning ``(tail, parent)``.

        Returns ``None`` for the root path.

        >>> KeyPath.of("a", "b").pop()
        ('b', KeyPath(segments=('a',)))
        >>> KeyPath.root().pop() is None
        True
        """

        if not self.segments:
            return None
        return self.segments[-1], KeyPath(self.segments[:-1])

    @property
    def parent(self) -> KeyPath | None:
        popped = self.pop()
        return popped[1] if popped else None

    @property
    def name(self) -> str | None:
        """Tail segment, or ``None`` on the root path."""

        return self.segments[-1] if self.segments else None

    @property
    def is_root(self) -> bool:
        return not self.segments

    def is_prefix_of(self, other: KeyPath) -> bool:
        """Return ``True`` when *other* equals this path or lies below it.

        >>> KeyPath.of("a").is_prefix_of(KeyPath.of("a", "b"))
        True
        >>> KeyPath.of("a", "b").is_prefix_of(KeyPath.of("a"))
        False
        """

        return other.segments[: len(self.segments)] == self.segments

    def __add__(self, segment: str) -> KeyPath:
        return self.push(segment)

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return ".".join(self.segments)


_ROOT = KeyPath()


def as_key_path(path: KeyPath | str) -> KeyPath:
    """Return *path* as a :class:`KeyPath`, parsing dotted strings.

    >>> as_key_path("service.port")
    KeyPath(segments=('service', 'port'))
    """

    if isinstance(path, KeyPath):
        return path
    if isinstance(path, str):
        return KeyPath.parse(path)
    raise TypeError(f"Expected KeyPath or dotted str, got {type(path).__name__}")
