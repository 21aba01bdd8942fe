"""Plain-text configuration source.

Purpose
-------
Parse the line-oriented ``key=value`` format into ordered ``(KeyPath, value)``
entries and expose them through the
:class:`~lib_typed_config.application.ports.Source` port.

Format
------
* ``section.key=value`` – everything before the first ``=`` (trimmed, split on
  ``.``) is the key, everything after it is the value, verbatim.
* ``# comment`` – text from the first unescaped ``#`` to the end of the line is
  ignored; ``\\#`` keeps a literal hash (the backslash stays in the value).
* ``[section.sub]`` – prefixes the keys of the following entries.
* ``key=a`` followed by ``=b`` – a blank key adds another value to the
  previous key.
* ``|more`` – a line whose first non-blank character is ``|`` continues the
  previous value; the remainder is appended after a newline.
* Blank and comment-only lines reset the current key, so a continuation can
  never attach itself to an entry above a gap. Values are never typed.

Contents
--------
* :class:`TextEntry` – one parsed value with its line span.
* :class:`ConfigText` – the source; ``parse``/``from_text``/``from_file``.
* :func:`stack_config` – register one file per directory in priority order.
"""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, AnyStr, Iterable, Iterator, Sequence

from ...domain.errors import (
    DanglingContinuation,
    InvalidPathSyntax,
    LoadError,
    MissingDelimiter,
    NotFound,
    ReadError,
)
from ...domain.path import KeyPath, as_key_path
from ...observability import log_debug, log_error, make_event

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ...domain.config import SourceRegistry

COMMENT_MARKER = "#"
CONTINUATION_MARKER = "|"
ESCAPE = "\\"


@dataclass(frozen=True, slots=True)
class TextEntry:
    """A single value read from a text source.

    ``line_start``/``line_end`` are 1-based and differ only for values that
    were extended with continuation lines.
    """

    path: KeyPath
    value: str
    line_start: int
    line_end: int


class _State(enum.Enum):
    BETWEEN_ENTRIES = "between-entries"
    READING_VALUE = "reading-value"


class ConfigText:
    """Source backed by a parsed text document.

    Examples
    --------
    >>> text = "[db]\\nhost=localhost\\nreplica=r1\\n=r2\\n"
    >>> source = ConfigText.from_text(text, "demo.conf")
    >>> source.get(KeyPath.of("db", "replica"))
    ('r1', 'r2')
    >>> source.locations(KeyPath.of("db", "host"))
    ['conf:demo.conf:2']
    """

    def __init__(self, entries: Iterable[TextEntry], *, name: str = "text") -> None:
        self.name = name
        self._entries: tuple[TextEntry, ...] = tuple(entries)
        self._index: dict[KeyPath, list[TextEntry]] = {}
        for entry in self._entries:
            self._index.setdefault(entry.path, []).append(entry)

    @classmethod
    def parse(cls, stream: IO[AnyStr] | Iterable[AnyStr], name: str = "text") -> ConfigText:
        """Parse *stream* (text or UTF-8 bytes) into a new source.

        Raises
        ------
        LoadError
            One of :class:`DanglingContinuation`, :class:`MissingDelimiter`,
            :class:`InvalidPathSyntax`, or :class:`ReadError`. Nothing is
            returned for a malformed document.
        """

        parser = _TextParser(name)
        try:
            entries = parser.run(stream)
        except LoadError as exc:
            log_error("config_text_invalid", **make_event(name, None, {"line": exc.line, "error": exc.message}))
            raise
        log_debug("config_text_parsed", **make_event(name, None, {"entries": len(entries)}))
        return cls(entries, name=name)

    @classmethod
    def from_text(cls, text: str, name: str = "text") -> ConfigText:
        """Parse an in-memory document."""

        return cls.parse(io.StringIO(text), name)

    @classmethod
    def from_file(cls, path: str | Path) -> ConfigText:
        """Parse the UTF-8 file at *path*.

        Raises :class:`NotFound` when the file does not exist so callers
        stacking optional files can skip it.
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {file_path}")
        try:
            handle = file_path.open("r", encoding="utf-8", newline="\n")
        except OSError as exc:
            raise ReadError(f"Cannot open file: {exc}", source=str(file_path)) from exc
        with handle:
            return cls.parse(handle, str(file_path))

    def get(self, path: KeyPath) -> tuple[str, ...]:
        return tuple(entry.value for entry in self._index.get(path, ()))

    def entries(self) -> tuple[TextEntry, ...]:
        """Return every entry in file order."""

        return self._entries

    def paths(self) -> list[KeyPath]:
        """Return distinct keys in order of first appearance."""

        return list(self._index)

    def children(self, prefix: KeyPath | str = KeyPath.root()) -> list[KeyPath]:
        """Return the direct children of *prefix* that lead to at least one key.

        >>> source = ConfigText.from_text("a.x=1\\na.y.z=2\\nb=3\\n")
        >>> [str(child) for child in source.children("a")]
        ['a.x', 'a.y']
        """

        base = as_key_path(prefix)
        depth = len(base) + 1
        seen: dict[KeyPath, None] = {}
        for path in self._index:
            if len(path) >= depth and base.is_prefix_of(path):
                seen.setdefault(KeyPath(path.segments[:depth]), None)
        return list(seen)

    def locations(self, path: KeyPath | str) -> list[str]:
        """Describe where each value of *path* was defined."""

        result = []
        for entry in self._index.get(as_key_path(path), ()):
            span = str(entry.line_start)
            if entry.line_end != entry.line_start:
                span = f"{entry.line_start}-{entry.line_end}"
            result.append(f"conf:{self.name}:{span}")
        return result

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ConfigText(name={self.name!r}, entries={len(self._entries)})"


class _TextParser:
    """Single forward pass over the lines of one document."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.entries: list[TextEntry] = []
        self.state = _State.BETWEEN_ENTRIES
        self.section = KeyPath.root()
        self.key: KeyPath | None = None
        self.value = ""
        self.line_start = 0
        self.line_end = 0

    def run(self, stream: Iterable[AnyStr]) -> list[TextEntry]:
        for line_no, line in self._lines(stream):
            self._feed(_strip_comment(line), line_no)
        self._flush()
        return self.entries

    def _lines(self, stream: Iterable[AnyStr]) -> Iterator[tuple[int, str]]:
        line_no = 0
        iterator = iter(stream)
        while True:
            try:
                raw = next(iterator)
            except StopIteration:
                return
            except UnicodeDecodeError as exc:
                raise ReadError(f"Invalid UTF-8: {exc.reason}", source=self.name, line=line_no + 1) from exc
            except OSError as exc:
                raise ReadError(f"I/O error: {exc}", source=self.name, line=line_no + 1) from exc
            line_no += 1
            if isinstance(raw, bytes):
                try:
                    raw = raw.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise ReadError(f"Invalid UTF-8: {exc.reason}", source=self.name, line=line_no) from exc
            yield line_no, _strip_newline(raw)

    def _feed(self, line: str, line_no: int) -> None:
        trimmed = line.strip()
        if not trimmed:
            self._flush()
            self.key = None
        elif trimmed.startswith("[") and trimmed.endswith("]"):
            self._flush()
            self.section = self._path_from(trimmed[1:-1].strip(), line_no, what="section")
            self.key = None
        elif trimmed.startswith(CONTINUATION_MARKER):
            self._continue(line, line_no)
        else:
            self._flush()
            self._start_entry(line, line_no)

    def _continue(self, line: str, line_no: int) -> None:
        if self.state is not _State.READING_VALUE:
            raise DanglingContinuation("Continuation line without a preceding entry", source=self.name, line=line_no)
        tail = line.lstrip()[len(CONTINUATION_MARKER) :]
        self.value = f"{self.value}\n{tail}" if self.value else tail
        self.line_end = line_no

    def _start_entry(self, line: str, line_no: int) -> None:
        if "=" not in line:
            raise MissingDelimiter("Missing '=' between key and value", source=self.name, line=line_no)
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            self.key = self.section.push_all(self._path_from(key, line_no, what="key"))
        if self.key is None:
            raise DanglingContinuation("Value line without a previous key", source=self.name, line=line_no)
        self.value = value
        self.line_start = self.line_end = line_no
        self.state = _State.READING_VALUE

    def _flush(self) -> None:
        if self.state is _State.READING_VALUE and self.key is not None:
            self.entries.append(TextEntry(self.key, self.value, self.line_start, self.line_end))
        self.state = _State.BETWEEN_ENTRIES
        self.value = ""

    def _path_from(self, dotted: str, line_no: int, *, what: str) -> KeyPath:
        segments = dotted.split(".")
        if any(segment == "" for segment in segments):
            raise InvalidPathSyntax(f"Empty segment in {what} {dotted!r}", source=self.name, line=line_no)
        return KeyPath(tuple(segments))


def _strip_newline(raw: str) -> str:
    if raw.endswith("\n"):
        raw = raw[:-1]
    if raw.endswith("\r"):
        raw = raw[:-1]
    return raw


def _strip_comment(line: str) -> str:
    """Cut *line* at the first unescaped comment marker.

    >>> _strip_comment("key=value # note")
    'key=value '
    >>> _strip_comment("key=a\\\\#b")
    'key=a\\\\#b'
    """

    index = 0
    while index < len(line):
        char = line[index]
        if char == ESCAPE:
            index += 2
            continue
        if char == COMMENT_MARKER:
            return line[:index]
        index += 1
    return line


def stack_config(config: SourceRegistry, file_name: str, directories: Sequence[str | Path]) -> list[ConfigText]:
    """Register ``<directory>/<file_name>`` for every directory that has one.

    Directories are given in ascending priority (for example
    ``/usr/share/app``, ``/etc/app``, ``~/.config/app``), so a file found later
    overrides keys of files found earlier. Missing files are skipped; malformed
    files raise :class:`LoadError`.
    """

    added: list[ConfigText] = []
    for directory in directories:
        try:
            source = ConfigText.from_file(Path(directory) / file_name)
        except NotFound:
            continue
        config.add_source(source)
        added.append(source)
    return added
