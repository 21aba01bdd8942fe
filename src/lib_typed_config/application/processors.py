"""Built-in processors operating on raw string values.

Purpose
-------
Restructure raw values before type conversion: split, trim, unescape, unquote,
drop blanks, or expand placeholders. Every helper returns a plain function
``(raw) -> list[str]`` satisfying the
:class:`~lib_typed_config.application.ports.Processor` port, so custom
processors can be written as ordinary functions.

Contents
--------
* ``explode`` / ``trim`` / ``trim_start`` / ``trim_end`` / ``not_empty``
* ``unescape`` / ``unquote``
* ``expand`` / ``expand_env`` – ``${name}`` placeholder substitution.
* ``apply`` – run a chain of processors over a list of raw values.
"""

from __future__ import annotations

import enum
import os
from typing import Callable, Iterable, Mapping, Sequence

from ..domain.errors import ProcessingError
from .ports import Processor

Resolver = Callable[[str], str]

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}
_ENABLER = "$"


def explode(delimiter: str) -> Processor:
    """Split each value on *delimiter*.

    Examples
    --------
    >>> explode(":")("a:b:c")
    ['a', 'b', 'c']
    >>> explode(",")("")
    ['']
    """

    if not delimiter:
        raise ValueError("explode() needs a non-empty delimiter")

    def split(raw: str) -> list[str]:
        return raw.split(delimiter)

    split.__qualname__ = f"explode({delimiter!r})"
    return split


def trim() -> Processor:
    """Strip surrounding whitespace.

    >>> trim()("  text\\t")
    ['text']
    """

    def trimmed(raw: str) -> list[str]:
        return [raw.strip()]

    return trimmed


def trim_start() -> Processor:
    def trimmed_start(raw: str) -> list[str]:
        return [raw.lstrip()]

    return trimmed_start


def trim_end() -> Processor:
    def trimmed_end(raw: str) -> list[str]:
        return [raw.rstrip()]

    return trimmed_end


def not_empty() -> Processor:
    """Drop values that are empty or whitespace only.

    >>> not_empty()("   "), not_empty()("x")
    ([], ['x'])
    """

    def non_blank(raw: str) -> list[str]:
        return [raw] if raw.strip() else []

    return non_blank


def unescape() -> Processor:
    """Interpret backslash escapes.

    ``\\n``, ``\\r`` and ``\\t`` become control characters, any other escaped
    character is kept literally, and a trailing lone backslash survives.

    >>> unescape()("a\\\\tb\\\\#c")
    ['a\\tb#c']
    """

    def unescaped(raw: str) -> list[str]:
        output: list[str] = []
        chars = iter(raw)
        for char in chars:
            if char != "\\":
                output.append(char)
                continue
            escaped = next(chars, None)
            if escaped is None:
                output.append("\\")
            else:
                output.append(_ESCAPES.get(escaped, escaped))
        return ["".join(output)]

    return unescaped


def unquote() -> Processor:
    """Require and strip surrounding double quotes.

    >>> unquote()('  "quoted value" ')
    ['quoted value']
    >>> unquote()('bare')
    Traceback (most recent call last):
    ...
    lib_typed_config.domain.errors.ProcessingError: value must be quoted
    """

    def unquoted(raw: str) -> list[str]:
        value = raw.strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            return [value[1:-1]]
        raise ProcessingError("value must be quoted")

    return unquoted


class _Expansion(enum.Enum):
    TEXT = 0
    MARKER = 1
    ESCAPED = 2
    PLACEHOLDER = 3


def expand(resolver: Resolver, start: str = "{", end: str = "}") -> Processor:
    """Replace ``${name}`` placeholders with ``resolver(name)``.

    ``$${`` produces a literal ``${``. Empty (``${}``) and unterminated
    placeholders are kept verbatim. A resolver signals an unknown name by
    raising ``LookupError`` or ``ValueError``; the value is then rejected.

    Examples
    --------
    >>> names = {"user": "ada"}
    >>> expand(names.__getitem__)("home=/home/${user}")
    ['home=/home/ada']
    >>> expand(names.__getitem__)("literal $${user} and ${}")
    ['literal ${user} and ${}']
    """

    if _ENABLER in (start, end):
        raise ValueError("Placeholder delimiters must differ from '$'")

    def expanded(raw: str) -> list[str]:
        return [_expand(raw, resolver, start, end)]

    return expanded


def expand_env(environ: Mapping[str, str] | None = None) -> Processor:
    """Expand ``${VARIABLE}`` from the environment; unset variables become ``""``.

    >>> expand_env({"HOME": "/root"})("${HOME}/.cache:${UNSET}")
    ['/root/.cache:']
    """

    def lookup(name: str) -> str:
        source = os.environ if environ is None else environ
        return source.get(name, "")

    return expand(lookup)


def _expand(raw: str, resolver: Resolver, start: str, end: str) -> str:
    result: list[str] = []
    state = _Expansion.TEXT
    marker = 0
    name_start = 0
    for pos, char in enumerate(raw):
        if state is _Expansion.TEXT:
            result.append(char)
            if char == _ENABLER:
                marker = len(result) - 1
                state = _Expansion.MARKER
        elif state is _Expansion.MARKER:
            if char == _ENABLER:
                state = _Expansion.ESCAPED
            elif char == start:
                result.append(char)
                name_start = pos + 1
                state = _Expansion.PLACEHOLDER
            else:
                result.append(char)
                state = _Expansion.TEXT
        elif state is _Expansion.ESCAPED:
            if char != start:
                result.append(_ENABLER)
            result.append(char)
            state = _Expansion.TEXT
        elif char == end:
            name = raw[name_start:pos]
            if name:
                del result[marker:]
                result.append(_resolve(resolver, name))
            else:
                result.append(char)
            state = _Expansion.TEXT
        else:
            result.append(char)
    if state is _Expansion.ESCAPED:
        result.append(_ENABLER)
    return "".join(result)


def _resolve(resolver: Resolver, name: str) -> str:
    try:
        value = resolver(name)
    except (LookupError, ValueError) as exc:
        raise ProcessingError(f"cannot resolve placeholder {name!r}") from exc
    return str(value)


def apply(processors: Sequence[Processor], values: Iterable[str]) -> list[str]:
    """Run *processors* in order; each one sees the output of the previous.

    >>> apply([explode(":"), trim()], ["a : b", " c"])
    ['a', 'b', 'c']
    """

    current = list(values)
    for processor in processors:
        current = [item for raw in current for item in processor(raw)]
    return current
