"""Raw-string converters used by the extraction pipeline.

Any ``Callable[[str], T]`` that raises ``ValueError`` or ``TypeError`` on bad
input works as a converter. The helpers below cover the cases where the
builtin constructor is not strict enough (``bool("false")`` is ``True``).
"""

from __future__ import annotations

from typing import Any, Callable

_TRUE = "true"
_FALSE = "false"


def boolean(raw: str) -> bool:
    """Accept exactly ``"true"`` or ``"false"``.

    >>> boolean("true"), boolean("false")
    (True, False)
    >>> boolean("yes")
    Traceback (most recent call last):
    ...
    ValueError: expected 'true' or 'false'
    """

    if raw == _TRUE:
        return True
    if raw == _FALSE:
        return False
    raise ValueError("expected 'true' or 'false'")


def integer(raw: str) -> int:
    return int(raw)


def decimal(raw: str) -> float:
    return float(raw)


def text(raw: str) -> str:
    return raw


_BUILTIN_REPLACEMENTS: dict[Any, Callable[[str], Any]] = {bool: boolean}


def resolve(convert: Callable[[str], Any]) -> Callable[[str], Any]:
    """Return the converter actually used for *convert*."""

    return _BUILTIN_REPLACEMENTS.get(convert, convert)


def describe(convert: Callable[[str], Any]) -> str:
    """Return a short human readable name for *convert*.

    >>> describe(int), describe(boolean)
    ('int', 'boolean')
    """

    return getattr(convert, "__name__", None) or type(convert).__name__
