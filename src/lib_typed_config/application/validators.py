"""Built-in validators for converted values.

Each factory returns a function ``(value) -> value`` that raises
:class:`~lib_typed_config.domain.errors.ValidationError` (without a key) on a
violation; the extraction pipeline attaches the key before re-raising.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..domain.errors import ValidationError
from .ports import Validator


def in_range(
    minimum: Any = None,
    maximum: Any = None,
    *,
    min_inclusive: bool = True,
    max_inclusive: bool = True,
) -> Validator:
    """Check ``minimum <= value <= maximum``; either bound may be ``None``.

    Examples
    --------
    >>> check = in_range(maximum=10)
    >>> check(5)
    5
    >>> check(42)
    Traceback (most recent call last):
    ...
    lib_typed_config.domain.errors.ValidationError: Value 42 must be <= 10
    >>> in_range(1, 5, max_inclusive=False)(5)
    Traceback (most recent call last):
    ...
    lib_typed_config.domain.errors.ValidationError: Value 5 must be >= 1 and < 5
    >>> check("5")
    Traceback (most recent call last):
    ...
    lib_typed_config.domain.errors.ValidationError: Value '5' must be <= 10
    """

    if minimum is not None and maximum is not None and minimum > maximum:
        raise ValueError(f"in_range() minimum {minimum!r} exceeds maximum {maximum!r}")
    constraint = _describe_range(minimum, maximum, min_inclusive, max_inclusive)

    def within(value: Any) -> Any:
        try:
            below = minimum is not None and (value < minimum if min_inclusive else value <= minimum)
            above = maximum is not None and (value > maximum if max_inclusive else value >= maximum)
        except TypeError as exc:
            # e.g. an unconverted str against an int bound
            raise ValidationError(value, constraint) from exc
        if below or above:
            raise ValidationError(value, constraint)
        return value

    within.__qualname__ = f"in_range({constraint})"
    return within


def at_least(minimum: Any) -> Validator:
    return in_range(minimum=minimum)


def at_most(maximum: Any) -> Validator:
    return in_range(maximum=maximum)


def not_empty() -> Validator:
    """Reject values whose ``len()`` is zero (empty strings, lists).

    >>> not_empty()("x")
    'x'
    """

    def filled(value: Any) -> Any:
        try:
            empty = len(value) == 0
        except TypeError as exc:
            raise ValidationError(value, "non-empty") from exc
        if empty:
            raise ValidationError(value, "non-empty")
        return value

    return filled


def one_of(choices: Iterable[Any]) -> Validator:
    """Accept only members of *choices*.

    >>> one_of(["debug", "info"])("trace")
    Traceback (most recent call last):
    ...
    lib_typed_config.domain.errors.ValidationError: Value 'trace' must be one of 'debug', 'info'
    """

    allowed = tuple(choices)
    if not allowed:
        raise ValueError("one_of() needs at least one choice")
    constraint = "one of " + ", ".join(repr(choice) for choice in allowed)

    def member(value: Any) -> Any:
        if value not in allowed:
            raise ValidationError(value, constraint)
        return value

    return member


def _describe_range(minimum: Any, maximum: Any, min_inclusive: bool, max_inclusive: bool) -> str:
    parts = []
    if minimum is not None:
        parts.append(f"{'>=' if min_inclusive else '>'} {minimum}")
    if maximum is not None:
        parts.append(f"{'<=' if max_inclusive else '<'} {maximum}")
    return " and ".join(parts) or "any value"
