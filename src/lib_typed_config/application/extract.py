"""Extraction pipeline: raw values to typed results.

Purpose
-------
Turn the raw strings a :class:`~lib_typed_config.domain.config.SourceRegistry` holds
for one key into typed values, or into a precise per-key error.

Pipeline
--------
1. Fetch the winning raw values for the key.
2. Run processors in order; each raw value becomes zero or more values.
3. Convert every remaining value with the requested converter.
4. Run validators over each converted value in order.
5. Check the number of surviving values against a :class:`Cardinality`. An
   absent key counts as zero values and gets no special treatment.
6. Return a single value for single-value cardinalities, a list otherwise.

Contents
--------
* :class:`Cardinality` – inclusive ``[minimum, maximum]`` count range.
* :func:`extract` – functional entry point.
* :class:`Item` – immutable fluent builder returned by ``Config.item``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Sequence, Tuple, Union

from ..domain.errors import (
    CardinalityError,
    ExtractionError,
    ProcessingError,
    TypeConversionError,
    ValidationError,
)
from ..domain.path import KeyPath, as_key_path
from ..observability import log_debug, make_event
from . import processors as _processors
from . import validators as _validators
from .converters import describe, resolve
from .ports import Converter, Processor, Validator

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..domain.config import Resolution, SourceRegistry

CountSpec = Union["Cardinality", int, Tuple[int, Union[int, None]], range]


@dataclass(frozen=True, slots=True)
class Cardinality:
    """Inclusive range of acceptable value counts; ``maximum=None`` is unbounded.

    Examples
    --------
    >>> str(Cardinality.exactly(1)), str(Cardinality.at_least(1)), str(Cardinality.between(2, 3))
    ('exactly 1', 'at least 1', 'between 2 and 3')
    >>> Cardinality.coerce(range(1, 4))
    Cardinality(minimum=1, maximum=3)
    >>> Cardinality.at_least(1).contains(0)
    False
    """

    minimum: int = 0
    maximum: int | None = None

    def __post_init__(self) -> None:
        if self.minimum < 0:
            raise ValueError(f"Cardinality minimum must not be negative, got {self.minimum}")
        if self.maximum is not None and self.maximum < self.minimum:
            raise ValueError(f"Cardinality maximum {self.maximum} is below minimum {self.minimum}")

    @classmethod
    def exactly(cls, count: int) -> Cardinality:
        return cls(count, count)

    @classmethod
    def at_least(cls, count: int) -> Cardinality:
        return cls(count, None)

    @classmethod
    def at_most(cls, count: int) -> Cardinality:
        return cls(0, count)

    @classmethod
    def between(cls, minimum: int, maximum: int | None) -> Cardinality:
        return cls(minimum, maximum)

    @classmethod
    def any(cls) -> Cardinality:
        return cls(0, None)

    @classmethod
    def coerce(cls, spec: CountSpec) -> Cardinality:
        """Accept a ``Cardinality``, an exact ``int``, a ``(min, max)`` tuple or a ``range``."""

        if isinstance(spec, Cardinality):
            return spec
        if isinstance(spec, bool):
            raise TypeError("Cardinality cannot be given as a bool")
        if isinstance(spec, int):
            return cls.exactly(spec)
        if isinstance(spec, range):
            if spec.step != 1 or len(spec) == 0:
                raise ValueError(f"Cardinality range must be non-empty with step 1, got {spec!r}")
            return cls(spec.start, spec.stop - 1)
        if isinstance(spec, tuple) and len(spec) == 2:
            return cls.between(*spec)
        raise TypeError(f"Unsupported cardinality specification: {spec!r}")

    def contains(self, count: int) -> bool:
        if count < self.minimum:
            return False
        return self.maximum is None or count <= self.maximum

    @property
    def is_single(self) -> bool:
        """``True`` when at most one value can be returned (result is a scalar)."""

        return self.maximum == 1

    def __str__(self) -> str:
        if self.maximum is None:
            return "any number of" if self.minimum == 0 else f"at least {self.minimum}"
        if self.minimum == self.maximum:
            return f"exactly {self.minimum}"
        if self.minimum == 0:
            return f"at most {self.maximum}"
        return f"between {self.minimum} and {self.maximum}"


def extract(
    config: SourceRegistry,
    path: KeyPath | str,
    *,
    convert: Converter = str,
    processor: Processor | Sequence[Processor] | None = None,
    validator: Validator | Sequence[Validator] | None = None,
    count: CountSpec = Cardinality.exactly(1),
) -> Any:
    """Resolve *path* through the extraction pipeline.

    Parameters
    ----------
    convert:
        Converter for each raw value; ``bool`` is interpreted strictly
        (``"true"``/``"false"``).
    processor / validator:
        A single callable or a sequence applied in order.
    count:
        Accepted number of values. ``exactly(1)`` (the default) and
        ``at_most(1)`` return a scalar (``None`` when absent), everything else
        a list.

    Raises
    ------
    ProcessingError, TypeConversionError, ValidationError, CardinalityError
        All carry the key; nothing is raised for other keys.

    Examples
    --------
    >>> from lib_typed_config.adapters.defaults.memory import Defaults
    >>> from lib_typed_config.application.config import Config
    >>> config = Config([Defaults({"port": "8080", "hosts": ["a:b", "c"]})])
    >>> extract(config, "port", convert=int)
    8080
    >>> extract(config, "hosts", processor=_processors.explode(":"), count=Cardinality.at_least(1))
    ['a', 'b', 'c']
    >>> extract(config, "missing", count=Cardinality.at_least(1))
    Traceback (most recent call last):
    ...
    lib_typed_config.domain.errors.CardinalityError: Key 'missing' requires at least 1 value(s), found 0
    """

    key = as_key_path(path)
    cardinality = Cardinality.coerce(count)
    resolution = config.lookup(key)
    try:
        values = _run(
            key,
            resolution,
            convert,
            _as_chain(processor),
            _as_chain(validator),
            cardinality,
        )
    except ExtractionError as exc:
        log_debug("extraction_failed", **make_event(resolution.source, key, {"error": str(exc)}))
        raise
    log_debug("value_extracted", **make_event(resolution.source, key, {"count": len(values)}))
    if cardinality.is_single:
        return values[0] if values else None
    return values


def _run(
    key: KeyPath,
    resolution: Resolution,
    convert: Converter,
    processors: Sequence[Processor],
    validators: Sequence[Validator],
    cardinality: Cardinality,
) -> list[Any]:
    located = _process(key, _located(resolution), processors)
    converted = [(_convert(key, raw, convert, location), location) for raw, location in located]
    checked = [_validate(key, value, validators, location) for value, location in converted]
    if not cardinality.contains(len(checked)):
        locations = [location for _, location in located if location]
        raise CardinalityError(key, str(cardinality), len(checked), locations=locations)
    return checked


def _located(resolution: Resolution) -> list[tuple[str, str | None]]:
    """Pair every raw value with where it was defined."""

    if len(resolution.locations) == len(resolution.values):
        return list(zip(resolution.values, resolution.locations))
    return [(raw, resolution.source) for raw in resolution.values]


def _process(
    key: KeyPath,
    located: Sequence[tuple[str, str | None]],
    processors: Sequence[Processor],
) -> list[tuple[str, str | None]]:
    if not processors:
        return list(located)
    result: list[tuple[str, str | None]] = []
    for raw, location in located:
        try:
            produced = _processors.apply(processors, [raw])
        except ProcessingError as exc:
            if exc.path is not None:
                raise
            raise exc.at(key, raw, location) from exc
        # values split from one raw value keep its location
        result.extend((value, location) for value in produced)
    return result


def _convert(key: KeyPath, raw: str, convert: Converter, location: str | None = None) -> Any:
    converter = resolve(convert)
    try:
        return converter(raw)
    except (ValueError, TypeError) as exc:
        raise TypeConversionError(key, raw, describe(convert), reason=str(exc), location=location) from exc


def _validate(key: KeyPath, value: Any, validators: Sequence[Validator], location: str | None = None) -> Any:
    for validator in validators:
        try:
            value = validator(value)
        except ValidationError as exc:
            if exc.path is not None:
                raise
            raise exc.at(key, location) from exc
    return value


def _as_chain(steps: Callable[..., Any] | Sequence[Callable[..., Any]] | None) -> tuple[Any, ...]:
    if steps is None:
        return ()
    if callable(steps):
        return (steps,)
    return tuple(steps)


@dataclass(frozen=True, slots=True)
class Item:
    """Fluent, immutable description of one extraction.

    Every builder method returns a new ``Item``; the registry is only read
    when a terminal method (``value``, ``try_value``, ``values``) runs.

    Examples
    --------
    >>> from lib_typed_config.adapters.defaults.memory import Defaults
    >>> from lib_typed_config.application.config import Config
    >>> config = Config([Defaults({"frobs": "5", "search_path": "/a : /b"})])
    >>> config.item("frobs").at_most(10).value(int)
    5
    >>> config.item("search_path").explode(":").trim().values()
    ['/a', '/b']
    >>> config.item("absent").try_value(int) is None
    True
    """

    config: SourceRegistry
    path: KeyPath
    processors: tuple[Processor, ...] = ()
    validators: tuple[Validator, ...] = ()

    def process(self, processor: Processor) -> Item:
        """Append a custom processor."""

        return dataclasses.replace(self, processors=self.processors + (processor,))

    def validate(self, validator: Validator) -> Item:
        """Append a custom validator."""

        return dataclasses.replace(self, validators=self.validators + (validator,))

    def explode(self, delimiter: str) -> Item:
        return self.process(_processors.explode(delimiter))

    def trim(self) -> Item:
        return self.process(_processors.trim())

    def unescape(self) -> Item:
        return self.process(_processors.unescape())

    def unquote(self) -> Item:
        return self.process(_processors.unquote())

    def not_empty(self) -> Item:
        return self.process(_processors.not_empty())

    def expand_env(self) -> Item:
        return self.process(_processors.expand_env())

    def at_least(self, minimum: Any) -> Item:
        return self.validate(_validators.at_least(minimum))

    def at_most(self, maximum: Any) -> Item:
        return self.validate(_validators.at_most(maximum))

    def in_range(
        self,
        minimum: Any = None,
        maximum: Any = None,
        *,
        min_inclusive: bool = True,
        max_inclusive: bool = True,
    ) -> Item:
        return self.validate(
            _validators.in_range(minimum, maximum, min_inclusive=min_inclusive, max_inclusive=max_inclusive)
        )

    def value(self, convert: Converter = str) -> Any:
        """Return exactly one converted value."""

        return self._extract(convert, Cardinality.exactly(1))

    def try_value(self, convert: Converter = str) -> Any:
        """Return the converted value, or ``None`` when the key is absent."""

        return self._extract(convert, Cardinality.at_most(1))

    def values(self, convert: Converter = str, count: CountSpec = Cardinality.any()) -> list[Any]:
        """Return every converted value as a list, checked against *count*."""

        cardinality = Cardinality.coerce(count)
        result = self._extract(convert, cardinality)
        if cardinality.is_single:
            return [] if result is None else [result]
        return result

    def _extract(self, convert: Converter, count: Cardinality) -> Any:
        return extract(
            self.config,
            self.path,
            convert=convert,
            processor=self.processors,
            validator=self.validators,
            count=count,
        )
