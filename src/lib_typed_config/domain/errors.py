"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by sources, the extraction pipeline,
and consuming applications. The hierarchy lives in the domain layer so the
application and adapter rings can depend on it without creating cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for every library failure.
* :class:`NotFound` – optional resource (configuration file) missing.
* :class:`LoadError` and subclasses – a source could not be constructed.
* :class:`ExtractionError` and subclasses – a single key failed to resolve.

System Role
-----------
``LoadError`` is raised once, while building sources, and means the whole
configuration is untrustworthy. ``ExtractionError`` is raised per key so that
callers can keep resolving other keys after one of them fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .path import KeyPath


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_typed_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class NotFound(ConfigError):
    """Represents missing-but-optional resources (configuration files).

    Why
    ----
    Allow file stacking to skip absent files without aborting the whole load.
    """


class LoadError(ConfigError):
    """Raised when a source cannot be materialised from its input.

    Attributes
    ----------
    source:
        Human readable name of the input (usually the file path).
    line:
        1-based line number of the offending line, if known.

    Examples
    --------
    >>> str(LoadError("Missing '=' after key", source="app.conf", line=3))
    "Missing '=' after key (conf:app.conf:3)"
    """

    def __init__(self, message: str, *, source: str | None = None, line: int | None = None) -> None:
        self.message = message
        self.source = source
        self.line = line
        super().__init__(self._render())

    def _render(self) -> str:
        if self.source is None:
            return self.message
        if self.line is None:
            return f"{self.message} (conf:{self.source})"
        return f"{self.message} (conf:{self.source}:{self.line})"


class DanglingContinuation(LoadError):
    """A continuation or key-less value line has no entry to attach to."""


class MissingDelimiter(LoadError):
    """An entry line lacks the ``=`` separating key from value."""


class InvalidPathSyntax(LoadError):
    """A key or section header contains an empty path segment."""


class ReadError(LoadError):
    """The input stream could not be read or is not valid UTF-8."""


class ExtractionError(ConfigError):
    """Base type for failures while resolving a single key.

    Attributes
    ----------
    path:
        Key that failed. ``None`` only while a validator or processor error is
        still travelling towards the pipeline, which attaches the path.
    locations:
        Where the offending value(s) were defined, e.g. ``conf:app.conf:2`` or
        ``env:APP_PORT``. Rendered after the message as ``@'<location>'``.
    """

    def __init__(self, message: str, *, path: KeyPath | None = None, locations: Iterable[str] = ()) -> None:
        self.path = path
        self.locations: tuple[str, ...] = tuple(locations)
        super().__init__(f"{message}{_render_locations(self.locations)}")


def _render_locations(locations: tuple[str, ...]) -> str:
    if not locations:
        return ""
    if len(locations) == 1:
        return f"@'{locations[0]}'"
    return "@[" + ", ".join(f"'{location}'" for location in locations) + "]"


class TypeConversionError(ExtractionError):
    """A raw value could not be converted into the requested type.

    Examples
    --------
    >>> from lib_typed_config.domain.path import KeyPath
    >>> str(TypeConversionError(KeyPath.of("port"), "eighty", "int"))
    "Cannot convert value 'eighty' of key 'port' to int"
    >>> str(TypeConversionError(KeyPath.of("port"), "eighty", "int", location="conf:app.conf:2"))
    "Cannot convert value 'eighty' of key 'port' to int@'conf:app.conf:2'"
    """

    def __init__(
        self,
        path: KeyPath,
        raw: str,
        target: str,
        *,
        reason: str | None = None,
        location: str | None = None,
    ) -> None:
        self.raw = raw
        self.target = target
        self.reason = reason
        self.location = location
        message = f"Cannot convert value {raw!r} of key '{path}' to {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path=path, locations=() if location is None else (location,))


class ProcessingError(ExtractionError):
    """A processor rejected a raw value (for example an unquoted string)."""

    def __init__(
        self,
        reason: str,
        *,
        raw: str | None = None,
        path: KeyPath | None = None,
        location: str | None = None,
    ) -> None:
        self.reason = reason
        self.raw = raw
        self.location = location
        message = reason if path is None else f"Processing value {raw!r} of key '{path}' failed: {reason}"
        super().__init__(message, path=path, locations=() if location is None else (location,))

    def at(self, path: KeyPath, raw: str, location: str | None = None) -> ProcessingError:
        """Return a copy bound to *path*, the offending *raw* value and its *location*."""

        return ProcessingError(self.reason, raw=raw, path=path, location=location)


class ValidationError(ExtractionError):
    """A converted value violated a validator constraint.

    Examples
    --------
    >>> from lib_typed_config.domain.path import KeyPath
    >>> str(ValidationError(42, "<= 10").at(KeyPath.of("frobs")))
    "Value 42 of key 'frobs' must be <= 10"
    >>> str(ValidationError(42, "<= 10").at(KeyPath.of("frobs"), "env:FROBS"))
    "Value 42 of key 'frobs' must be <= 10@'env:FROBS'"
    """

    def __init__(
        self,
        value: Any,
        constraint: str,
        *,
        path: KeyPath | None = None,
        location: str | None = None,
    ) -> None:
        self.value = value
        self.constraint = constraint
        self.location = location
        if path is None:
            message = f"Value {value!r} must be {constraint}"
        else:
            message = f"Value {value!r} of key '{path}' must be {constraint}"
        super().__init__(message, path=path, locations=() if location is None else (location,))

    def at(self, path: KeyPath, location: str | None = None) -> ValidationError:
        """Return a copy bound to *path* and the value's *location*."""

        return ValidationError(self.value, self.constraint, path=path, location=location)


class CardinalityError(ExtractionError):
    """The number of values for a key fell outside the requested range.

    ``expected`` is rendered by the caller (for example ``"exactly 1"``);
    ``locations`` lists where each counted value was defined.

    >>> from lib_typed_config.domain.path import KeyPath
    >>> str(CardinalityError(KeyPath.of("host"), "exactly 1", 2, locations=["conf:a.conf:1", "conf:a.conf:3"]))
    "Key 'host' requires exactly 1 value(s), found 2@['conf:a.conf:1', 'conf:a.conf:3']"
    """

    def __init__(self, path: KeyPath, expected: str, actual: int, *, locations: Iterable[str] = ()) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Key '{path}' requires {expected} value(s), found {actual}", path=path, locations=locations)
