"""Application-layer ports describing the pluggable capabilities.

Purpose
-------
Define the narrow structural contracts that sources, processors, and
validators satisfy so the registry and the extraction pipeline never depend on
concrete implementations. Each port has exactly one entry point; plain
functions and closures qualify as processors and validators.

Contents
--------
* :class:`Source` – returns raw values stored at an exact :class:`KeyPath`.
* :class:`Processor` – restructures one raw value into zero or more values.
* :class:`Validator` – checks (and returns) a converted value.
* :data:`Converter` – callable turning a raw string into the target type.

System Role
-----------
Custom sources (for example a remote key/value store) only implement
:meth:`Source.get`; they are responsible for their own I/O policy. A source
may also offer ``locations(path)`` returning one human readable location per
value; extraction errors quote it. Sources without it are reported by name.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, Sequence, runtime_checkable

from ..domain.path import KeyPath

Converter = Callable[[str], Any]
"""Turns one raw value into the requested type, raising ``ValueError`` on failure."""


@runtime_checkable
class Source(Protocol):
    """Provide raw configuration values for a key.

    Why
    ----
    Decouple composition from where values live (memory, environment, files).

    Contract
    --------
    * Return an empty sequence for unknown keys; never raise on absence.
    * Keep lookups free of side effects; loading happens at construction.
    * Preserve the source-defined order of multiple values.
    """

    def get(self, path: KeyPath) -> Sequence[str]:
        """Return every raw value stored exactly at *path*."""


@runtime_checkable
class Processor(Protocol):
    """Transform one raw value into a sequence of raw values.

    Returning an empty sequence drops the value. Raising
    :class:`~lib_typed_config.domain.errors.ProcessingError` rejects it.
    """

    def __call__(self, raw: str) -> Sequence[str]:
        """Return the replacement values for *raw*."""


@runtime_checkable
class Validator(Protocol):
    """Check a converted value and return it (possibly normalised).

    Violations raise :class:`~lib_typed_config.domain.errors.ValidationError`.
    """

    def __call__(self, value: Any) -> Any:
        """Return *value* when it satisfies the constraint."""
