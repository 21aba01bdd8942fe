"""Environment variable source.

Purpose
-------
Expose selected process environment variables as configuration values. Only
variables named in the binding table are ever read; everything else in the
environment stays invisible to the configuration system.

Key behaviours
--------------
* Explicit ``KeyPath -> VARIABLE`` bindings, evaluated at lookup time so
  changes to the environment are observed.
* ``default_env_prefix`` / ``env_binding_name`` derive conventional variable
  names (``DEMO_SERVICE__TIMEOUT``) from a slug and a key.
* Values are never coerced; they travel as raw strings into the pipeline.
"""

from __future__ import annotations

import os
from typing import Iterable, Mapping, Tuple, Union

from ...domain.path import KeyPath, as_key_path
from ...observability import log_debug, make_event

Bindings = Union[Mapping[Union[KeyPath, str], str], Iterable[Tuple[Union[KeyPath, str], str]]]


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-typed-config')
    'LIB_TYPED_CONFIG'
    """

    return slug.replace("-", "_").upper()


def env_binding_name(prefix: str, path: KeyPath | str) -> str:
    """Return the variable name conventionally bound to *path*.

    Segments are upper-cased, dashes become underscores, and ``__`` separates
    nesting levels.

    Examples
    --------
    >>> env_binding_name('DEMO', 'service.timeout')
    'DEMO_SERVICE__TIMEOUT'
    >>> env_binding_name('', 'search-path')
    'SEARCH_PATH'
    """

    key = as_key_path(path)
    body = "__".join(segment.replace("-", "_").upper() for segment in key)
    prefix = prefix.rstrip("_")
    return f"{prefix}_{body}" if prefix else body


class EnvSource:
    """Read bound environment variables as single raw values.

    Why
    ----
    Operators override file-based settings through the environment; binding
    names explicitly keeps unrelated variables out of the configuration.

    Examples
    --------
    >>> source = EnvSource({"search_path": "SEARCH_PATH"}, environ={"SEARCH_PATH": "/a:/b"})
    >>> source.get(KeyPath.of("search_path"))
    ('/a:/b',)
    >>> source.get(KeyPath.of("other"))
    ()
    """

    def __init__(
        self,
        bindings: Bindings,
        *,
        environ: Mapping[str, str] | None = None,
        name: str = "env",
    ) -> None:
        """Initialise the source.

        Parameters
        ----------
        bindings:
            Mapping or pairs of ``(key, VARIABLE_NAME)``. Keys may be dotted
            strings.
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        name:
            Provenance label reported by the registry.
        """

        self.name = name
        self._environ = os.environ if environ is None else environ
        items = bindings.items() if isinstance(bindings, Mapping) else bindings
        self._bindings: dict[KeyPath, str] = {as_key_path(path): variable for path, variable in items}

    @classmethod
    def for_paths(
        cls,
        prefix: str,
        paths: Iterable[KeyPath | str],
        *,
        environ: Mapping[str, str] | None = None,
        name: str = "env",
    ) -> EnvSource:
        """Bind each of *paths* to its conventional variable name under *prefix*.

        >>> source = EnvSource.for_paths('DEMO', ['db.host'], environ={'DEMO_DB__HOST': 'db1'})
        >>> source.variable_for('db.host'), source.get(KeyPath.of('db', 'host'))
        ('DEMO_DB__HOST', ('db1',))
        """

        return cls([(path, env_binding_name(prefix, path)) for path in paths], environ=environ, name=name)

    def variable_for(self, path: KeyPath | str) -> str | None:
        """Return the variable bound to *path*, if any."""

        return self._bindings.get(as_key_path(path))

    def get(self, path: KeyPath) -> tuple[str, ...]:
        variable = self._bindings.get(path)
        if variable is None:
            return ()
        value = self._environ.get(variable)
        if value is None:
            return ()
        log_debug("env_value_read", **make_event(self.name, path, {"variable": variable}))
        return (value,)

    def locations(self, path: KeyPath | str) -> list[str]:
        """Return ``["env:<VARIABLE>"]`` when *path* is bound to a set variable.

        >>> EnvSource({"port": "APP_PORT"}, environ={"APP_PORT": "80"}).locations("port")
        ['env:APP_PORT']
        """

        variable = self._bindings.get(as_key_path(path))
        if variable is None or variable not in self._environ:
            return []
        return [f"env:{variable}"]

    def __repr__(self) -> str:
        return f"EnvSource(name={self.name!r}, bindings={len(self._bindings)})"
