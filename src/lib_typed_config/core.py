"""Composition root for ``lib_typed_config``.

Purpose
-------
Wire the built-in sources into a ready :class:`Config` following the
conventional precedence: application defaults, system-wide files, host files,
user files, a project-local file, and finally environment overrides.

Contents
--------
* :class:`LayerLoadError` – a discovered file could not be parsed.
* :func:`read_config` – build a :class:`Config` for an application.

System Role
-----------
The only module that knows about every adapter at once. Applications that
need a different order or extra sources build a :class:`Config` by hand with
``add_source``; nothing here is global state.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from .adapters.defaults.memory import Defaults, ValueSpec
from .adapters.env.default import EnvSource, default_env_prefix, env_binding_name
from .adapters.path_resolvers.default import DefaultPathResolver
from .adapters.text.parser import ConfigText
from .application.config import Config
from .domain.config import source_name
from .domain.errors import ConfigError, LoadError, NotFound
from .domain.path import KeyPath, as_key_path
from .application.ports import Source
from .observability import bind_trace_id, log_debug, log_info, make_event


class LayerLoadError(ConfigError):
    """Raised when a configuration file of a layer cannot be parsed.

    What
    ----
    Wraps the :class:`LoadError` raised by the text parser and names the layer
    and the file, so callers can catch one exception family.
    """

    def __init__(self, layer: str, path: str, error: LoadError) -> None:
        self.layer = layer
        self.path = path
        self.error = error
        super().__init__(f"Failed to load {layer} layer file {path}: {error}")


def read_config(
    *,
    vendor: str,
    app: str,
    slug: str,
    file_name: str = "config.conf",
    defaults: Mapping[KeyPath | str, ValueSpec] | None = None,
    env: Mapping[KeyPath | str, str] | None = None,
    env_prefix: str | None = None,
    start_dir: str | Path | None = None,
) -> Config:
    """Return a :class:`Config` stacking every layer in ascending priority.

    Parameters
    ----------
    vendor / app / slug:
        Naming context for the platform search directories.
    file_name:
        Main file name looked up in each layer directory (``config.d/*.conf``
        fragments are always added after it).
    defaults:
        Application defaults; the lowest-priority source.
    env:
        Explicit ``key -> VARIABLE`` bindings.
    env_prefix:
        When given, every key declared by *defaults* or by a loaded file is
        also bound to its conventional variable (see
        :func:`~lib_typed_config.adapters.env.default.env_binding_name`).
        Explicit *env* bindings win for the same key.
    start_dir:
        Directory whose ``<file_name>`` is stacked above the user layer.

    Raises
    ------
    LayerLoadError
        A discovered file is malformed. Missing files are skipped.

    Side Effects
    ------------
    Clears the active trace identifier and emits ``source_added`` and
    ``configuration_ready`` events.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> _ = (Path(tmp.name) / "config.conf").write_text("[service]\\nport=9000\\n", encoding="utf-8")
    >>> config = read_config(
    ...     vendor="Acme", app="Demo", slug="lib-typed-config-doctest",
    ...     defaults={"service.port": "8080", "service.host": "localhost"},
    ...     start_dir=tmp.name,
    ... )
    >>> config.item("service.port").value(int), config.item("service.host").value()
    (9000, 'localhost')
    >>> tmp.cleanup()
    """

    bind_trace_id(None)
    config = Config()
    declared: dict[KeyPath, None] = {}

    if defaults:
        defaults_source = Defaults(defaults, name="defaults")
        declared.update(dict.fromkeys(defaults_source.paths()))
        _register(config, defaults_source, "defaults")

    resolver = DefaultPathResolver(vendor=vendor, app=app, slug=slug, file_name=file_name)
    for layer, paths in resolver.layers():
        for source in _load_files(layer, paths):
            declared.update(dict.fromkeys(source.paths()))
            _register(config, source, layer)

    if start_dir is not None:
        for source in _load_files("project", [str(Path(start_dir) / file_name)]):
            declared.update(dict.fromkeys(source.paths()))
            _register(config, source, "project")

    bindings = _env_bindings(env, env_prefix, declared)
    if bindings:
        _register(config, EnvSource(bindings, name="env"), "env")

    log_info("configuration_ready", **make_event(None, None, {"sources": len(config), "slug": slug}))
    return config


def _register(config: Config, source: Source, layer: str) -> None:
    config.add_source(source)
    log_debug("source_added", **make_event(source_name(source), None, {"layer": layer, "priority": len(config)}))


def _load_files(layer: str, paths: Iterable[str]) -> list[ConfigText]:
    """Parse every file of *layer*; skip files that vanished meanwhile."""

    loaded: list[ConfigText] = []
    for path in paths:
        try:
            loaded.append(ConfigText.from_file(path))
        except NotFound:
            continue
        except LoadError as exc:
            raise LayerLoadError(layer, path, exc) from exc
    return loaded


def _env_bindings(
    explicit: Mapping[KeyPath | str, str] | None,
    prefix: str | None,
    declared: Mapping[KeyPath, None],
) -> dict[KeyPath, str]:
    """Combine prefix-derived bindings with explicit ones (explicit win).

    >>> _env_bindings({"a": "CUSTOM"}, "DEMO", {KeyPath.of("a"): None, KeyPath.of("b", "c"): None})
    {KeyPath(segments=('a',)): 'CUSTOM', KeyPath(segments=('b', 'c')): 'DEMO_B__C'}
    """

    bindings: dict[KeyPath, str] = {}
    if prefix is not None:
        bindings.update((path, env_binding_name(prefix, path)) for path in declared)
    for path, variable in (explicit or {}).items():
        bindings[as_key_path(path)] = variable
    return bindings


__all__ = [
    "Config",
    "ConfigError",
    "LayerLoadError",
    "read_config",
    "default_env_prefix",
]
