"""Filesystem search rules for stacked configuration files.

Purpose
-------
Answer one question for the composition root: which ``.conf`` files exist for
each layer (``app`` → ``host`` → ``user``) on the current platform. The
adapter is the only component that knows about ``/etc``, XDG, Application
Support, or ProgramData.

Contents
--------
* :class:`DefaultPathResolver` – platform-aware candidate discovery.
* :func:`_collect_layer` – main file plus ``config.d/*.conf`` below a base
  directory.

System Role
-----------
Feeds ordered path lists into :func:`lib_typed_config.core.read_config`.
Every root can be redirected through ``LIB_TYPED_CONFIG_*`` variables so tests
and portable deployments never touch real system directories.
"""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path
from typing import Iterable, List, Mapping

from ...observability import log_debug, make_event

LAYERS = ("app", "host", "user")
_FRAGMENT_SUFFIX = ".conf"


class DefaultPathResolver:
    """Resolve candidate configuration files for each layer.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> (root / "demo").mkdir()
    >>> _ = (root / "demo" / "config.conf").write_text("key=1\\n", encoding="utf-8")
    >>> resolver = DefaultPathResolver(
    ...     vendor="Acme", app="Demo", slug="demo",
    ...     env={"LIB_TYPED_CONFIG_ETC": str(root)}, platform="linux",
    ... )
    >>> [Path(p).name for p in resolver.app()]
    ['config.conf']
    >>> tmp.cleanup()
    """

    def __init__(
        self,
        *,
        vendor: str,
        app: str,
        slug: str,
        file_name: str = "config.conf",
        env: Mapping[str, str] | None = None,
        platform: str | None = None,
        hostname: str | None = None,
    ) -> None:
        """Store the naming context used to build platform directories.

        Parameters
        ----------
        vendor / app / slug:
            ``slug`` names Linux directories; ``vendor``/``app`` name macOS and
            Windows ones.
        file_name:
            Main file looked up in every layer directory.
        env:
            Overrides merged on top of :data:`os.environ`.
        platform / hostname:
            Default to :data:`sys.platform` and :func:`socket.gethostname`.
        """

        self.vendor = vendor
        self.application = app
        self.slug = slug
        self.file_name = file_name
        self.env = {**os.environ, **(env or {})}
        self.platform = platform or sys.platform
        self.hostname = hostname or socket.gethostname()

    def app(self) -> list[str]:
        """System-wide files; the lowest-priority layer."""

        return self._iter_layer("app")

    def host(self) -> list[str]:
        """``hosts/<hostname>.conf`` below the system directory."""

        return self._iter_layer("host")

    def user(self) -> list[str]:
        """Per-user files; the highest-priority file layer."""

        return self._iter_layer("user")

    def layers(self) -> list[tuple[str, list[str]]]:
        """Return ``(layer, paths)`` pairs in ascending priority."""

        return [(layer, self._iter_layer(layer)) for layer in LAYERS]

    def _iter_layer(self, layer: str) -> list[str]:
        paths: List[str]
        if self._is_linux:
            paths = list(self._linux(layer))
        elif self._is_macos:
            paths = list(self._macos(layer))
        elif self._is_windows:
            paths = list(self._windows(layer))
        else:
            paths = []
        if paths:
            log_debug("path_candidates", **make_event(None, None, {"layer": layer, "count": len(paths)}))
        return paths

    @property
    def _is_linux(self) -> bool:
        return self.platform.startswith("linux")

    @property
    def _is_macos(self) -> bool:
        return self.platform == "darwin"

    @property
    def _is_windows(self) -> bool:
        return self.platform.startswith("win")

    def _host_file(self, base: Path) -> Iterable[str]:
        candidate = base / "hosts" / f"{self.hostname}{_FRAGMENT_SUFFIX}"
        if candidate.is_file():
            yield str(candidate)

    def _linux(self, layer: str) -> Iterable[str]:
        etc_root = Path(self.env.get("LIB_TYPED_CONFIG_ETC", "/etc"))
        if layer == "app":
            yield from _collect_layer(etc_root / self.slug, self.file_name)
        elif layer == "host":
            yield from self._host_file(etc_root / self.slug)
        elif layer == "user":
            xdg = self.env.get("XDG_CONFIG_HOME")
            base = Path(xdg) if xdg else Path.home() / ".config"
            yield from _collect_layer(base / self.slug, self.file_name)

    def _macos(self, layer: str) -> Iterable[str]:
        default_root = Path("/Library/Application Support")
        base_root = Path(self.env.get("LIB_TYPED_CONFIG_MAC_APP_ROOT", default_root)) / self.vendor / self.application
        if layer == "app":
            yield from _collect_layer(base_root, self.file_name)
        elif layer == "host":
            yield from self._host_file(base_root)
        elif layer == "user":
            home_default = Path.home() / "Library/Application Support"
            home_root = Path(self.env.get("LIB_TYPED_CONFIG_MAC_HOME_ROOT", home_default)) / self.vendor / self.application
            yield from _collect_layer(home_root, self.file_name)

    def _windows(self, layer: str) -> Iterable[str]:
        program_data = Path(
            self.env.get("LIB_TYPED_CONFIG_PROGRAMDATA", self.env.get("ProgramData", r"C:\\ProgramData"))
        )
        appdata = Path(
            self.env.get("LIB_TYPED_CONFIG_APPDATA", self.env.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        )
        local = Path(
            self.env.get(
                "LIB_TYPED_CONFIG_LOCALAPPDATA", self.env.get("LOCALAPPDATA", Path.home() / "AppData" / "Local")
            )
        )
        base = program_data / self.vendor / self.application
        if layer == "app":
            yield from _collect_layer(base, self.file_name)
        elif layer == "host":
            yield from self._host_file(base)
        elif layer == "user":
            user_base = appdata / self.vendor / self.application
            if not user_base.exists():
                user_base = local / self.vendor / self.application
            yield from _collect_layer(user_base, self.file_name)


def _collect_layer(base: Path, file_name: str) -> Iterable[str]:
    """Yield ``base/<file_name>`` then ``base/config.d/*.conf`` in name order.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> (root / "config.d").mkdir()
    >>> _ = (root / "config.conf").write_text("a=1\\n", encoding="utf-8")
    >>> _ = (root / "config.d" / "20-late.conf").write_text("a=3\\n", encoding="utf-8")
    >>> _ = (root / "config.d" / "10-early.conf").write_text("a=2\\n", encoding="utf-8")
    >>> _ = (root / "config.d" / "notes.txt").write_text("ignored", encoding="utf-8")
    >>> [Path(p).name for p in _collect_layer(root, "config.conf")]
    ['config.conf', '10-early.conf', '20-late.conf']
    >>> tmp.cleanup()
    """

    config_file = base / file_name
    if config_file.is_file():
        yield str(config_file)
    config_dir = base / "config.d"
    if config_dir.is_dir():
        for path in sorted(config_dir.iterdir()):
            if path.is_file() and path.suffix.lower() == _FRAGMENT_SUFFIX:
                yield str(path)
