"""Shared fixtures for layered search-directory scenarios.

``create_layered_sandbox`` redirects every platform root into ``tmp_path`` via
the ``LIB_TYPED_CONFIG_*`` overrides so tests never read real system files.
"""

from __future__ import annotations

import socket
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest


@dataclass
class LayeredSandbox:
    vendor: str
    app: str
    slug: str
    platform: str
    roots: dict[str, Path]
    env: dict[str, str]
    start_dir: Path
    hostname: str = field(default_factory=socket.gethostname)

    def write(self, layer: str, relative: str, *, content: str) -> Path:
        """Write *content* below the root of *layer* (``app``, ``host``, ``user``, ``project``)."""

        path = self.roots[layer] / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def write_host(self, content: str) -> Path:
        return self.write("host", f"{self.hostname}.conf", content=content)

    def apply_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key, value in self.env.items():
            monkeypatch.setenv(key, value)


def create_layered_sandbox(
    tmp_path: Path,
    *,
    vendor: str,
    app: str,
    slug: str,
    platform: str | None = None,
) -> LayeredSandbox:
    platform = platform or sys.platform
    env: dict[str, str] = {}
    if platform.startswith("win"):
        program_data = tmp_path / "ProgramData"
        appdata = tmp_path / "AppData" / "Roaming"
        env["LIB_TYPED_CONFIG_PROGRAMDATA"] = str(program_data)
        env["LIB_TYPED_CONFIG_APPDATA"] = str(appdata)
        env["LIB_TYPED_CONFIG_LOCALAPPDATA"] = str(tmp_path / "AppData" / "Local")
        app_dir = program_data / vendor / app
        user_dir = appdata / vendor / app
    elif platform == "darwin":
        app_support = tmp_path / "Library" / "Application Support"
        home_support = tmp_path / "HomeLibrary" / "Application Support"
        env["LIB_TYPED_CONFIG_MAC_APP_ROOT"] = str(app_support)
        env["LIB_TYPED_CONFIG_MAC_HOME_ROOT"] = str(home_support)
        app_dir = app_support / vendor / app
        user_dir = home_support / vendor / app
    else:
        env["LIB_TYPED_CONFIG_ETC"] = str(tmp_path / "etc")
        env["XDG_CONFIG_HOME"] = str(tmp_path / "xdg")
        app_dir = tmp_path / "etc" / slug
        user_dir = tmp_path / "xdg" / slug
    start_dir = tmp_path / "project"
    start_dir.mkdir(parents=True, exist_ok=True)
    roots = {"app": app_dir, "host": app_dir / "hosts", "user": user_dir, "project": start_dir}
    return LayeredSandbox(vendor, app, slug, platform, roots, env, start_dir)


__all__ = ["LayeredSandbox", "create_layered_sandbox"]
