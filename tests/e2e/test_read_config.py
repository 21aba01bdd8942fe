from __future__ import annotations

import logging
from pathlib import Path

import pytest

from lib_typed_config import LayerLoadError, read_config
from tests.support import LayeredSandbox, create_layered_sandbox

VENDOR = "Acme"
APP = "ConfigKit"
SLUG = "config-kit"


@pytest.fixture()
def sandbox(tmp_path: Path, monkeypatch) -> LayeredSandbox:
    sandbox = create_layered_sandbox(tmp_path, vendor=VENDOR, app=APP, slug=SLUG)
    sandbox.apply_env(monkeypatch)
    return sandbox


def test_read_config_precedence(sandbox: LayeredSandbox, monkeypatch) -> None:
    sandbox.write("app", "config.conf", content="[service]\ntimeout=5\nendpoint=http://app\n")
    sandbox.write("app", "config.d/01-extra.conf", content="[service]\nretries=1\n")
    sandbox.write_host("[service]\ntimeout=10\n")
    sandbox.write("user", "config.conf", content="[service]\nendpoint=https://api\n")
    sandbox.write("project", "config.conf", content="[service]\nmode=local\n")
    monkeypatch.setenv("CONFIG_KIT_SERVICE__TIMEOUT", "20")

    config = read_config(
        vendor=VENDOR,
        app=APP,
        slug=SLUG,
        defaults={"service.timeout": "1", "service.mode": "prod", "service.tags": ["a", "b"]},
        env_prefix="CONFIG_KIT",
        start_dir=sandbox.start_dir,
    )

    assert config.item("service.timeout").value(int) == 20
    assert config.origin("service.timeout") == "env"
    assert config.item("service.retries").value(int) == 1
    assert config.item("service.endpoint").value() == "https://api"
    assert config.item("service.mode").value() == "local"
    assert config.item("service.tags").values() == ["a", "b"]
    assert config.origin("service.tags") == "defaults"


def test_host_layer_overrides_app(sandbox: LayeredSandbox) -> None:
    sandbox.write("app", "config.conf", content="level=app\n")
    sandbox.write_host("level=host\n")
    config = read_config(vendor=VENDOR, app=APP, slug=SLUG)
    assert config.get("level") == ("host",)


def test_config_d_fragments_override_main_file(sandbox: LayeredSandbox) -> None:
    sandbox.write("user", "config.conf", content="a=main\nb=main\n")
    sandbox.write("user", "config.d/10-a.conf", content="a=fragment\n")
    config = read_config(vendor=VENDOR, app=APP, slug=SLUG)
    assert config.get("a") == ("fragment",)
    assert config.get("b") == ("main",)


def test_explicit_env_binding_wins_over_prefix(sandbox: LayeredSandbox, monkeypatch) -> None:
    monkeypatch.setenv("CONFIG_KIT_PORT", "1")
    monkeypatch.setenv("PORT_OVERRIDE", "2")
    config = read_config(
        vendor=VENDOR,
        app=APP,
        slug=SLUG,
        defaults={"port": "0"},
        env={"port": "PORT_OVERRIDE"},
        env_prefix="CONFIG_KIT",
    )
    assert config.item("port").value(int) == 2


def test_unset_variable_falls_through_to_files(sandbox: LayeredSandbox, monkeypatch) -> None:
    monkeypatch.delenv("CONFIG_KIT_NAME", raising=False)
    sandbox.write("app", "config.conf", content="name=from-file\n")
    config = read_config(vendor=VENDOR, app=APP, slug=SLUG, env_prefix="CONFIG_KIT")
    assert config.get("name") == ("from-file",)


def test_no_layers_yields_empty_config(sandbox: LayeredSandbox) -> None:
    config = read_config(vendor=VENDOR, app=APP, slug=SLUG)
    assert len(config) == 0
    assert config.item("anything").try_value() is None


def test_malformed_file_raises_layer_load_error(sandbox: LayeredSandbox) -> None:
    path = sandbox.write("user", "config.conf", content="a=1\n\n|dangling\n")
    with pytest.raises(LayerLoadError) as excinfo:
        read_config(vendor=VENDOR, app=APP, slug=SLUG)
    assert excinfo.value.layer == "user"
    assert excinfo.value.path == str(path)
    assert excinfo.value.error.line == 3


def test_sources_are_logged(sandbox: LayeredSandbox, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_typed_config")
    sandbox.write("app", "config.conf", content="a=1\n")
    read_config(vendor=VENDOR, app=APP, slug=SLUG, defaults={"a": "0"})
    added = [record.context for record in caplog.records if record.getMessage() == "source_added"]
    assert [context["layer"] for context in added] == ["defaults", "app"]
    ready = [record for record in caplog.records if record.getMessage() == "configuration_ready"]
    assert ready and ready[-1].context["sources"] == 2
