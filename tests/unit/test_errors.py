from __future__ import annotations

import pytest

from lib_typed_config.domain.errors import (
    CardinalityError,
    ConfigError,
    DanglingContinuation,
    ExtractionError,
    InvalidPathSyntax,
    LoadError,
    MissingDelimiter,
    NotFound,
    ProcessingError,
    ReadError,
    TypeConversionError,
    ValidationError,
)
from lib_typed_config.domain.path import KeyPath


def test_error_hierarchy() -> None:
    for load_error in (DanglingContinuation, MissingDelimiter, InvalidPathSyntax, ReadError):
        assert issubclass(load_error, LoadError)
    for extraction_error in (TypeConversionError, ProcessingError, ValidationError, CardinalityError):
        assert issubclass(extraction_error, ExtractionError)
    for family in (NotFound, LoadError, ExtractionError):
        assert issubclass(family, ConfigError)


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({}, "bad line"),
        ({"source": "app.conf"}, "bad line (conf:app.conf)"),
        ({"source": "app.conf", "line": 7}, "bad line (conf:app.conf:7)"),
    ],
)
def test_load_error_renders_location(kwargs, expected) -> None:
    error = MissingDelimiter("bad line", **kwargs)
    assert str(error) == expected
    assert error.message == "bad line"
    assert error.line == kwargs.get("line")


def test_type_conversion_error_names_value_key_and_target() -> None:
    error = TypeConversionError(KeyPath.of("server", "port"), "http", "int", reason="invalid literal")
    assert error.path == KeyPath.of("server", "port")
    assert error.raw == "http"
    assert error.target == "int"
    assert str(error) == "Cannot convert value 'http' of key 'server.port' to int: invalid literal"


def test_validation_error_gets_path_attached_later() -> None:
    unbound = ValidationError(42, "<= 10")
    assert unbound.path is None
    bound = unbound.at(KeyPath.of("frobs"))
    assert bound.path == KeyPath.of("frobs")
    assert bound.value == 42
    assert "42" in str(bound) and "<= 10" in str(bound)


def test_processing_error_binds_raw_value() -> None:
    bound = ProcessingError("value must be quoted").at(KeyPath.of("name"), "bare")
    assert bound.raw == "bare"
    assert bound.reason == "value must be quoted"
    assert str(bound) == "Processing value 'bare' of key 'name' failed: value must be quoted"


def test_cardinality_error_message() -> None:
    error = CardinalityError(KeyPath.of("search_path"), "at least 1", 0)
    assert error.actual == 0
    assert error.expected == "at least 1"
    assert str(error) == "Key 'search_path' requires at least 1 value(s), found 0"


def test_extraction_errors_render_value_locations() -> None:
    path = KeyPath.of("port")
    conversion = TypeConversionError(path, "eighty", "int", location="conf:app.conf:2")
    assert conversion.locations == ("conf:app.conf:2",)
    assert str(conversion) == "Cannot convert value 'eighty' of key 'port' to int@'conf:app.conf:2'"
    validation = ValidationError(99999, "<= 65535").at(path, "env:APP_PORT")
    assert validation.location == "env:APP_PORT"
    assert str(validation).endswith("@'env:APP_PORT'")
    processing = ProcessingError("value must be quoted").at(path, "bare", "default from app")
    assert str(processing).endswith("failed: value must be quoted@'default from app'")
    cardinality = CardinalityError(path, "exactly 1", 2, locations=["env:A", "env:B"])
    assert str(cardinality) == "Key 'port' requires exactly 1 value(s), found 2@['env:A', 'env:B']"
