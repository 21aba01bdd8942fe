"""Public package surface of ``lib_typed_config``.

Applications build a :class:`Config` from sources (``Defaults``, ``EnvSource``,
``ConfigText``) in ascending priority, or let :func:`read_config` stack the
conventional layers, then resolve keys through ``config.item(...)``.
"""

from __future__ import annotations

from .adapters.defaults.memory import Defaults
from .adapters.env.default import EnvSource, default_env_prefix, env_binding_name
from .adapters.text.parser import ConfigText, TextEntry, stack_config
from .application import converters, processors, validators
from .application.extract import Cardinality, Item, extract
from .application.ports import Processor, Source, Validator
from .core import LayerLoadError, read_config
from .application.config import Config
from .domain.config import Resolution, SourceRegistry
from .domain.errors import (
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
from .domain.path import KeyPath
from .observability import bind_trace_id, get_logger

__all__ = [
    "Cardinality",
    "CardinalityError",
    "Config",
    "ConfigError",
    "ConfigText",
    "DanglingContinuation",
    "Defaults",
    "EnvSource",
    "ExtractionError",
    "InvalidPathSyntax",
    "Item",
    "KeyPath",
    "LayerLoadError",
    "LoadError",
    "MissingDelimiter",
    "NotFound",
    "ProcessingError",
    "Processor",
    "ReadError",
    "Resolution",
    "Source",
    "SourceRegistry",
    "TextEntry",
    "TypeConversionError",
    "ValidationError",
    "Validator",
    "bind_trace_id",
    "converters",
    "default_env_prefix",
    "env_binding_name",
    "extract",
    "get_logger",
    "processors",
    "read_config",
    "stack_config",
    "validators",
]
