"""Public configuration object.

:class:`Config` is the domain :class:`SourceRegistry` plus the entry points
into the extraction pipeline. It lives in the application ring so the domain
never imports the pipeline.
"""

from __future__ import annotations

from typing import Any

from ..domain.config import SourceRegistry
from ..domain.path import KeyPath, as_key_path
from .extract import Item, extract


class Config(SourceRegistry):
    """Source registry with typed extraction.

    Examples
    --------
    >>> from lib_typed_config.adapters.defaults.memory import Defaults
    >>> config = Config([Defaults({"port": "8080"}, name="base")])
    >>> config.item("port").value(int), config.origin("port")
    (8080, 'base')
    >>> config
    Config([base])
    """

    def item(self, path: KeyPath | str) -> Item:
        """Start a fluent extraction pipeline for *path*.

        >>> from lib_typed_config.adapters.defaults.memory import Defaults
        >>> Config([Defaults({"tags": "a,b"})]).item("tags").explode(",").values()
        ['a', 'b']
        """

        return Item(self, as_key_path(path))

    def extract(self, path: KeyPath | str, **options: Any) -> Any:
        """Shortcut for :func:`lib_typed_config.application.extract.extract`."""

        return extract(self, path, **options)
