"""CLI adapter for ``lib_typed_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect how a key resolves (which source wins, what the
pipeline produces) and debug configuration files without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_env_prefix` – exposes :func:`default_env_prefix`.
* :func:`cli_parse` – dumps the entries of a configuration file as JSON.
* :func:`cli_get` – resolves one key through an ad-hoc ``Config``.
* :func:`cli_read` – resolves keys through :func:`read_config`.
* :func:`main` – entry point used by the console script.

System Role
-----------
Outermost ring: builds sources and calls the pipeline through the public API
only. Library errors propagate to ``lib_cli_exit_tools`` which maps them to an
exit code and a short message (or a full traceback with ``--traceback``).
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.defaults.memory import Defaults
from .adapters.env.default import EnvSource
from .adapters.text.parser import ConfigText
from .application import converters
from .application.extract import Cardinality
from .core import default_env_prefix as _default_env_prefix
from .core import read_config
from .application.config import Config

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

TYPE_CHOICES: Final[dict[str, Callable[[str], Any]]] = {
    "str": converters.text,
    "int": converters.integer,
    "float": converters.decimal,
    "bool": converters.boolean,
}


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_typed_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Typed, multi-source configuration resolver",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_typed_config",
    message="lib_typed_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_typed_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_typed_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_typed_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Compute the canonical environment prefix for *slug*.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["env-prefix", "config-kit"])
    >>> result.output.strip()
    'CONFIG_KIT'
    """

    click.echo(_default_env_prefix(slug))


@cli.command("parse", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument(
    "file",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON with the given indent")
def cli_parse(file: Path, indent: Optional[int]) -> None:
    """Print every entry of FILE as JSON (key, raw value, line span)."""

    source = ConfigText.from_file(file)
    payload = [
        {"path": str(entry.path), "value": entry.value, "lines": [entry.line_start, entry.line_end]}
        for entry in source.entries()
    ]
    click.echo(json.dumps(payload, indent=indent))


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.option(
    "--file",
    "files",
    multiple=True,
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    help="Configuration file, repeatable; later files override earlier ones",
)
@click.option("--default", "defaults", multiple=True, metavar="KEY=VALUE", help="Default value (repeatable)")
@click.option("--env", "env_bindings", multiple=True, metavar="KEY=VAR", help="Environment binding (repeatable)")
@click.option("--explode", "delimiter", default=None, help="Split values on this delimiter")
@click.option("--trim/--no-trim", default=False, help="Strip whitespace around each value")
@click.option(
    "--type",
    "type_name",
    type=click.Choice(sorted(TYPE_CHOICES)),
    default="str",
    show_default=True,
    help="Target type of each value",
)
@click.option("--min-count", type=click.IntRange(min=0), default=1, show_default=True)
@click.option("--max-count", type=click.IntRange(min=0), default=1, show_default=True)
@click.option("--unbounded", is_flag=True, default=False, help="Accept any number of values above --min-count")
@click.option("--minimum", default=None, help="Smallest accepted value (converted with --type)")
@click.option("--maximum", default=None, help="Largest accepted value (converted with --type)")
def cli_get(
    key: str,
    files: Sequence[Path],
    defaults: Sequence[str],
    env_bindings: Sequence[str],
    delimiter: Optional[str],
    trim: bool,
    type_name: str,
    min_count: int,
    max_count: int,
    unbounded: bool,
    minimum: Optional[str],
    maximum: Optional[str],
) -> None:
    """Resolve KEY from defaults, files, and environment (in that priority).

    Prints ``{"key", "source", "values"}`` as JSON. Extraction errors are
    reported through the shared exit handling.
    """

    config = _build_config(files, defaults, env_bindings)
    convert = TYPE_CHOICES[type_name]
    item = config.item(key)
    if delimiter:
        item = item.explode(delimiter)
    if trim:
        item = item.trim()
    if minimum is not None or maximum is not None:
        item = item.in_range(
            None if minimum is None else _convert_bound(convert, minimum, "--minimum"),
            None if maximum is None else _convert_bound(convert, maximum, "--maximum"),
        )
    count = Cardinality.at_least(min_count) if unbounded else _cardinality(min_count, max_count)
    values = item.values(convert, count=count)
    click.echo(json.dumps({"key": key, "source": config.origin(key), "values": values}))


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--vendor", required=True, help="Vendor namespace (e.g. organisation name)")
@click.option("--app", required=True, help="Application name used for macOS/Windows directories")
@click.option("--slug", required=True, help="Slug used for Linux directories")
@click.option("--file-name", default="config.conf", show_default=True, help="Main file name per layer")
@click.option("--env-prefix", default=None, help="Bind every declared key to PREFIX_SECTION__KEY variables")
@click.option(
    "--start-dir",
    type=click.Path(path_type=Path, exists=True, file_okay=False, dir_okay=True, readable=True),
    default=None,
    help="Project directory whose file is stacked above the user layer",
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON with the given indent")
@click.argument("keys", nargs=-1, required=True)
def cli_read(
    vendor: str,
    app: str,
    slug: str,
    file_name: str,
    env_prefix: Optional[str],
    start_dir: Optional[Path],
    indent: Optional[int],
    keys: Sequence[str],
) -> None:
    """Resolve KEYS through the layered search directories.

    Prints ``{key: {"values": [...], "source": name}}``; unknown keys report
    an empty list and a ``null`` source.
    """

    config = read_config(
        vendor=vendor,
        app=app,
        slug=slug,
        file_name=file_name,
        env_prefix=env_prefix,
        start_dir=start_dir,
    )
    payload = {}
    for key in keys:
        resolution = config.lookup(key)
        payload[key] = {"values": list(resolution.values), "source": resolution.source}
    click.echo(json.dumps(payload, indent=indent))


def _build_config(files: Sequence[Path], defaults: Sequence[str], env_bindings: Sequence[str]) -> Config:
    config = Config()
    if defaults:
        table = Defaults()
        for spec in defaults:
            key, value = _split_pair(spec, "--default")
            table.put(key, value)
        config.add_source(table)
    for file in files:
        config.add_source(ConfigText.from_file(file))
    if env_bindings:
        config.add_source(EnvSource([_split_pair(spec, "--env") for spec in env_bindings]))
    return config


def _split_pair(spec: str, option: str) -> tuple[str, str]:
    key, sep, value = spec.partition("=")
    if not sep or not key.strip():
        raise click.BadParameter(f"Expected KEY=VALUE, got {spec!r}", param_hint=option)
    return key.strip(), value


def _cardinality(min_count: int, max_count: int) -> Cardinality:
    try:
        return Cardinality.between(min_count, max_count)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--max-count") from exc


def _convert_bound(convert: Callable[[str], Any], raw: str, option: str) -> Any:
    try:
        return convert(raw)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint=option) from exc


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_typed_config",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
