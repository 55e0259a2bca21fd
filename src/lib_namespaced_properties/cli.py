"""CLI adapter for ``lib_namespaced_properties`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect and edit persisted property stores without writing
Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_show` – renders ``key=value`` listings per namespace.
* :func:`cli_get` / :func:`cli_set` – typed reads and writes of one key.
* :func:`cli_convert` – rewrites a document in another format.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer and is the host program that embeds a
:class:`~lib_namespaced_properties.application.store.PropertyStore`. Every
command builds its own store; nothing is shared between invocations.
``lib_cli_exit_tools`` centralises the exit code strategy.
"""

from __future__ import annotations

import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.store import PropertyStore
from .core import DEFAULT_ENCODING, document_for, load_store, save_store
from .domain.codec import DecodeFailure, ValueType, decode, encode

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

TYPE_CHOICES: Final[tuple[str, ...]] = tuple(value_type.value for value_type in ValueType)
_MISSING: Final[object] = object()

_DOCUMENT_PATH = click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True)


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` when metadata is unavailable."""

    try:
        return metadata.version("lib_namespaced_properties")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Namespaced, type-checked property store",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_namespaced_properties",
    message="lib_namespaced_properties version %(version)s",
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
        meta = metadata.metadata("lib_namespaced_properties")
    except metadata.PackageNotFoundError:
        click.echo("lib_namespaced_properties (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_namespaced_properties')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("show", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("document", type=_DOCUMENT_PATH)
@click.option("--namespace", "namespaces", multiple=True, help="Only show this namespace (repeatable)")
@click.option("--separator", default="\n", show_default=False, help="Text placed after each key=value entry")
@click.option("--encoding", default=DEFAULT_ENCODING, show_default=True, help="Document character encoding")
def cli_show(document: Path, namespaces: Sequence[str], separator: str, encoding: str) -> None:
    """List every ``key=value`` entry of DOCUMENT grouped by namespace.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> runner = CliRunner()
    >>> with runner.isolated_filesystem():
    ...     store = PropertyStore()
    ...     store.claim("NS1").set("INT", 1322)
    ...     save_store(store, "store.json")
    ...     result = runner.invoke(cli, ["show", "store.json"])
    >>> result.output
    '[NS1]\\nINT=1322\\n'
    """

    store = load_store(document, encoding=encoding)
    selected = sorted(namespaces) if namespaces else sorted(store.namespaces())
    for namespace in selected:
        if namespace not in store:
            raise click.ClickException(f"Namespace {namespace} not found in {document}")
        view = store.claim(namespace)
        click.echo(f"[{namespace}]")
        click.echo(view.describe(separator), nl=False)


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("document", type=_DOCUMENT_PATH)
@click.argument("namespace")
@click.argument("key")
@click.option("--type", "type_", type=click.Choice(TYPE_CHOICES), default="string", show_default=True)
@click.option("--default", default=None, help="Printed when the key is missing or has another type")
@click.option("--encoding", default=DEFAULT_ENCODING, show_default=True, help="Document character encoding")
def cli_get(
    document: Path, namespace: str, key: str, type_: str, default: Optional[str], encoding: str
) -> None:
    """Print KEY of NAMESPACE from DOCUMENT decoded as ``--type``."""

    store = load_store(document, encoding=encoding)
    view = store.claim(namespace)
    value = view.get(key, _MISSING, value_type=ValueType(type_))
    if value is _MISSING:
        if default is None:
            raise click.ClickException(f"No {type_} value for {key} in namespace {namespace}")
        click.echo(default)
        return
    click.echo(encode(value))


@cli.command("set", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("document", type=click.Path(path_type=Path, dir_okay=False))
@click.argument("namespace")
@click.argument("key")
@click.argument("value")
@click.option("--type", "type_", type=click.Choice(TYPE_CHOICES), default="string", show_default=True)
@click.option("--comment", default=None, help="Replace the document comment")
@click.option("--encoding", default=DEFAULT_ENCODING, show_default=True, help="Document character encoding")
def cli_set(
    document: Path,
    namespace: str,
    key: str,
    value: str,
    type_: str,
    comment: Optional[str],
    encoding: str,
) -> None:
    """Store VALUE under KEY of NAMESPACE, creating DOCUMENT when missing.

    The previous document comment is kept unless ``--comment`` is given.
    """

    decoded = decode(value, ValueType(type_))
    if isinstance(decoded, DecodeFailure):
        raise click.BadParameter(f"{value!r} is {decoded.reason}", param_hint="VALUE")
    store = PropertyStore()
    previous_comment = None
    if document.exists():
        reader = document_for(document)
        store.restore(reader.load(str(document), encoding=encoding))
        previous_comment = reader.last_comment
    store.claim(namespace).set(key, decoded.value)
    save_store(store, document, comment=comment if comment is not None else previous_comment, encoding=encoding)


@cli.command("convert", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source", type=_DOCUMENT_PATH)
@click.argument("destination", type=click.Path(path_type=Path, dir_okay=False))
@click.option("--comment", default=None, help="Comment written to DESTINATION")
@click.option("--encoding", default=DEFAULT_ENCODING, show_default=True, help="Encoding of both documents")
def cli_convert(source: Path, destination: Path, comment: Optional[str], encoding: str) -> None:
    """Rewrite SOURCE as DESTINATION; formats follow the file suffixes."""

    save_store(load_store(source, encoding=encoding), destination, comment=comment, encoding=encoding)
    click.echo(str(destination))


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_namespaced_properties",
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
