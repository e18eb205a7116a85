"""Thin CLI wrapper for unattend_iso.

This module provides the command-line interface using Typer.
All business logic is delegated to unattend_iso.resources.service.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from unattend_iso import __version__
from unattend_iso.config import get_settings, print_settings_json
from unattend_iso.diagnostics import Diagnostics

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

app = typer.Typer(
    name="unattend-iso",
    help="Unattend ISO - build and track unattended-install answer file ISOs",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"unattend-iso version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Unattend ISO - build and track unattended-install answer file ISOs."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _open_session_factory() -> "sessionmaker[Session]":
    from unattend_iso.db import create_all_tables, get_engine, get_session_factory

    engine = get_engine()
    create_all_tables(engine)
    return get_session_factory(engine)


def _print_json(text: str) -> None:
    # soft_wrap keeps long values on one line so the output stays parseable
    console.print(text, soft_wrap=True, markup=False, highlight=False)


def _print_diagnostics(diagnostics: Diagnostics) -> None:
    for d in diagnostics:
        color = "red" if d.severity.value == "error" else "yellow"
        console.print(f"[{color}]{d.summary}:[/{color}] {escape(d.detail)}")


def _print_state(state: dict[str, object] | None) -> None:
    if state is None:
        console.print("  (no tracked state)")
        return
    for key, value in state.items():
        if key == "xml_content" and isinstance(value, str) and len(value) > 60:
            value = value[:57] + "..."
        display = escape(str(value)) if value is not None else "-"
        console.print(f"  {key:<14} {display}")


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        _print_json(print_settings_json(settings))
    else:
        tmp_dir_display = (
            str(settings.tmp_dir) if settings.tmp_dir else "(system default)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print(f"  State store URL:     {settings.db_url}")
        console.print(f"  Temp directory:      {tmp_dir_display}")
        console.print(f"  Volume name:         {settings.volume_name}")
        console.print(f"  Log level:           {settings.log_level}")


@app.command()
def schema(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the resource schema."""
    from unattend_iso.resources.schema import RESOURCE_SCHEMA
    from unattend_iso.resources.service import UNATTEND_ISO_FILE_TYPE

    if json_output:
        output = {"type_name": UNATTEND_ISO_FILE_TYPE, **RESOURCE_SCHEMA.to_dict()}
        _print_json(json.dumps(output, indent=2))
        return

    console.print(
        f"[bold]{UNATTEND_ISO_FILE_TYPE}[/bold]: {RESOURCE_SCHEMA.description}"
    )
    for attr in RESOURCE_SCHEMA.attributes:
        flags = [
            flag
            for flag, enabled in (
                ("required", attr.required),
                ("optional", attr.optional),
                ("computed", attr.computed),
            )
            if enabled
        ]
        console.print(f"  [green]{attr.name}[/green] ({', '.join(flags)})")
        console.print(f"    {attr.description}")


@app.command("apply")
def apply_cmd(
    path: Annotated[Path, typer.Argument(help="Declaration file (YAML or JSON)")],
    address: Annotated[
        str | None,
        typer.Option("--address", "-a", help="Only apply this resource address"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Create or update the resources declared in a file."""
    from unattend_iso.db import get_session
    from unattend_iso.resources.io import load_declarations
    from unattend_iso.resources.service import apply

    try:
        declarations = load_declarations(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Cannot load declarations: {e}[/red]")
        raise typer.Exit(code=1) from None

    if address is not None:
        if address not in declarations:
            console.print(f"[red]Address not declared in {path}: {address}[/red]")
            raise typer.Exit(code=1)
        declarations = {address: declarations[address]}

    factory = _open_session_factory()
    results = []
    with get_session(factory) as session:
        for addr, attributes in declarations.items():
            results.append(apply(session, addr, attributes))

    if json_output:
        _print_json(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        for r in results:
            status = "[green]ok[/green]" if r.success else "[red]failed[/red]"
            console.print(f"[bold]{r.address}[/bold] {r.operation.value}: {status}")
            _print_diagnostics(r.diagnostics)
            if r.success:
                _print_state(r.state)

    if not all(r.success for r in results):
        raise typer.Exit(code=1)


@app.command("list")
def list_cmd(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List tracked resources."""
    from unattend_iso.resources.service import list_tracked

    factory = _open_session_factory()
    with factory() as session:
        records = list_tracked(session)

        if json_output:
            output = [{"address": r.address, **r.to_state()} for r in records]
            _print_json(json.dumps(output, indent=2))
            return

        if not records:
            console.print("[yellow]No tracked resources[/yellow]")
            return

        console.print(f"[bold]Found {len(records)} resource(s):[/bold]")
        for r in records:
            console.print(f"  [green]{r.address}[/green]  {r.result_path or '-'}")


@app.command()
def show(
    address: Annotated[str, typer.Argument(help="Resource address")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show tracked state of a resource."""
    from unattend_iso.resources.service import ResourceNotFoundError, get_tracked

    factory = _open_session_factory()
    with factory() as session:
        try:
            record = get_tracked(session, address)
        except ResourceNotFoundError:
            console.print(f"[red]Resource not found: {address}[/red]")
            raise typer.Exit(code=1) from None

        if json_output:
            _print_json(
                json.dumps({"address": address, **record.to_state()}, indent=2)
            )
        else:
            console.print(f"[bold]{address}[/bold] ({record.type_name})")
            _print_state(record.to_state())


@app.command()
def refresh(
    address: Annotated[str, typer.Argument(help="Resource address")],
) -> None:
    """Re-read tracked state of a resource."""
    from unattend_iso.db import get_session
    from unattend_iso.resources.service import ResourceNotFoundError
    from unattend_iso.resources.service import refresh as refresh_resource

    factory = _open_session_factory()
    try:
        with get_session(factory) as session:
            result = refresh_resource(session, address)
    except ResourceNotFoundError:
        console.print(f"[red]Resource not found: {address}[/red]")
        raise typer.Exit(code=1) from None

    _print_diagnostics(result.diagnostics)
    if not result.success:
        raise typer.Exit(code=1)
    _print_state(result.state)


@app.command("import")
def import_cmd(
    address: Annotated[str, typer.Argument(help="Resource address")],
    identifier: Annotated[str, typer.Argument(help="Existing resource id")],
) -> None:
    """Bring an existing resource under management by id."""
    from unattend_iso.db import get_session
    from unattend_iso.resources.service import ResourceExistsError, import_resource

    factory = _open_session_factory()
    try:
        with get_session(factory) as session:
            result = import_resource(session, address, identifier)
    except ResourceExistsError:
        console.print(f"[red]Resource already managed: {address}[/red]")
        raise typer.Exit(code=1) from None

    _print_diagnostics(result.diagnostics)
    if not result.success:
        raise typer.Exit(code=1)
    console.print(f"[green]Imported {identifier} as {address}[/green]")


@app.command()
def destroy(
    address: Annotated[str, typer.Argument(help="Resource address")],
) -> None:
    """Stop tracking a resource. The image file is left on disk."""
    from unattend_iso.db import get_session
    from unattend_iso.resources.service import ResourceNotFoundError
    from unattend_iso.resources.service import destroy as destroy_resource

    factory = _open_session_factory()
    try:
        with get_session(factory) as session:
            result = destroy_resource(session, address)
    except ResourceNotFoundError:
        console.print(f"[red]Resource not found: {address}[/red]")
        raise typer.Exit(code=1) from None

    _print_diagnostics(result.diagnostics)
    if not result.success:
        raise typer.Exit(code=1)
    console.print(f"[green]Destroyed {address}[/green]")


if __name__ == "__main__":
    app()
