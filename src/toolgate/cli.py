"""Tool gateway command line interface.

Usage:
    toolgate serve               Start the HTTP gateway
    toolgate tools               List registered tools
    toolgate call NAME           Invoke a tool locally (recorded like HTTP calls)
    toolgate results             List recorded invocations
    toolgate show FILENAME       Print one recorded invocation
"""

from __future__ import annotations

import asyncio
import json
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table
from typer import Argument, Option

from .dispatcher import Dispatcher
from .ledger import Ledger
from .registry import build_registry
from .settings import settings

app = typer.Typer(
    name="toolgate",
    help="Tool Invocation Gateway - named tools behind one JSON endpoint",
    no_args_is_help=True,
)

console = Console()


@app.command()
def serve(
    port: Annotated[int, Option("--port", "-p", help="HTTP port")] = settings.port,
    host: Annotated[str, Option("--host", "-H", help="Bind address")] = settings.host,
) -> None:
    """Start the HTTP gateway."""
    import uvicorn

    from .app import app as fastapi_app

    console.print(f"[cyan]Starting tool gateway on {host}:{port}...[/cyan]")
    uvicorn.run(fastapi_app, host=host, port=port, log_level="info")


@app.command()
def tools(
    json_output: Annotated[bool, Option("--json", "-j", help="JSON output")] = False,
) -> None:
    """List registered tools."""
    definitions = build_registry(settings).list()

    if json_output:
        console.print_json(json.dumps({"tools": [d.model_dump(by_alias=True) for d in definitions]}))
        return

    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required", style="dim")
    for definition in definitions:
        table.add_row(definition.name, definition.description, ", ".join(definition.required) or "-")
    console.print(table)


@app.command()
def call(
    name: Annotated[str, Argument(help="Tool name")],
    args: Annotated[Optional[str], Option("--args", "-a", help="Arguments as a JSON object")] = None,
    json_output: Annotated[bool, Option("--json", "-j", help="Print the full envelope")] = False,
) -> None:
    """Invoke a tool through the dispatcher, exactly as POST /tools would."""
    try:
        parsed = json.loads(args) if args else {}
    except json.JSONDecodeError as exc:
        console.print(f"[red]--args is not valid JSON: {exc}[/red]")
        raise typer.Exit(2) from exc

    dispatcher = Dispatcher(build_registry(settings), Ledger(settings.results_dir))
    outcome = asyncio.run(dispatcher.dispatch({"toolName": name, "args": parsed}))

    if json_output:
        console.print_json(json.dumps(outcome.body, ensure_ascii=False))
    else:
        for block in outcome.body.get("content", []):
            console.print(block.get("text", ""))
        if outcome.record:
            console.print(f"[dim]Recorded as {outcome.record}[/dim]")

    if outcome.status_code != 200:
        raise typer.Exit(1)


@app.command()
def results(
    json_output: Annotated[bool, Option("--json", "-j", help="JSON output")] = False,
) -> None:
    """List recorded invocations, newest first."""
    entries = Ledger(settings.results_dir).list()

    if json_output:
        console.print_json(json.dumps({"results": [e.model_dump() for e in entries]}))
        return

    if not entries:
        console.print("[dim]No recorded invocations.[/dim]")
        return

    table = Table(title=f"Results in {settings.results_dir}")
    table.add_column("File", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    for entry in entries:
        table.add_row(entry.filename, entry.size, entry.modified)
    console.print(table)


@app.command()
def show(filename: Annotated[str, Argument(help="Record filename")]) -> None:
    """Print one recorded invocation."""
    try:
        record = Ledger(settings.results_dir).read(filename)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot read {filename}: {exc}[/red]")
        raise typer.Exit(1) from exc
    console.print_json(json.dumps(record, ensure_ascii=False))


def main_cli() -> None:
    """Main entry point for the CLI."""
    from .logging_setup import configure_logging

    configure_logging()
    app()


if __name__ == "__main__":
    main_cli()
