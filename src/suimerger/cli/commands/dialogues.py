"""CLI command for listing the dialogue instructions of a PS3 XML file."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from suimerger.cli.utils.error_handler import handle_cli_error
from suimerger.ps3.dialogue import extract_dialogues_from_file

console = Console()


def dialogues_command(
    ctx: typer.Context,
    ps3_xml: Annotated[
        Path,
        typer.Argument(
            help="PS3 XML script export",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Show at most this many lines"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List the DIALOGUE instructions of a PS3 XML file."""
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    try:
        dialogues = extract_dialogues_from_file(ps3_xml)
    except Exception as e:
        handle_cli_error(e, verbose=verbose, json_output=json_output)

    shown = dialogues[:limit] if limit else dialogues

    if json_output:
        print(json.dumps([asdict(d) for d in shown], ensure_ascii=False, indent=2))
        return

    if not dialogues:
        console.print("[yellow]No DIALOGUE instructions found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Num", justify="right")
    table.add_column("Type", justify="right")
    table.add_column("Preceding", justify="right")
    table.add_column("Data")
    for dialogue in shown:
        table.add_row(
            str(dialogue.num),
            str(dialogue.dlgtype),
            str(len(dialogue.previous_xml)),
            dialogue.data,
        )
    console.print(table)
    if len(shown) < len(dialogues):
        console.print(f"[dim]... {len(dialogues) - len(shown)} more[/dim]")
