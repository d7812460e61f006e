"""CLI command for detecting the BGM channel of an MG script."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from suimerger.cli.utils.error_handler import handle_cli_error
from suimerger.config import get_settings_for_cli
from suimerger.mg.bgm_channel import count_bgm_music_plays, most_played_channel
from suimerger.mg.merge import iter_script_lines

console = Console()


def detect_bgm_command(
    ctx: typer.Context,
    script: Annotated[
        Path,
        typer.Argument(
            help="MG script to scan for PlayBGM calls",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    bgm_folder: Annotated[
        list[Path] | None,
        typer.Option(
            "--bgm-folder",
            "-b",
            help="Folder with the BGM .ogg files (repeat for several folders)",
        ),
    ] = None,
    music_threshold: Annotated[
        float | None,
        typer.Option(
            "--music-threshold",
            "-t",
            min=0.0,
            help="Minimum length in seconds for a BGM file to count as music",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
        ),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show how often each channel plays music and which one is the BGM channel."""
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    try:
        settings = get_settings_for_cli(
            config_file=config,
            cli_overrides={
                "bgm_folders": bgm_folder or None,
                "music_threshold_seconds": music_threshold,
            },
        )
        tally = count_bgm_music_plays(
            iter_script_lines(script),
            settings.bgm_folders,
            settings.music_threshold_seconds,
        )
    except Exception as e:
        handle_cli_error(e, verbose=verbose, json_output=json_output)

    channel = most_played_channel(tally)

    if json_output:
        print(
            json.dumps(
                {
                    "channel": channel,
                    "tally": {str(ch): count for ch, count in sorted(tally.items())},
                },
                indent=2,
            )
        )
        return

    if channel is None:
        console.print(
            "[yellow]No music found; check --bgm-folder and --music-threshold[/yellow]"
        )
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Channel", justify="right")
    table.add_column("Music Plays", justify="right")
    for ch, count in sorted(tally.items()):
        table.add_row(str(ch), str(count))
    console.print(table)
    console.print(f"BGM channel: [bold]{channel}[/bold]")
