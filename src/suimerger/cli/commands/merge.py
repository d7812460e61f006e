"""CLI command for inserting PS3 BGM into a merged MG script."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from suimerger.cli.utils.error_handler import handle_cli_error
from suimerger.config import get_settings_for_cli
from suimerger.mg.merge import insert_bgm_using_ps3_xml

console = Console()


def merge_bgm_command(
    ctx: typer.Context,
    merged_script: Annotated[
        Path,
        typer.Argument(
            help="Merged MG script containing PS3 XML sections",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path,
        typer.Argument(help="Path of the playable script to write", dir_okay=False),
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
    """Insert the PS3 BGM cues of a merged script into a playable MG script.

    The BGM channel is detected from the lengths of the files the script
    plays. If no music can be found, channel 2 is used.
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    try:
        settings = get_settings_for_cli(
            config_file=config,
            cli_overrides={
                "bgm_folders": bgm_folder or None,
                "music_threshold_seconds": music_threshold,
            },
        )
        result = insert_bgm_using_ps3_xml(merged_script, output, settings)
    except Exception as e:
        handle_cli_error(e, verbose=verbose, json_output=json_output)

    if json_output:
        print(
            json.dumps(
                {
                    "success": True,
                    "output": str(result.output_path),
                    "bgm_channel": result.bgm_channel,
                    "channel_detected": result.channel_detected,
                    "lines_written": result.lines_written,
                },
                indent=2,
            )
        )
        return

    if not result.channel_detected:
        console.print(
            f"[yellow]Could not detect the BGM channel of {merged_script}; "
            f"used channel {result.bgm_channel}[/yellow]"
        )
    else:
        console.print(f"Detected channel [bold]{result.bgm_channel}[/bold] as BGM")
    console.print(
        f"[green]✓[/green] Wrote {result.lines_written} lines to {result.output_path}"
    )
