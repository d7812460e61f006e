"""Main CLI entry point."""

from __future__ import annotations

import json
import os
from typing import Annotated

import typer
from rich.console import Console

from suimerger import __version__
from suimerger.cli.commands import (
    detect_bgm_command,
    dialogues_command,
    merge_bgm_command,
)
from suimerger.config import get_logger

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="suimerger",
    help="Insert PS3 background music cues into MangaGamer scripts",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="merge-bgm")(merge_bgm_command)
app.command(name="detect-bgm")(detect_bgm_command)
app.command(name="dialogues")(dialogues_command)


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show SuiMerger version."""
    if json_output:
        print(json.dumps({"name": "SuiMerger", "version": __version__}, indent=2))
    else:
        console.print(f"SuiMerger v{__version__}")


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging", envvar="SUIMERGER_DEBUG"),
    ] = False,
) -> None:
    """Configure global options."""
    ctx.obj = {"verbose": verbose or debug}

    if debug or verbose:
        os.environ["SUIMERGER_LOG_LEVEL"] = "DEBUG" if debug else "INFO"
        if debug:
            os.environ["SUIMERGER_DEBUG"] = "true"

        # Force reconfiguration of logging
        from suimerger.config import (
            clear_settings_cache,
            configure_logging,
            get_settings,
        )

        clear_settings_cache()
        configure_logging(get_settings())
        logger.debug("Debug mode enabled" if debug else "Verbose mode enabled")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
