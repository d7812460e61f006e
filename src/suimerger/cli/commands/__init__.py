"""SuiMerger CLI commands."""

from __future__ import annotations

from suimerger.cli.commands.detect import detect_bgm_command
from suimerger.cli.commands.dialogues import dialogues_command
from suimerger.cli.commands.merge import merge_bgm_command

__all__ = [
    "detect_bgm_command",
    "dialogues_command",
    "merge_bgm_command",
]
