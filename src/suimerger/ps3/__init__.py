"""Readers for PS3 script XML exports."""

from __future__ import annotations

from .dialogue import (
    PS3DialogueInstruction,
    extract_dialogues,
    extract_dialogues_from_file,
)
from .reader import PS3InstructionReader

__all__ = [
    "PS3DialogueInstruction",
    "PS3InstructionReader",
    "extract_dialogues",
    "extract_dialogues_from_file",
]
