"""MangaGamer script side of the merger: BGM detection and insertion."""

from __future__ import annotations

from .bgm_channel import detect_bgm_channel, try_get_bgm_music_channel
from .chunk_finder import PS3XMLChunkFinder
from .chunk_instructions import generate_chunk_instruction, parse_chunk_instructions
from .instructions import FadeOutBGM, GenericInstruction, Instruction, PlayBGM
from .merge import MergeResult, ScriptMerger, insert_bgm_using_ps3_xml

__all__ = [
    "FadeOutBGM",
    "GenericInstruction",
    "Instruction",
    "MergeResult",
    "PS3XMLChunkFinder",
    "PlayBGM",
    "ScriptMerger",
    "detect_bgm_channel",
    "generate_chunk_instruction",
    "insert_bgm_using_ps3_xml",
    "parse_chunk_instructions",
    "try_get_bgm_music_channel",
]
