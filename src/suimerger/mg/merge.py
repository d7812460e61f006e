"""Insert PS3 BGM cues into the original MG script.

The input is the "merged" script produced by the dialogue matcher: the
original MG script with PS3 XML sections written in front of the MG lines
they were matched to. Each PS3 section is reduced to at most one BGM
instruction, which is spliced into the MG lines collected so far. Afterwards
the MG script's own cues on the music channel are removed, since the PS3
cues replace them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from suimerger.audio import get_audio_length
from suimerger.config import SuiMergerSettings, get_logger, get_settings
from suimerger.mg.bgm_channel import AudioProbe, detect_bgm_channel
from suimerger.mg.chunk_finder import PS3XMLChunkFinder
from suimerger.mg.chunk_instructions import generate_chunk_instruction
from suimerger.mg.instructions import (
    FadeOutBGM,
    GenericInstruction,
    Instruction,
    PlayBGM,
)

logger = get_logger(__name__)

# Used when the music channel can't be detected
DEFAULT_BGM_CHANNEL = 2

# Fade everything out before the closing brace of the script
SCRIPT_END_FADE_OUT = "\tFadeOutBGM(0,1000,FALSE);"

PLAY_BGM_CHANNEL = re.compile(r"\tPlayBGM\(\s*(\d+)", re.IGNORECASE)
FADE_OUT_BGM_CHANNEL = re.compile(r"\tFadeOutBGM\(\s*(\d+)", re.IGNORECASE)
DIALOGUE_LINE = re.compile(r"\tOutputLine\(", re.IGNORECASE)


def _line_has_command_on_channel(
    pattern: re.Pattern[str], line: str, channel: int
) -> bool:
    match = pattern.search(line)
    return match is not None and int(match.group(1)) == channel


def line_has_play_bgm_on_channel(line: str, channel: int) -> bool:
    """Check for an indented ``PlayBGM(<channel>`` call.

    Only the start of the call is checked, not the rest of its arguments.
    """
    return _line_has_command_on_channel(PLAY_BGM_CHANNEL, line, channel)


def line_has_fade_out_bgm_on_channel(line: str, channel: int) -> bool:
    """Check for an indented ``FadeOutBGM(<channel>`` call."""
    return _line_has_command_on_channel(FADE_OUT_BGM_CHANNEL, line, channel)


class ScriptMerger:
    """Merge the PS3 BGM cues of one merged script.

    Create one merger per script: the chunk finder and the output list carry
    state from line to line.
    """

    def __init__(self, bgm_channel: int = DEFAULT_BGM_CHANNEL, newline: str = "\n"):
        """Initialize the merger.

        Args:
            bgm_channel: Channel the MG script uses for music
            newline: Line ending used when joining the lines of a PS3 chunk
        """
        self.bgm_channel = bgm_channel
        self.chunk_finder = PS3XMLChunkFinder(newline)
        self.lines_to_output: list[Instruction] = []

    def merge(self, lines: Iterable[str]) -> list[Instruction]:
        """Process every line of a script and return the filtered output."""
        for line in lines:
            self.process_line(line)

        if self.chunk_finder.in_progress:
            logger.warning("Script ended inside a PS3 section, section ignored")

        return self.filtered_output()

    def process_line(self, line: str) -> None:
        """Process one script line (without its line ending)."""
        ps3_chunk = self.chunk_finder.update(line)
        if ps3_chunk is not None:
            self.handle_ps3_chunk(ps3_chunk)

        if not self.chunk_finder.last_line_was_xml():
            if line.strip() == "}":
                self.lines_to_output.append(GenericInstruction(SCRIPT_END_FADE_OUT))
            self.lines_to_output.append(GenericInstruction(line))

    def handle_ps3_chunk(self, ps3_chunk: str) -> None:
        """Splice the instruction generated from a PS3 chunk into the output."""
        instruction = generate_chunk_instruction(ps3_chunk)
        if instruction is not None:
            self.insert_instruction(instruction)

    def insert_instruction(self, instruction: PlayBGM | FadeOutBGM) -> bool:
        """Find a spot for a generated instruction, searching backwards.

        If a dialogue line comes first, the instruction is appended at the
        end so it takes effect before the next dialogue. If a cue of the same
        kind on the music channel comes first, the instruction replaces it
        instead of stacking a second cue next to it.

        Returns:
            False if neither was found and the instruction was dropped
        """
        if isinstance(instruction, PlayBGM):
            same_kind = line_has_play_bgm_on_channel
        else:
            same_kind = line_has_fade_out_bgm_on_channel

        for i in range(len(self.lines_to_output) - 1, -1, -1):
            current_line = self.lines_to_output[i].to_script_text()
            if DIALOGUE_LINE.search(current_line):
                self.lines_to_output.append(instruction)
                return True
            if same_kind(current_line, self.bgm_channel):
                self.lines_to_output[i] = instruction
                return True

        logger.debug(
            "No insertion point for PS3 instruction, dropped",
            line=instruction.to_script_text(),
        )
        return False

    def filtered_output(self) -> list[Instruction]:
        """Drop the MG script's own PlayBGM/FadeOutBGM lines on the music channel."""
        filtered: list[Instruction] = []
        for instruction in self.lines_to_output:
            text = instruction.to_script_text()
            is_music_cue = line_has_play_bgm_on_channel(
                text, self.bgm_channel
            ) or line_has_fade_out_bgm_on_channel(text, self.bgm_channel)
            if is_music_cue and not instruction.from_ps3:
                continue
            filtered.append(instruction)
        return filtered


@dataclass
class MergeResult:
    """Outcome of inserting PS3 BGM into one script."""

    output_path: Path
    bgm_channel: int
    channel_detected: bool
    lines_written: int


def iter_script_lines(path: Path) -> Iterator[str]:
    """Yield the lines of a UTF-8 script without line endings."""
    with path.open(encoding="utf-8-sig") as f:
        for line in f:
            yield line.rstrip("\r\n")


def write_script(
    instructions: Iterable[Instruction], output_path: Path, newline: str = "\n"
) -> int:
    """Write instructions one per line, creating parent directories.

    Returns:
        Number of lines written
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", encoding="utf-8", newline="") as f:
        for instruction in instructions:
            f.write(instruction.to_script_text() + newline)
            count += 1
    return count


def insert_bgm_using_ps3_xml(
    merged_script_path: Path,
    output_path: Path,
    settings: SuiMergerSettings | None = None,
    probe: AudioProbe = get_audio_length,
) -> MergeResult:
    """Write a copy of a merged script with the PS3 BGM cues inserted.

    Args:
        merged_script_path: MG script with embedded PS3 XML sections
        output_path: Where to write the playable script
        settings: Settings providing BGM folders, threshold and newline
        probe: Audio length lookup used for channel detection

    Returns:
        Summary of the merge
    """
    settings = settings or get_settings()
    logger.info("Inserting PS3 BGM into script", script=str(merged_script_path))

    detected = detect_bgm_channel(
        iter_script_lines(merged_script_path),
        settings.bgm_folders,
        settings.music_threshold_seconds,
        probe,
    )

    if detected is not None:
        bgm_channel = detected
        logger.info("Detected BGM channel", channel=bgm_channel)
    else:
        bgm_channel = DEFAULT_BGM_CHANNEL
        logger.warning(
            "Could not detect BGM channel, using default channel",
            script=str(merged_script_path),
            channel=bgm_channel,
        )

    merger = ScriptMerger(bgm_channel=bgm_channel, newline=settings.newline)
    instructions = merger.merge(iter_script_lines(merged_script_path))
    lines_written = write_script(instructions, output_path, settings.newline)

    logger.info("Wrote merged script", output=str(output_path), lines=lines_written)
    return MergeResult(
        output_path=output_path,
        bgm_channel=bgm_channel,
        channel_detected=detected is not None,
        lines_written=lines_written,
    )
