"""Turn one PS3 XML chunk into the MG instruction it should contribute."""

from __future__ import annotations

from suimerger.config import get_logger
from suimerger.exceptions import ParseError
from suimerger.mg.instructions import FadeOutBGM, Instruction, PlayBGM
from suimerger.ps3.reader import PS3InstructionReader

logger = get_logger(__name__)

# Channel the generated PS3 BGM instructions are written on
PS3_BGM_CHANNEL = 2


def parse_chunk_instructions(
    ps3_chunk: str, channel: int = PS3_BGM_CHANNEL
) -> list[Instruction]:
    """Build PlayBGM/FadeOutBGM instructions for the BGM cues of a chunk.

    Instruction types other than BGM_PLAY and BGM_FADE are ignored.

    Raises:
        ParseError: If a cue lacks its file name or has a non-integer duration
        MalformedInstructionStreamError: If the chunk has unexpected content
    """
    instructions: list[Instruction] = []

    with PS3InstructionReader.from_string(ps3_chunk) as reader:
        while reader.advance_to_next_instruction():
            instruction_type = reader.get_attribute("type")
            if instruction_type == "BGM_PLAY":
                bgm_file_name = reader.get_attribute("bgm_file")
                if bgm_file_name is None:
                    raise ParseError(
                        message="BGM_PLAY instruction has no bgm_file",
                        details={"xml": reader.outer_xml()},
                    )
                instructions.append(PlayBGM(channel, bgm_file_name, from_ps3=True))
            elif instruction_type == "BGM_FADE":
                duration = reader.get_attribute("duration")
                try:
                    ticks = int(duration)  # type: ignore[arg-type]
                except (TypeError, ValueError) as e:
                    raise ParseError(
                        message=f"BGM_FADE duration is not an integer: {duration!r}",
                        details={"xml": reader.outer_xml()},
                    ) from e
                instructions.append(
                    FadeOutBGM.from_ps3_duration(channel, ticks, from_ps3=True)
                )

    return instructions


def select_chunk_instruction(
    instructions: list[Instruction],
) -> PlayBGM | FadeOutBGM | None:
    """Pick the one instruction a chunk contributes.

    A chunk may hold several transient cues; only the final state matters.
    The last PlayBGM wins, otherwise the last FadeOutBGM.
    """
    last_play: PlayBGM | None = None
    last_fade: FadeOutBGM | None = None

    for instruction in instructions:
        if isinstance(instruction, PlayBGM):
            logger.debug("Found BGM play", line=instruction.to_script_text())
            last_play = instruction
        elif isinstance(instruction, FadeOutBGM):
            logger.debug("Found BGM fade", line=instruction.to_script_text())
            last_fade = instruction

    return last_play if last_play is not None else last_fade


def generate_chunk_instruction(
    ps3_chunk: str, channel: int = PS3_BGM_CHANNEL
) -> PlayBGM | FadeOutBGM | None:
    """Parse a chunk and return the instruction to merge, if any."""
    selected = select_chunk_instruction(parse_chunk_instructions(ps3_chunk, channel))
    if selected is not None:
        logger.debug("Selected chunk instruction", line=selected.to_script_text())
    return selected
