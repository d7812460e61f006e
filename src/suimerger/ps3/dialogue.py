"""Extract DIALOGUE instructions from a standalone PS3 XML document."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

from suimerger.config import get_logger
from suimerger.exceptions import ParseError
from suimerger.ps3.reader import PS3InstructionReader

logger = get_logger(__name__)


@dataclass
class PS3DialogueInstruction:
    """Represents one DIALOGUE instruction of a PS3 script.

    ``previous_xml`` keeps the source XML of every other instruction seen
    since the previous dialogue, so the surrounding cues can be rebuilt later.
    """

    num: int
    dlgtype: int
    data: str
    previous_xml: list[str] = field(default_factory=list)
    xml: str = ""


def _int_attribute(reader: PS3InstructionReader, name: str) -> int:
    value = reader.get_attribute(name)
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ParseError(
            message=f"DIALOGUE attribute '{name}' is not an integer: {value!r}",
            hint="Check the PS3 XML export for truncated or edited attributes",
            details={"attribute": name, "value": value, "xml": reader.outer_xml()},
        ) from e


def _collect_dialogues(reader: PS3InstructionReader) -> list[PS3DialogueInstruction]:
    dialogues: list[PS3DialogueInstruction] = []
    previous_xml: list[str] = []

    while reader.advance_to_next_instruction():
        if reader.get_attribute("type") == "DIALOGUE":
            dialogues.append(
                PS3DialogueInstruction(
                    num=_int_attribute(reader, "num"),
                    dlgtype=_int_attribute(reader, "dlgtype"),
                    data=reader.get_attribute("data") or "",
                    previous_xml=list(previous_xml),
                    xml=reader.outer_xml(),
                )
            )
            previous_xml.clear()
        else:
            previous_xml.append(reader.outer_xml())

    logger.debug("Extracted PS3 dialogues", count=len(dialogues))
    return dialogues


def extract_dialogues(stream: IO[str] | IO[bytes]) -> list[PS3DialogueInstruction]:
    """Collect the DIALOGUE instructions of a PS3 XML stream, in order.

    Args:
        stream: Open stream containing the PS3 XML document

    Returns:
        Dialogue instructions, each carrying the source XML of the
        non-dialogue instructions that preceded it

    Raises:
        ParseError: If ``num`` or ``dlgtype`` is not an integer
        MalformedInstructionStreamError: If the stream has unexpected content
    """
    with PS3InstructionReader(stream) as reader:
        return _collect_dialogues(reader)


def extract_dialogues_from_file(path: Path | str) -> list[PS3DialogueInstruction]:
    """Open a PS3 XML file and extract its DIALOGUE instructions."""
    with PS3InstructionReader.open(path) as reader:
        return _collect_dialogues(reader)
