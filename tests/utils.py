"""Common test utilities for SuiMerger tests."""

import re
import wave
from pathlib import Path


def strip_ansi_codes(text: str) -> str:
    """Strip ANSI escape sequences from CLI output."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def ps3_section(*instructions: str) -> list[str]:
    """Return the lines of a PS3 section as written into a merged script."""
    return [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<PS3_SECTION>  <!-- ~~~~~~~~~~~~~~~~START~~~~~~~~~~~~~~~~ -->",
        *instructions,
        "</PS3_SECTION> <!-- ~~~~~~~~~~~~~~~~~END~~~~~~~~~~~~~~~~~ -->",
    ]


def output_line(text: str) -> str:
    """Return an indented MG dialogue line."""
    return f'\tOutputLine(NULL, "{text}", NULL, "{text}", Line_Normal);'


def write_silence(path: Path, seconds: float, framerate: int = 1000) -> Path:
    """Write a silent mono 16-bit WAV file of the given length."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as f:
        f.setnchannels(1)
        f.setsampwidth(2)
        f.setframerate(framerate)
        f.writeframes(b"\x00\x00" * int(seconds * framerate))
    return path
