"""Data models for lines of a MangaGamer (MG) script."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

# PS3 durations are counted in frames
PS3_TICKS_PER_SECOND = 60.0


class _ScriptLine:
    """Rendering shared by all MG instructions."""

    # The MG engine only recognizes generated instructions when indented
    no_tab: ClassVar[bool] = False

    def instruction(self) -> str:
        """Return the instruction without indentation or newline."""
        raise NotImplementedError

    def to_script_text(self) -> str:
        """Return the line exactly as it is written to the output script."""
        text = self.instruction()
        return text if self.no_tab else f"\t{text}"


@dataclass(frozen=True)
class PlayBGM(_ScriptLine):
    """Start a BGM file on a channel."""

    channel: int
    file_name: str
    from_ps3: bool = False

    def instruction(self) -> str:
        return f'PlayBGM( {self.channel}, "{self.file_name}", 128, 0 );'


@dataclass(frozen=True)
class FadeOutBGM(_ScriptLine):
    """Fade out whatever is playing on a channel."""

    channel: int
    fade_time_ms: int
    from_ps3: bool = False

    @classmethod
    def from_ps3_duration(
        cls, channel: int, duration: int, from_ps3: bool = False
    ) -> FadeOutBGM:
        """Build a fade from a PS3 duration given in 1/60 second ticks."""
        fade_time_ms = round(duration / PS3_TICKS_PER_SECOND * 1000.0)
        return cls(channel=channel, fade_time_ms=fade_time_ms, from_ps3=from_ps3)

    def instruction(self) -> str:
        return f"FadeOutBGM( {self.channel}, {self.fade_time_ms}, FALSE );"


@dataclass(frozen=True)
class GenericInstruction(_ScriptLine):
    """A script line copied through as-is; it keeps its own indentation."""

    text: str
    from_ps3: bool = False

    no_tab: ClassVar[bool] = True

    def instruction(self) -> str:
        return self.text


Instruction = PlayBGM | FadeOutBGM | GenericInstruction
