"""Detect which PlayBGM channel an MG script uses for music.

Scripts differ in which channel carries the background music. Sound effect
channels replay many short clips while the music channel plays a few long
tracks, so every PlayBGM whose file is at least ``music_threshold_seconds``
long counts as one vote for its channel, and the channel with the most votes
wins.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Callable, Iterable
from pathlib import Path

from suimerger.audio import get_audio_length
from suimerger.config import get_logger
from suimerger.exceptions import AudioProbeError

logger = get_logger(__name__)

PLAY_BGM_FILE_NAME = re.compile(r'PlayBGM\(\s*(\d+)\s*,\s*"([^"]*)"')

AudioProbe = Callable[[Path], float]


def find_audio_length(
    file_name: str,
    search_folders: Iterable[Path | str],
    probe: AudioProbe = get_audio_length,
) -> float | None:
    """Probe each folder in order for ``<file_name>.ogg``.

    Scripts name BGM files without extension, so ``.ogg`` is appended.

    Returns:
        Length in seconds from the first folder that has a readable file,
        or None if no folder does
    """
    for folder in search_folders:
        candidate = Path(folder) / f"{file_name}.ogg"
        try:
            return probe(candidate)
        except AudioProbeError:
            continue
    return None


def try_get_bgm_music_channel(
    line: str,
    search_folders: Iterable[Path | str],
    bgm_length_threshold_seconds: float,
    probe: AudioProbe = get_audio_length,
) -> int | None:
    """Return the channel of a PlayBGM line if it plays music.

    None is returned when the line has no PlayBGM call, when the file can't
    be found in any search folder, or when it is shorter than the threshold.
    """
    match = PLAY_BGM_FILE_NAME.search(line)
    if not match:
        return None

    channel = int(match.group(1))
    audio_file_name = match.group(2)

    audio_length = find_audio_length(audio_file_name, search_folders, probe)
    if audio_length is None:
        logger.debug("BGM file not found", file=audio_file_name, channel=channel)
        return None

    is_music = audio_length >= bgm_length_threshold_seconds
    logger.info(
        "Classified BGM file",
        file=audio_file_name,
        channel=channel,
        seconds=audio_length,
        type="Music" if is_music else "Not Music",
    )
    return channel if is_music else None


def count_bgm_music_plays(
    lines: Iterable[str],
    search_folders: Iterable[Path | str],
    bgm_length_threshold_seconds: float,
    probe: AudioProbe = get_audio_length,
) -> Counter[int]:
    """Count, per channel, the PlayBGM calls that play music."""
    folders = list(search_folders)
    channel_counter: Counter[int] = Counter()
    for line in lines:
        channel = try_get_bgm_music_channel(
            line, folders, bgm_length_threshold_seconds, probe
        )
        if channel is not None:
            channel_counter[channel] += 1
    return channel_counter


def most_played_channel(channel_counter: Counter[int]) -> int | None:
    """Return the channel with the most plays; ties go to the lowest channel."""
    if not channel_counter:
        return None
    return min(channel_counter, key=lambda ch: (-channel_counter[ch], ch))


def detect_bgm_channel(
    lines: Iterable[str],
    search_folders: Iterable[Path | str],
    bgm_length_threshold_seconds: float,
    probe: AudioProbe = get_audio_length,
) -> int | None:
    """Guess the music channel of a script.

    Args:
        lines: Script lines
        search_folders: Folders holding the ``.ogg`` BGM files
        bgm_length_threshold_seconds: Minimum length for a file to be music
        probe: Returns a file's length in seconds, raising AudioProbeError

    Returns:
        The channel with the most music plays, or None if no music was found
    """
    channel_counter = count_bgm_music_plays(
        lines, search_folders, bgm_length_threshold_seconds, probe
    )
    for channel, count in sorted(channel_counter.items()):
        logger.info("BGM channel tally", channel=channel, count=count)
    return most_played_channel(channel_counter)
