"""Audio file length lookup."""

from __future__ import annotations

from pathlib import Path

import mutagen

from suimerger.exceptions import AudioProbeError


def get_audio_length(path: Path | str) -> float:
    """Return the length of an audio file in seconds (with fractional part).

    Raises:
        AudioProbeError: If the file is missing, unreadable or not audio
    """
    try:
        audio = mutagen.File(str(path))
    except (mutagen.MutagenError, OSError) as e:
        raise AudioProbeError(
            message=f"Could not read audio file: {path}",
            details={"file": str(path), "reason": str(e)},
        ) from e

    length = getattr(getattr(audio, "info", None), "length", None)
    if length is None:
        raise AudioProbeError(
            message=f"Not a recognized audio file: {path}",
            details={"file": str(path)},
        )
    return float(length)
