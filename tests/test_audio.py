"""Tests for audio length lookup."""

import pytest

from suimerger.audio import get_audio_length
from suimerger.exceptions import AudioProbeError
from tests.utils import write_silence


class TestGetAudioLength:
    def test_wav_length(self, tmp_path):
        path = write_silence(tmp_path / "theme.wav", seconds=2.5)
        assert get_audio_length(path) == pytest.approx(2.5, abs=0.01)

    def test_accepts_string_path(self, tmp_path):
        path = write_silence(tmp_path / "theme.wav", seconds=1)
        assert get_audio_length(str(path)) == pytest.approx(1.0, abs=0.01)

    def test_missing_file(self, tmp_path):
        with pytest.raises(AudioProbeError) as exc_info:
            get_audio_length(tmp_path / "missing.ogg")
        assert exc_info.value.details["file"].endswith("missing.ogg")

    def test_not_audio(self, tmp_path):
        path = tmp_path / "notes.ogg"
        path.write_text("not audio at all", encoding="utf-8")
        with pytest.raises(AudioProbeError, match="Not a recognized audio file"):
            get_audio_length(path)
