"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from suimerger.config import SuiMergerSettings, reset_settings, set_settings
from suimerger.exceptions import AudioProbeError


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test with default settings and no SUIMERGER_ environment."""
    for var in [k for k in os.environ if k.startswith("SUIMERGER_")]:
        monkeypatch.delenv(var)

    reset_settings()
    set_settings(SuiMergerSettings())
    yield
    reset_settings()


@pytest.fixture
def make_probe() -> Callable[[dict[Path, float]], Callable[[Path], float]]:
    """Build a fake audio probe from a mapping of file path to length.

    The returned probe records every path it was asked about in ``calls``.
    """

    def factory(lengths: dict[Path, float]) -> Callable[[Path], float]:
        calls: list[Path] = []

        def probe(path: Path) -> float:
            calls.append(Path(path))
            try:
                return lengths[Path(path)]
            except KeyError:
                raise AudioProbeError(message=f"Could not read audio file: {path}")

        probe.calls = calls  # type: ignore[attr-defined]
        return probe

    return factory
