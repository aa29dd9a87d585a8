"""Pytest configuration and fixtures for the ECLSS Guard test suite."""
import asyncio
import logging
import sys
from pathlib import Path

import pytest
import structlog

# Ensure the src/ package is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from eclss_guard.schemas import TelemetryRecord  # noqa: E402
from eclss_guard.simulator import TelemetrySimulator  # noqa: E402
from eclss_guard.speech.backends import SpeechBackend  # noqa: E402


# ============================================================================
# LOGGING ISOLATION
# ============================================================================

@pytest.fixture(autouse=True)
def reset_logging():
    """Undo global structlog configuration made by a test."""
    level = logging.getLogger().level
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    logging.getLogger().setLevel(level)


# ============================================================================
# TELEMETRY DATA FIXTURES
# ============================================================================

NOMINAL_FIELDS = {
    "co2_ppm": 400.0,
    "o2_percent": 21.0,
    "pressure_kPa": 101.3,
    "water_level_percent": 85.0,
    "humidity_percent": 50.0,
    "scrubber_status": 1,
    "airflow_m_s": 5.0,
    "valve_command_status": 1,
}


@pytest.fixture
def nominal_fields():
    """Field values of the nominal operating point."""
    return dict(NOMINAL_FIELDS)


@pytest.fixture
def make_record():
    """Factory for records that deviate from the nominal cabin only where asked."""
    def _make(timestamp: int = 0, **overrides) -> TelemetryRecord:
        return TelemetryRecord(timestamp=timestamp, **{**NOMINAL_FIELDS, **overrides})
    return _make


@pytest.fixture
def baseline_record(make_record):
    """Record exactly at the nominal operating point."""
    return make_record()


@pytest.fixture
def scrubber_stuck_record(make_record):
    """CO2 high with the valve commanded open and airflow collapsed."""
    return make_record(co2_ppm=1600.0, airflow_m_s=0.5, valve_command_status=1)


@pytest.fixture
def simulator():
    """Noise-free simulator for deterministic profile checks."""
    return TelemetrySimulator(seed=7, noise=False)


# ============================================================================
# SPEECH FIXTURES
# ============================================================================

class FakeSpeech:
    """Records messages instead of speaking them."""

    def __init__(self):
        self.spoken = []
        self.speaking = False

    @property
    def is_speaking(self) -> bool:
        return self.speaking

    def speak(self, text: str):
        self.spoken.append(text)
        return None


class FakeBackend(SpeechBackend):
    """Backend whose playback takes ``delay`` seconds, optionally failing."""

    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.said = []
        self.stops = 0

    async def say(self, text: str) -> None:
        self.said.append(text)
        if self.fail:
            raise RuntimeError("audio device lost")
        await asyncio.sleep(self.delay)

    def stop(self) -> None:
        self.stops += 1


@pytest.fixture
def fake_speech():
    return FakeSpeech()


@pytest.fixture
def fake_backend():
    return FakeBackend()
