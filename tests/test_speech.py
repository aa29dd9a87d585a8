"""Tests for the single-voice speech channel and voice selection."""

import asyncio
from types import SimpleNamespace

import pytest

from eclss_guard.config import SpeechSettings
from eclss_guard.core import SpeechUnavailableError
from eclss_guard.core.metrics import REGISTRY
from eclss_guard.speech import SpeechChannel, SpeechOutcome, build_backend, select_voice
from eclss_guard.speech import backends


class TestSpeechChannel:
    @pytest.mark.asyncio
    async def test_utterance_completes(self, fake_backend):
        """A finished utterance settles as COMPLETED."""
        channel = SpeechChannel(fake_backend)
        utterance = channel.speak("All systems nominal.")
        assert channel.is_speaking
        assert await utterance.wait() is SpeechOutcome.COMPLETED
        assert not channel.is_speaking
        assert fake_backend.said == ["All systems nominal."]

    @pytest.mark.asyncio
    async def test_new_utterance_cancels_current(self, fake_backend):
        """Speaking again interrupts the utterance in flight."""
        channel = SpeechChannel(fake_backend)
        fake_backend.delay = 10.0
        first = channel.speak("first")
        await asyncio.sleep(0)

        fake_backend.delay = 0.0
        second = channel.speak("second")
        assert first.outcome is SpeechOutcome.CANCELED
        assert fake_backend.stops == 1
        assert channel.current is second
        assert await second.wait() is SpeechOutcome.COMPLETED

    @pytest.mark.asyncio
    async def test_backend_failure_settles_errored(self, fake_backend):
        """Backend errors are logged and never raised to the caller."""
        fake_backend.fail = True
        channel = SpeechChannel(fake_backend)
        utterance = channel.speak("boom")
        assert await utterance.wait() is SpeechOutcome.ERRORED
        assert not channel.is_speaking

    @pytest.mark.asyncio
    async def test_cancel(self, fake_backend):
        fake_backend.delay = 10.0
        channel = SpeechChannel(fake_backend)
        utterance = channel.speak("long message")
        channel.cancel()
        assert await utterance.wait() is SpeechOutcome.CANCELED
        assert not channel.is_speaking

    @pytest.mark.asyncio
    async def test_aclose_unwinds_task(self, fake_backend):
        fake_backend.delay = 10.0
        channel = SpeechChannel(fake_backend)
        utterance = channel.speak("closing")
        await channel.aclose()
        assert utterance.outcome is SpeechOutcome.CANCELED
        assert utterance._task.done()

    @pytest.mark.asyncio
    async def test_outcome_settles_once(self, fake_backend):
        """The first outcome wins; later settles are ignored."""
        channel = SpeechChannel(fake_backend)
        utterance = channel.speak("once")
        await utterance.wait()
        assert utterance._settle(SpeechOutcome.ERRORED) is False
        assert utterance.outcome is SpeechOutcome.COMPLETED

    def test_without_backend_is_noop(self):
        """No backend: nothing is spoken and nothing is raised."""
        before = REGISTRY.get_sample_value(
            "eclss_guard_speech_utterances_total", {"outcome": "unavailable"}
        ) or 0.0
        channel = SpeechChannel()
        assert not channel.available
        assert channel.speak("hello") is None
        assert not channel.is_speaking
        after = REGISTRY.get_sample_value(
            "eclss_guard_speech_utterances_total", {"outcome": "unavailable"}
        )
        assert after == before + 1


def _voice(voice_id, name, languages, gender=None):
    return SimpleNamespace(id=voice_id, name=name, languages=languages, gender=gender)


class TestVoiceSelection:
    def test_prefers_female_voice_in_language(self):
        voices = [
            _voice("de", "Anna", [b"\x05de"], "female"),
            _voice("en-m", "David", ["en_US"], "male"),
            _voice("en-f", "Zira", ["en_US"], "Female"),
        ]
        assert select_voice(voices, "en", "female").id == "en-f"

    def test_falls_back_to_language_then_first(self):
        english = _voice("en", "David", [b"\x05en-gb"], "male")
        german = _voice("de", "Anna", ["de_DE"], "female")
        assert select_voice([german, english], "en", "female") is english
        assert select_voice([german], "en", "female") is german
        assert select_voice([], "en") is None

    def test_language_from_voice_id(self):
        """espeak-style ids like gmw/en-us identify the language."""
        voice = _voice("gmw/en-us", "English (America)", [])
        assert backends.voice_speaks(voice, "en")


class TestBuildBackend:
    def test_disabled(self):
        assert build_backend(SpeechSettings(enabled=False)) is None

    def test_unavailable_engine_degrades(self, monkeypatch):
        """An engine that cannot start means no speech, not a crash."""
        def failing(**kwargs):
            raise SpeechUnavailableError("no audio driver", component="speech")

        monkeypatch.setattr(backends, "Pyttsx3Backend", failing)
        assert build_backend(SpeechSettings(enabled=True)) is None
