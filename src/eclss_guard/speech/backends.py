"""
Speech synthesis backends.

The default backend drives the platform TTS engine through pyttsx3, which is
an optional install (``pip install eclss-guard[speech]``). A missing package
or an engine that fails to initialize surfaces as SpeechUnavailableError so
the caller can run without speech.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from ..config.settings import SpeechSettings
from ..core.error_handling import SpeechUnavailableError

logger = logging.getLogger(__name__)


class SpeechBackend(ABC):
    """Something that can speak a string and be interrupted."""

    @abstractmethod
    async def say(self, text: str) -> None:
        """Speak ``text``; return once playback has finished."""

    def stop(self) -> None:
        """Interrupt current playback, if any."""


def _normalize_language(raw: Any) -> str:
    # espeak reports languages as bytes with a leading priority byte, e.g. b"\x05en-gb"
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    return str(raw).strip().lstrip("\x00\x01\x02\x03\x04\x05\x06\x07\x08\t").lower()


def voice_speaks(voice: Any, language: str) -> bool:
    """True if the voice advertises ``language`` (prefix match, e.g. en → en-us)."""
    language = language.lower()
    languages = [_normalize_language(lang) for lang in (getattr(voice, "languages", None) or [])]
    if any(lang.startswith(language) for lang in languages):
        return True
    voice_id = str(getattr(voice, "id", "")).lower()
    return f"/{language}" in voice_id or f"_{language}" in voice_id


def select_voice(voices: Sequence[Any], language: str = "en", preferred: str = "female") -> Optional[Any]:
    """
    Pick a voice: a preferred voice in the language, else any voice in the
    language, else the first voice available.
    """
    if not voices:
        return None
    local = [v for v in voices if voice_speaks(v, language)]
    preferred = preferred.lower()
    for voice in local:
        name = str(getattr(voice, "name", "") or "").lower()
        gender = str(getattr(voice, "gender", "") or "").lower()
        if preferred and (preferred in name or preferred == gender):
            return voice
    if local:
        return local[0]
    return voices[0]


class Pyttsx3Backend(SpeechBackend):
    """Offline TTS via pyttsx3; the blocking run loop executes in a worker thread."""

    def __init__(self, rate_wpm: int = 180, language: str = "en", preferred_voice: str = "female"):
        try:
            import pyttsx3
        except ImportError as e:
            raise SpeechUnavailableError(
                "pyttsx3 is not installed", component="speech"
            ) from e

        try:
            self._engine = pyttsx3.init()
        except Exception as e:
            # Missing native drivers (espeak, SAPI5, NSSpeech) surface here
            raise SpeechUnavailableError(
                f"Speech engine failed to initialize: {e}",
                component="speech",
                context={"error_type": type(e).__name__},
            ) from e

        self._engine.setProperty("rate", rate_wpm)
        voice = select_voice(self._engine.getProperty("voices") or [], language, preferred_voice)
        if voice is not None:
            self._engine.setProperty("voice", voice.id)
            logger.info(f"Speech voice selected: {getattr(voice, 'name', voice.id)}")
        # One run loop at a time: a new utterance waits for a stopped one to unwind
        self._run_lock = threading.Lock()

    async def say(self, text: str) -> None:
        await asyncio.to_thread(self._speak_blocking, text)

    def _speak_blocking(self, text: str) -> None:
        with self._run_lock:
            self._engine.say(text)
            self._engine.runAndWait()

    def stop(self) -> None:
        self._engine.stop()


def build_backend(settings: SpeechSettings) -> Optional[SpeechBackend]:
    """
    Create the configured backend, or None when speech is disabled or
    cannot be initialized on this host.
    """
    if not settings.enabled:
        logger.info("Speech output disabled by configuration")
        return None
    try:
        return Pyttsx3Backend(
            rate_wpm=settings.rate_wpm,
            language=settings.language,
            preferred_voice=settings.preferred_voice,
        )
    except SpeechUnavailableError as e:
        logger.warning(
            f"Speech output unavailable: {e.message}",
            extra={"component": e.component, **e.context},
        )
        return None
