"""Speech output."""
from .backends import Pyttsx3Backend, SpeechBackend, build_backend, select_voice
from .channel import SpeechChannel, SpeechOutcome, Utterance

__all__ = [
    "Pyttsx3Backend",
    "SpeechBackend",
    "build_backend",
    "select_voice",
    "SpeechChannel",
    "SpeechOutcome",
    "Utterance",
]
