"""
Single-voice speech channel.

At most one utterance is active at a time: speaking again cancels whatever is
in flight. Each call returns an Utterance handle that settles exactly once
with COMPLETED, CANCELED or ERRORED. Without a backend every call is a
logged no-op.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from ..core import metrics
from .backends import SpeechBackend

logger = logging.getLogger(__name__)


class SpeechOutcome(str, Enum):
    """Terminal outcome of an utterance."""

    COMPLETED = "completed"
    CANCELED = "canceled"
    ERRORED = "errored"


class Utterance:
    """Future-style handle for one spoken message."""

    def __init__(self, text: str):
        self.text = text
        self._outcome: Optional[SpeechOutcome] = None
        self._settled = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def outcome(self) -> Optional[SpeechOutcome]:
        """Terminal outcome, or None while still pending."""
        return self._outcome

    def done(self) -> bool:
        return self._outcome is not None

    async def wait(self) -> SpeechOutcome:
        """Wait until the utterance settles and return its outcome."""
        await self._settled.wait()
        return self._outcome

    def _settle(self, outcome: SpeechOutcome) -> bool:
        # First outcome wins
        if self._outcome is not None:
            return False
        self._outcome = outcome
        self._settled.set()
        metrics.SPEECH_UTTERANCES_TOTAL.labels(outcome=outcome.value).inc()
        return True

    def __repr__(self) -> str:
        return f"Utterance({self.text[:32]!r}, outcome={self._outcome})"


class SpeechChannel:
    """
    Owner of the single speech resource.

    Must be used from inside a running asyncio event loop.
    """

    def __init__(self, backend: Optional[SpeechBackend] = None):
        self._backend = backend
        self._current: Optional[Utterance] = None

    @property
    def available(self) -> bool:
        return self._backend is not None

    @property
    def is_speaking(self) -> bool:
        """True from ``speak`` until the current utterance settles."""
        return self._current is not None and not self._current.done()

    @property
    def current(self) -> Optional[Utterance]:
        return self._current

    def speak(self, text: str) -> Optional[Utterance]:
        """
        Start speaking ``text``, cancelling any utterance in flight.

        Returns:
            The new Utterance, or None when no backend is available
        """
        if self._backend is None:
            logger.warning(
                "Speech output unavailable, message not spoken",
                extra={"text": text},
            )
            metrics.SPEECH_UTTERANCES_TOTAL.labels(outcome="unavailable").inc()
            return None

        self.cancel()

        utterance = Utterance(text)
        loop = asyncio.get_running_loop()
        utterance._task = loop.create_task(self._run(utterance))
        utterance._task.add_done_callback(
            lambda task: utterance._settle(SpeechOutcome.CANCELED) if task.cancelled() else None
        )
        self._current = utterance
        logger.debug("Utterance started", extra={"text": text})
        return utterance

    def cancel(self) -> None:
        """Cancel the utterance in flight, if any."""
        utterance = self._current
        if utterance is None or utterance.done():
            return
        utterance._settle(SpeechOutcome.CANCELED)
        if utterance._task is not None:
            utterance._task.cancel()
        self._backend.stop()
        logger.debug("Utterance canceled", extra={"text": utterance.text})

    async def _run(self, utterance: Utterance) -> None:
        try:
            await self._backend.say(utterance.text)
        except asyncio.CancelledError:
            utterance._settle(SpeechOutcome.CANCELED)
            raise
        except Exception as e:
            logger.error(
                f"Speech backend failed: {e}",
                extra={"error_type": type(e).__name__, "text": utterance.text},
                exc_info=True,
            )
            utterance._settle(SpeechOutcome.ERRORED)
        else:
            utterance._settle(SpeechOutcome.COMPLETED)

    async def aclose(self) -> None:
        """Cancel any active utterance and wait for its task to unwind."""
        utterance = self._current
        self.cancel()
        if utterance is not None and utterance._task is not None:
            await asyncio.gather(utterance._task, return_exceptions=True)
