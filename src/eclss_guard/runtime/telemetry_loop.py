"""
Periodic telemetry loop.

One tick = generate a record, score it, replace the rolling window, let the
diagnosis controller evaluate the newest sample, then notify presentation
listeners. Everything inside a tick runs synchronously on the event loop.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..anomaly.score_engine import score_point
from ..config.settings import Settings
from ..core import metrics
from ..core.error_handling import safe_execute
from ..logging_config import get_logger, log_performance_metric
from ..schemas.diagnosis import DiagnosisResult
from ..schemas.telemetry import ScorePoint, TelemetryRecord
from ..simulator.base import TelemetrySimulator
from ..speech.backends import build_backend
from ..speech.channel import SpeechChannel
from ..state_machine.diagnosis_controller import DiagnosisController, EpisodeState
from ..telemetry.window import TelemetryWindow

logger = get_logger(__name__)

# A tick slower than this is logged as a warning
SLOW_TICK_MS = 50.0


@dataclass(frozen=True)
class TickSnapshot:
    """Everything a presentation layer needs after one tick."""

    window: TelemetryWindow
    record: TelemetryRecord
    score: ScorePoint
    state: EpisodeState
    diagnosis: Optional[Tuple[DiagnosisResult, ...]]
    new_diagnosis: bool = False


Listener = Callable[[TickSnapshot], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


class TelemetryLoop:
    """Drives simulator → score engine → window → controller on a fixed period."""

    def __init__(
        self,
        simulator: TelemetrySimulator,
        controller: DiagnosisController,
        interval_ms: int = 1000,
        history_length: int = 240,
        clock: Callable[[], int] = _now_ms,
    ):
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.simulator = simulator
        self.controller = controller
        self.interval_ms = interval_ms
        self._clock = clock
        self._listeners: List[Listener] = []
        self._live = True
        self._stopped = False
        self.ticks = 0

        now = clock()
        history = simulator.initial_history(now, history_length, interval_ms)
        self._window = TelemetryWindow(
            history_length, history, [score_point(r) for r in history]
        )
        logger.info(
            "telemetry_loop_initialized",
            interval_ms=interval_ms,
            history_length=history_length,
        )

    @property
    def window(self) -> TelemetryWindow:
        return self._window

    @property
    def is_live(self) -> bool:
        return self._live

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def pause(self) -> None:
        """Stop generating ticks until ``resume``; the timer keeps running."""
        self._live = False
        logger.info("telemetry_paused")

    def resume(self) -> None:
        self._live = True
        logger.info("telemetry_resumed")

    def stop(self) -> None:
        """Make ``run`` return after its current sleep, or at once if not yet running."""
        self._stopped = True

    def tick(self, now_ms: Optional[int] = None) -> TickSnapshot:
        """
        Run one synchronous step.

        Args:
            now_ms: Sample timestamp (defaults to the loop clock)

        Returns:
            Snapshot after the window replacement and controller evaluation
        """
        start = time.perf_counter()
        now_ms = self._clock() if now_ms is None else now_ms

        record = self.simulator.generate(now_ms)
        point = score_point(record)
        self._window = self._window.append(record, point)
        diagnosis = self.controller.evaluate(record, point, now_ms)

        snapshot = TickSnapshot(
            window=self._window,
            record=record,
            score=point,
            state=self.controller.state,
            diagnosis=self.controller.diagnosis,
            new_diagnosis=diagnosis is not None,
        )

        elapsed = time.perf_counter() - start
        self.ticks += 1
        metrics.TELEMETRY_TICKS_TOTAL.inc()
        metrics.TICK_DURATION_SECONDS.observe(elapsed)
        metrics.ANOMALY_SCORE.set(point.score)
        log_performance_metric(
            logger, "tick_duration", elapsed * 1000, threshold=SLOW_TICK_MS, tick=self.ticks
        )

        for listener in list(self._listeners):
            safe_execute(
                listener,
                snapshot,
                component="telemetry_loop.listener",
                fallback_value=None,
            )
        return snapshot

    async def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Tick every ``interval_ms`` until stopped or ``max_ticks`` live ticks ran.

        Ticks are scheduled against fixed deadlines, so time spent inside a
        tick does not stretch the period. When a tick overruns a whole
        period the missed deadlines are dropped instead of fired in a burst.

        Returns:
            Number of ticks executed by this call
        """
        executed = 0
        interval = self.interval_ms / 1000
        event_loop = asyncio.get_running_loop()
        next_at = event_loop.time()
        logger.info("telemetry_loop_started", max_ticks=max_ticks)
        try:
            while not self._stopped:
                if max_ticks is not None and executed >= max_ticks:
                    break
                if self._live:
                    self.tick()
                    executed += 1
                next_at += interval
                now = event_loop.time()
                if next_at < now:
                    next_at = now
                await asyncio.sleep(next_at - now)
        finally:
            self._stopped = False
            logger.info("telemetry_loop_stopped", ticks=executed)
        return executed


@dataclass
class Runtime:
    """Wired components for one cabin."""

    settings: Settings
    simulator: TelemetrySimulator
    speech: SpeechChannel
    controller: DiagnosisController
    loop: TelemetryLoop


def build_runtime(
    settings: Settings,
    clock: Callable[[], int] = _now_ms,
    speech: Optional[SpeechChannel] = None,
) -> Runtime:
    """
    Construct simulator, speech channel, controller and loop from settings.

    Args:
        settings: Validated settings
        clock: Millisecond clock shared by controller and loop
        speech: Speech channel to use instead of the configured backend
    """
    simulator = TelemetrySimulator(seed=settings.telemetry.seed)
    if speech is None:
        speech = SpeechChannel(build_backend(settings.speech))
    controller = DiagnosisController(
        simulator,
        speech,
        score_threshold=settings.detection.score_threshold,
        cooldown_ms=settings.detection.cooldown_ms,
        clock=clock,
    )
    loop = TelemetryLoop(
        simulator,
        controller,
        interval_ms=settings.telemetry.interval_ms,
        history_length=settings.telemetry.history_length,
        clock=clock,
    )
    return Runtime(settings, simulator, speech, controller, loop)
