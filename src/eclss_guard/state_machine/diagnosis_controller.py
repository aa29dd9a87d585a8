"""
Diagnosis episode state machine.

Orchestrates one anomaly episode at a time:

    NOMINAL --inject--> ANOMALY_INJECTED --detect+rank--> DIAGNOSED --resolve--> NOMINAL

Detection requires the latest score to exceed the threshold, the cooldown
since the previous diagnosis to have elapsed and the speech channel to be
idle. All episode state lives in an EpisodeContext owned by the controller.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from ..core import metrics
from ..core.error_handling import StateTransitionError
from ..diagnosis import announcements
from ..diagnosis.fault_ranker import rank
from ..logging_config import get_logger, log_detection, log_recovery_action
from ..schemas.diagnosis import DiagnosisResult
from ..schemas.telemetry import AnomalyType, ScorePoint, TelemetryRecord
from ..simulator.base import TelemetrySimulator
from ..telemetry.window import TelemetryWindow

logger = get_logger(__name__)

CORRELATION_WINDOW = 60


class SpeechOutput(Protocol):
    """What the controller needs from the speech channel."""

    @property
    def is_speaking(self) -> bool: ...

    def speak(self, text: str) -> Any: ...


class EpisodeState(Enum):
    """Operational state of the anomaly episode."""

    NOMINAL = "NOMINAL"
    ANOMALY_INJECTED = "ANOMALY_INJECTED"
    DIAGNOSED = "DIAGNOSED"


@dataclass
class EpisodeContext:
    """Mutable episode state held by a single DiagnosisController."""

    state: EpisodeState = EpisodeState.NOMINAL
    category: Optional[AnomalyType] = None
    injected_at_ms: Optional[int] = None
    diagnosis: Optional[Tuple[DiagnosisResult, ...]] = None
    diagnosed_at_ms: Optional[int] = None
    # Survives resolution so the cooldown spans episodes
    last_diagnosis_ms: int = 0

    @property
    def top_fault(self) -> Optional[DiagnosisResult]:
        return self.diagnosis[0] if self.diagnosis else None


@dataclass(frozen=True)
class CorrelationPoint:
    timestamp: int
    airflow_m_s: float
    valve_command_status: int


@dataclass(frozen=True)
class Explanation:
    """Operator-facing explanation of the current top fault."""

    fault: str
    text: str
    correlation: Tuple[CorrelationPoint, ...] = ()


def _now_ms() -> int:
    return int(time.time() * 1000)


class DiagnosisController:
    """
    Drives detect → diagnose → announce → resolve for one cabin.

    Responsibilities:
    - Gate anomaly injection to one active episode
    - Run the fault ranker once per episode when detection conditions hold
    - Announce diagnoses and resolutions on the speech channel
    """

    TRANSITIONS = {
        EpisodeState.NOMINAL: [EpisodeState.ANOMALY_INJECTED],
        EpisodeState.ANOMALY_INJECTED: [EpisodeState.DIAGNOSED],
        EpisodeState.DIAGNOSED: [EpisodeState.NOMINAL],
    }

    def __init__(
        self,
        simulator: TelemetrySimulator,
        speech: SpeechOutput,
        score_threshold: float = 50.0,
        cooldown_ms: int = 5000,
        ranker: Callable[[TelemetryRecord, AnomalyType], List[DiagnosisResult]] = rank,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Args:
            simulator: Telemetry source whose anomaly profile is driven
            speech: Speech output used for announcements
            score_threshold: Score that must be exceeded to diagnose
            cooldown_ms: Minimum time between two diagnoses
            ranker: Fault ranking function
            clock: Millisecond clock used when callers omit ``now_ms``
        """
        self.simulator = simulator
        self.speech = speech
        self.score_threshold = score_threshold
        self.cooldown_ms = cooldown_ms
        self._ranker = ranker
        self._clock = clock
        self.context = EpisodeContext()

    @property
    def state(self) -> EpisodeState:
        return self.context.state

    @property
    def diagnosis(self) -> Optional[Tuple[DiagnosisResult, ...]]:
        return self.context.diagnosis

    def transition_to(self, target: EpisodeState) -> Dict[str, Any]:
        """
        Move to ``target`` if the edge exists.

        Raises:
            StateTransitionError: For an edge not in TRANSITIONS
        """
        previous = self.context.state
        if target not in self.TRANSITIONS[previous]:
            raise StateTransitionError(
                f"Invalid transition {previous.value} -> {target.value}",
                component="diagnosis_controller",
                context={"current_state": previous.value, "target_state": target.value},
            )
        self.context.state = target
        logger.debug("episode_transition", previous_state=previous.value, new_state=target.value)
        return {
            "success": True,
            "previous_state": previous.value,
            "new_state": target.value,
            "message": f"{previous.value} -> {target.value}",
        }

    def _rejected(self, message: str) -> Dict[str, Any]:
        state = self.context.state.value
        return {
            "success": False,
            "previous_state": state,
            "new_state": state,
            "message": message,
        }

    # ------------------------------------------------------------------
    # Operator commands
    # ------------------------------------------------------------------

    def inject_anomaly(self, category, now_ms: Optional[int] = None) -> Dict[str, Any]:
        """
        Start an anomaly episode.

        Rejected (no-op) while another episode is active.

        Raises:
            ValueError: If ``category`` is not an AnomalyType value
        """
        category = AnomalyType(category)
        if self.context.state is not EpisodeState.NOMINAL:
            metrics.ANOMALY_INJECTIONS_TOTAL.labels(category=category.value, outcome="rejected").inc()
            logger.warning(
                "anomaly_injection_rejected",
                category=category.value,
                active_category=self.context.category.value if self.context.category else None,
                state=self.context.state.value,
            )
            return self._rejected(
                f"Anomaly {self.context.category.value} already active; resolve it first"
            )

        now_ms = self._clock() if now_ms is None else now_ms
        result = self.transition_to(EpisodeState.ANOMALY_INJECTED)
        self.context.category = category
        self.context.injected_at_ms = now_ms
        self.context.diagnosis = None
        self.context.diagnosed_at_ms = None
        self.simulator.inject_anomaly(category, now_ms)

        metrics.ANOMALY_INJECTIONS_TOTAL.labels(category=category.value, outcome="accepted").inc()
        logger.info("anomaly_injected", category=category.value, at_ms=now_ms)
        return result

    def resolve_anomaly(self, now_ms: Optional[int] = None) -> Dict[str, Any]:
        """
        Apply the top recommended action and close the episode.

        Only possible once a diagnosis exists; otherwise a no-op.
        """
        if self.context.state is not EpisodeState.DIAGNOSED:
            return self._rejected("No active diagnosis to resolve")

        now_ms = self._clock() if now_ms is None else now_ms
        top = self.context.top_fault
        category = self.context.category
        self.speech.speak(announcements.resolution_message(top))

        result = self.transition_to(EpisodeState.NOMINAL)
        self.simulator.clear_anomaly()

        duration_ms = (
            now_ms - self.context.injected_at_ms
            if self.context.injected_at_ms is not None else None
        )
        self.context.category = None
        self.context.injected_at_ms = None
        self.context.diagnosis = None
        self.context.diagnosed_at_ms = None

        metrics.RESOLUTIONS_TOTAL.labels(category=category.value).inc()
        log_recovery_action(
            logger,
            action=top.recommended_action,
            category=category.value,
            duration_ms=duration_ms,
            fault=top.fault,
        )
        return result

    def explain(self, window: Optional[TelemetryWindow] = None) -> Optional[Explanation]:
        """
        Speak and return the causal explanation for the top fault.

        A scrubber valve fault also carries the airflow vs valve-command series
        of the most recent records in ``window``. Sensor drift does not.
        """
        top = self.context.top_fault
        if self.context.state is not EpisodeState.DIAGNOSED or top is None:
            return None

        text = announcements.explanation_message(top)
        correlation: Tuple[CorrelationPoint, ...] = ()
        if window is not None and "Scrubber" in top.fault:
            correlation = tuple(
                CorrelationPoint(r.timestamp, r.airflow_m_s, r.valve_command_status)
                for r in window.tail(CORRELATION_WINDOW)
            )

        self.speech.speak(text)
        return Explanation(fault=top.fault, text=text, correlation=correlation)

    # ------------------------------------------------------------------
    # Per-tick evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self,
        record: TelemetryRecord,
        score_point: ScorePoint,
        now_ms: Optional[int] = None,
    ) -> Optional[Tuple[DiagnosisResult, ...]]:
        """
        Check detection conditions against the latest sample.

        Returns:
            The new diagnosis when this call opened one, else None
        """
        ctx = self.context
        if ctx.state is not EpisodeState.ANOMALY_INJECTED or self.speech.is_speaking:
            return None

        now_ms = self._clock() if now_ms is None else now_ms
        if score_point.score <= self.score_threshold:
            return None
        if now_ms - ctx.last_diagnosis_ms <= self.cooldown_ms:
            return None

        results = self._ranker(record, ctx.category)
        if not results:
            return None

        self.transition_to(EpisodeState.DIAGNOSED)
        ctx.diagnosis = tuple(results)
        ctx.diagnosed_at_ms = now_ms
        ctx.last_diagnosis_ms = now_ms

        top = results[0]
        metrics.DIAGNOSIS_EPISODES_TOTAL.labels(category=ctx.category.value, top_fault=top.fault).inc()
        log_detection(
            logger,
            category=ctx.category.value,
            fault=top.fault,
            probability=top.probability,
            score=score_point.score,
            candidates=len(results),
        )
        self.speech.speak(announcements.diagnosis_message(top))
        return ctx.diagnosis
