"""
Synthetic cabin telemetry source.

Produces one TelemetryRecord per tick: slow sinusoidal drift around the
nominal cabin state plus uniform sensor noise, with at most one anomaly
profile applied on top.
"""

import logging
import math
from typing import Dict, List, Optional

import numpy as np

from ..schemas.telemetry import AnomalyType, TelemetryRecord
from .anomalies import AnomalyProfile, profile_for

logger = logging.getLogger(__name__)

# Full width of the uniform noise added to each channel on live ticks.
NOISE_SPAN: Dict[str, float] = {
    "co2_ppm": 1.0,
    "o2_percent": 0.05,
    "pressure_kPa": 0.02,
    "water_level_percent": 0.2,
    "humidity_percent": 1.0,
    "airflow_m_s": 0.05,
}

CONTINUOUS_FIELDS = tuple(NOISE_SPAN)

NOMINAL_WATER_LEVEL = 85.0
WATER_RECOVERY_FLOOR = 84.0
WATER_RECOVERY_STEP = 0.05


def nominal_values(timestamp: int) -> Dict[str, float]:
    """Noise-free nominal telemetry for ``timestamp`` (ms)."""
    t = timestamp / 10000
    return {
        "co2_ppm": 400 + 5 * math.sin(t * 0.7),
        "o2_percent": 21 - 0.1 * math.sin(t * 0.5),
        "pressure_kPa": 101.3 + 0.05 * math.sin(t * 0.3),
        "water_level_percent": 85 + 2 * math.sin(t * 0.2),
        "humidity_percent": 50 + 5 * math.sin(t * 0.4),
        "scrubber_status": 1,
        "airflow_m_s": 5.0 + 0.1 * math.sin(t * 1.2),
        "valve_command_status": 1,
    }


class TelemetrySimulator:
    """
    Simulated ECLSS telemetry generator.

    Tracks the previously generated record so that stateful profiles (water
    draining, post-fault recovery) can build on it.
    """

    def __init__(self, seed: Optional[int] = None, noise: bool = True):
        """
        Initialize the simulator.

        Args:
            seed: Seed for the noise generator (None for OS entropy)
            noise: Add sensor noise on live ticks
        """
        self._rng = np.random.default_rng(seed)
        self.noise = noise
        self._profile: Optional[AnomalyProfile] = None
        self._anomaly_start_ms: Optional[int] = None
        self._last: Optional[TelemetryRecord] = None

    @property
    def active_anomaly(self) -> Optional[AnomalyType]:
        return self._profile.category if self._profile else None

    @property
    def last_record(self) -> Optional[TelemetryRecord]:
        return self._last

    def inject_anomaly(self, category, start_ms: int) -> None:
        """
        Start applying the profile for ``category`` from ``start_ms``.

        Replaces any profile already active; single-episode gating belongs to
        the diagnosis controller.
        """
        self._profile = profile_for(category)
        self._anomaly_start_ms = start_ms
        logger.info(
            f"Anomaly profile {self._profile.category.value} injected",
            extra={"category": self._profile.category.value, "start_ms": start_ms},
        )

    def clear_anomaly(self) -> None:
        """Stop the active profile; telemetry relaxes back to nominal."""
        if self._profile is not None:
            logger.info(
                f"Anomaly profile {self._profile.category.value} cleared",
                extra={"category": self._profile.category.value},
            )
        self._profile = None
        self._anomaly_start_ms = None

    def generate(self, timestamp: int) -> TelemetryRecord:
        """
        Generate the record for one live tick.

        Args:
            timestamp: Sample time in ms since epoch

        Returns:
            Validated TelemetryRecord with all numeric fields clamped >= 0
        """
        values = nominal_values(timestamp)
        if self.noise:
            for field_name, span in NOISE_SPAN.items():
                values[field_name] += (self._rng.random() - 0.5) * span

        previous = self._last
        if self._profile is not None:
            seconds_since = max(0.0, (timestamp - self._anomaly_start_ms) / 1000)
            self._profile.apply(values, seconds_since, previous)
        elif previous is not None and previous.water_level_percent < WATER_RECOVERY_FLOOR:
            # Gradual refill after a water fault is resolved
            values["water_level_percent"] = min(
                NOMINAL_WATER_LEVEL, previous.water_level_percent + WATER_RECOVERY_STEP
            )

        record = self._build(timestamp, values)
        self._last = record
        return record

    def initial_history(self, now_ms: int, length: int, interval_ms: int) -> List[TelemetryRecord]:
        """
        Noise-free nominal history ending at ``now_ms``.

        Also primes the simulator's previous record with the newest entry.
        """
        history = [
            self._build(timestamp, nominal_values(timestamp))
            for timestamp in (
                now_ms - (length - i - 1) * interval_ms for i in range(length)
            )
        ]
        if history:
            self._last = history[-1]
        return history

    @staticmethod
    def _build(timestamp: int, values: Dict[str, float]) -> TelemetryRecord:
        for field_name in CONTINUOUS_FIELDS:
            values[field_name] = max(0.0, float(values[field_name]))
        return TelemetryRecord(timestamp=max(0, int(timestamp)), **values)
