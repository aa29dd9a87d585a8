"""Anomaly injection profiles for the simulated ECLSS cabin.

Each profile perturbs the nominal telemetry values of one tick as a function
of the time elapsed since injection:

- CO2 spike: CO2 rises toward +1200 ppm (tau 5 s) while scrubber airflow
  collapses by 3.5 m/s (tau 3 s) with the valve still commanded open and the
  scrubber flagged as faulted.
- O2 drop: oxygen falls toward -4 % (tau 10 s).
- Pressure leak: pressure falls linearly at 0.2 kPa/s.
- Water system failure: the tank drains from its previous level by
  0.1 %/tick plus up to 0.5 %/tick (tau 15 s); humidity falls toward -15 %
  (tau 8 s).
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..schemas.telemetry import AnomalyType, TelemetryRecord


def _approach(amplitude: float, seconds: float, tau: float) -> float:
    """First-order rise toward ``amplitude`` with time constant ``tau``."""
    return amplitude * (1 - math.exp(-seconds / tau))


class AnomalyProfile(ABC):
    """Perturbation applied to one tick's values while an anomaly is active."""

    category: AnomalyType

    @abstractmethod
    def apply(
        self,
        values: Dict[str, float],
        seconds_since: float,
        previous: Optional[TelemetryRecord],
    ) -> None:
        """
        Modify ``values`` in place.

        Args:
            values: Field name → value for the tick being generated
            seconds_since: Seconds elapsed since injection (>= 0)
            previous: The record generated on the previous tick, if any
        """


class Co2SpikeProfile(AnomalyProfile):
    category = AnomalyType.CO2

    def apply(self, values, seconds_since, previous):
        values["co2_ppm"] += _approach(1200, seconds_since, 5)
        values["airflow_m_s"] -= _approach(3.5, seconds_since, 3)
        # Commanded open, but airflow is low
        values["valve_command_status"] = 1
        values["scrubber_status"] = 0


class O2DropProfile(AnomalyProfile):
    category = AnomalyType.O2

    def apply(self, values, seconds_since, previous):
        values["o2_percent"] -= _approach(4, seconds_since, 10)


class PressureLeakProfile(AnomalyProfile):
    category = AnomalyType.PRESSURE

    def apply(self, values, seconds_since, previous):
        values["pressure_kPa"] -= 0.2 * seconds_since


class WaterSystemFailureProfile(AnomalyProfile):
    category = AnomalyType.WATER

    def apply(self, values, seconds_since, previous):
        last_level = (
            previous.water_level_percent if previous is not None
            else values["water_level_percent"]
        )
        values["water_level_percent"] = max(
            0.0, last_level - 0.1 - _approach(0.5, seconds_since, 15)
        )
        values["humidity_percent"] -= _approach(15, seconds_since, 8)


PROFILES: Dict[AnomalyType, AnomalyProfile] = {
    profile.category: profile
    for profile in (
        Co2SpikeProfile(),
        O2DropProfile(),
        PressureLeakProfile(),
        WaterSystemFailureProfile(),
    )
}


def profile_for(category) -> AnomalyProfile:
    """
    Look up the profile for an anomaly category.

    Raises:
        ValueError: If ``category`` is not an AnomalyType value
    """
    return PROFILES[AnomalyType(category)]
