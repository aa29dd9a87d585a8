"""
Heuristic anomaly scoring for cabin telemetry.

Stands in for the reconstruction error of an unsupervised model: a weighted
sum of absolute deviations from the nominal cabin state, plus a relational
check between the commanded valve state and the measured airflow and a fixed
penalty for a faulted scrubber. Higher scores mean larger deviation.
"""

from types import MappingProxyType
from typing import Dict

from ..schemas.telemetry import ScorePoint, TelemetryRecord

# Baseline "normal" operating conditions the score is measured against.
NORMAL_STATE = MappingProxyType({
    "co2_ppm": 400.0,
    "o2_percent": 21.0,
    "pressure_kPa": 101.3,
    "water_level_percent": 85.0,
    "humidity_percent": 50.0,
    "airflow_m_s": 5.0,
})

# Sensitivity of each term.
WEIGHTS = MappingProxyType({
    "co2_ppm": 0.4,
    "o2_percent": 0.3,
    "pressure_kPa": 0.2,
    "water_level_percent": 0.25,
    "humidity_percent": 0.1,
    "airflow_m_s": 0.35,
    "scrubber_status": 1.0,
    "valve_mismatch": 1.5,
})

# Deviation is divided by this before weighting.
SCALES = MappingProxyType({
    "co2_ppm": 1 / 100,
    "o2_percent": 1.0,
    "pressure_kPa": 1.0,
    "water_level_percent": 1 / 10,
    "humidity_percent": 1 / 10,
})

MISMATCH_DEVIATION = 1.0
SCORE_CEILING = 1.2

_TERM_NAMES = {
    "co2_ppm": "co2",
    "o2_percent": "o2",
    "pressure_kPa": "pressure",
    "water_level_percent": "water",
    "humidity_percent": "humidity",
}


def score_contributions(record: TelemetryRecord) -> Dict[str, float]:
    """
    Break the raw (unclamped) anomaly sum down into its terms.

    Exactly one of ``airflow`` and ``valve_mismatch`` is non-zero: the
    mismatch weight applies when the valve is commanded open but airflow
    deviates by more than 1 m/s.

    Args:
        record: Telemetry sample to evaluate

    Returns:
        Dict of term name → contribution, in a fixed order
    """
    contributions: Dict[str, float] = {}

    for field_name, term in _TERM_NAMES.items():
        deviation = abs(getattr(record, field_name) - NORMAL_STATE[field_name])
        contributions[term] = deviation * SCALES[field_name] * WEIGHTS[field_name]

    airflow_deviation = abs(record.airflow_m_s - NORMAL_STATE["airflow_m_s"])
    if record.valve_command_status == 1 and airflow_deviation > MISMATCH_DEVIATION:
        contributions["airflow"] = 0.0
        contributions["valve_mismatch"] = airflow_deviation * WEIGHTS["valve_mismatch"]
    else:
        contributions["airflow"] = airflow_deviation * WEIGHTS["airflow_m_s"]
        contributions["valve_mismatch"] = 0.0

    contributions["scrubber_status"] = (
        WEIGHTS["scrubber_status"] if record.scrubber_status == 0 else 0.0
    )
    return contributions


def score(record: TelemetryRecord) -> float:
    """
    Compute the anomaly score of one record.

    Returns:
        Score in [0, 100]; the raw sum saturates at SCORE_CEILING.
    """
    raw = sum(score_contributions(record).values())
    return min(raw, SCORE_CEILING) / SCORE_CEILING * 100.0


def score_point(record: TelemetryRecord) -> ScorePoint:
    """Score a record and pair the result with its timestamp."""
    return ScorePoint(timestamp=record.timestamp, score=score(record))
