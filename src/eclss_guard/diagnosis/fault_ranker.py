"""
Fault ranking against the information model.

Simulates inference over a probabilistic graphical model: each candidate
fault for the detected anomaly category starts from a base score and gains
fixed increments for every symptom it expects that the telemetry exhibits.
Scores are then normalized into a distribution. The increments are ad hoc
heuristics, not calibrated likelihoods.
"""

import logging
from typing import Callable, List, NamedTuple

from ..schemas.diagnosis import DiagnosisResult, SymptomLevel
from ..schemas.telemetry import TelemetryRecord
from .information_model import FAULTS, candidate_faults

logger = logging.getLogger(__name__)

BASE_SCORE = 0.1


class SymptomRule(NamedTuple):
    field: str
    level: SymptomLevel
    matches: Callable[[TelemetryRecord], bool]
    increment: float


SYMPTOM_RULES = (
    SymptomRule("co2_ppm", SymptomLevel.HIGH, lambda r: r.co2_ppm > 800, 0.4),
    SymptomRule("airflow_m_s", SymptomLevel.LOW, lambda r: r.airflow_m_s < 2.0, 0.3),
    SymptomRule("airflow_m_s", SymptomLevel.NORMAL, lambda r: r.airflow_m_s > 4.0, 0.3),
    # Commanded open with no airflow is the strongest single indicator.
    SymptomRule(
        "valve_command_status",
        SymptomLevel.HIGH,
        lambda r: r.valve_command_status == 1 and r.airflow_m_s < 2.0,
        0.5,
    ),
    SymptomRule("o2_percent", SymptomLevel.LOW, lambda r: r.o2_percent < 19, 0.8),
    SymptomRule("pressure_kPa", SymptomLevel.LOW, lambda r: r.pressure_kPa < 100, 0.8),
    SymptomRule("water_level_percent", SymptomLevel.LOW, lambda r: r.water_level_percent < 50, 0.5),
    SymptomRule("humidity_percent", SymptomLevel.LOW, lambda r: r.humidity_percent < 40, 0.3),
)


def score_fault(record: TelemetryRecord, fault_id: str) -> float:
    """Unnormalized evidence score of one fault for a record."""
    fault = FAULTS[fault_id]
    total = BASE_SCORE
    for rule in SYMPTOM_RULES:
        if fault.expects(rule.field, rule.level) and rule.matches(record):
            total += rule.increment
    return total


def rank(record: TelemetryRecord, category) -> List[DiagnosisResult]:
    """
    Rank candidate faults for an anomaly category.

    Args:
        record: The anomalous telemetry sample
        category: AnomalyType (or its string value)

    Returns:
        DiagnosisResults sorted by probability, highest first. Ties keep the
        information model's candidate order. Empty for an unknown category.
    """
    candidates = candidate_faults(category)
    if not candidates:
        logger.warning(
            f"No candidate faults for category {category!r}",
            extra={"category": str(category)},
        )
        return []

    scores = [(fault_id, score_fault(record, fault_id)) for fault_id in candidates]
    total = sum(s for _, s in scores)

    results = []
    for fault_id, s in scores:
        fault = FAULTS[fault_id]
        results.append(
            DiagnosisResult(
                fault=fault.name,
                probability=s / total if total > 0 else 0.0,
                explanation=fault.explanation,
                recommended_action=fault.action,
            )
        )

    # sorted() is stable, so equal probabilities keep table order.
    return sorted(results, key=lambda d: d.probability, reverse=True)
