"""Telemetry and diagnosis data models."""
from .telemetry import ANOMALY_DETAILS, PARAMETERS, AnomalyType, ScorePoint, TelemetryRecord
from .diagnosis import Component, DiagnosisResult, FaultDefinition, SymptomLevel

__all__ = [
    "ANOMALY_DETAILS",
    "PARAMETERS",
    "AnomalyType",
    "ScorePoint",
    "TelemetryRecord",
    "Component",
    "DiagnosisResult",
    "FaultDefinition",
    "SymptomLevel",
]
