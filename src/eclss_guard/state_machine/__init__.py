"""Diagnosis episode orchestration."""
from .diagnosis_controller import (
    CorrelationPoint,
    DiagnosisController,
    EpisodeContext,
    EpisodeState,
    Explanation,
)

__all__ = ["CorrelationPoint", "DiagnosisController", "EpisodeContext", "EpisodeState", "Explanation"]
