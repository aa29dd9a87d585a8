"""Operator-facing phrasing for diagnosis episodes."""

from ..schemas.diagnosis import DiagnosisResult


def diagnosis_message(top: DiagnosisResult) -> str:
    percent = round(top.probability * 100)
    return (
        f"Anomaly detected. Digital twin inference suggests a {percent} percent "
        f"probability of: {top.fault}. {top.explanation} "
        f"Recommend to {top.recommended_action}."
    )


def resolution_message(top: DiagnosisResult) -> str:
    return f"{top.recommended_action} action applied. Monitoring system for stabilization."


def explanation_message(top: DiagnosisResult) -> str:
    return f"Based on the digital twin's causal model: {top.explanation}"
