"""Simulated ECLSS telemetry source."""
from .base import TelemetrySimulator, nominal_values
from .anomalies import PROFILES, AnomalyProfile, profile_for

__all__ = ["TelemetrySimulator", "nominal_values", "PROFILES", "AnomalyProfile", "profile_for"]
