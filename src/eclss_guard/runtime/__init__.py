"""Telemetry loop and component wiring."""
from .telemetry_loop import Runtime, TelemetryLoop, TickSnapshot, build_runtime

__all__ = ["Runtime", "TelemetryLoop", "TickSnapshot", "build_runtime"]
