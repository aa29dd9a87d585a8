"""Rolling telemetry storage."""
from .window import TelemetryWindow

__all__ = ["TelemetryWindow"]
