"""
ECLSS Guard - simulated life-support telemetry monitoring.

Synthetic cabin telemetry is scored by a heuristic anomaly engine and, when an
anomaly episode is detected, ranked against a static fault model and announced
over speech synthesis.
"""

__version__ = "1.0.0"
