"""
ECLSS Guard Core - Error Handling & Metrics

This package provides centralized error handling, graceful degradation
and in-process metrics for ECLSS Guard components.
"""

from .error_handling import (
    EclssGuardException,
    ConfigurationError,
    SpeechUnavailableError,
    StateTransitionError,
    ErrorSeverity,
    classify_error,
    safe_execute,
)

__all__ = [
    # Exceptions
    "EclssGuardException",
    "ConfigurationError",
    "SpeechUnavailableError",
    "StateTransitionError",
    # Error handling
    "ErrorSeverity",
    "classify_error",
    "safe_execute",
]
