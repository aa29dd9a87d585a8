"""
Error hierarchy and graceful degradation helpers.

Every project error carries the component it came from and a context dict
for structured logs. ``safe_execute`` runs optional work (presentation
listeners, speech setup) so that a failure is logged at a severity matching
its type instead of stopping the telemetry loop.
"""

import functools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)


# ============================================================================
# Exceptions
# ============================================================================

class EclssGuardException(Exception):
    """Base class for ECLSS Guard errors."""

    def __init__(self, message: str, component: str = "unknown",
                 context: Optional[Dict[str, Any]] = None):
        """
        Args:
            message: Human readable description
            component: Subsystem that raised the error
            context: Extra key/values for structured logs
        """
        super().__init__(message)
        self.message = message
        self.component = component
        self.context = dict(context or {})
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Log-friendly representation."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "component": self.component,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(EclssGuardException):
    """Settings file missing, unparsable or failing validation."""


class SpeechUnavailableError(EclssGuardException):
    """No speech synthesis engine could be started on this host."""


class StateTransitionError(EclssGuardException):
    """A diagnosis episode transition outside the allowed edges."""


# ============================================================================
# Classification
# ============================================================================

@functools.total_ordering
class ErrorSeverity(Enum):
    """How bad an error is, LOW < MEDIUM < HIGH < CRITICAL."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(ErrorSeverity).index(self)

    def __lt__(self, other):
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank < other.rank


# Most specific types first; the first isinstance match wins.
SEVERITY_BY_TYPE: Tuple[Tuple[Type[BaseException], ErrorSeverity], ...] = (
    (SpeechUnavailableError, ErrorSeverity.LOW),
    (ConfigurationError, ErrorSeverity.HIGH),
    (StateTransitionError, ErrorSeverity.HIGH),
    (ValueError, ErrorSeverity.MEDIUM),
    (KeyError, ErrorSeverity.MEDIUM),
)

_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass
class ErrorContext:
    """One classified error occurrence."""
    error_type: str
    component: str
    message: str
    severity: ErrorSeverity
    original_exception: Optional[BaseException] = None
    context_data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.error_type,
            "component": self.component,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context_data,
            "timestamp": self.timestamp.isoformat(),
        }


def classify_error(exc: BaseException, component: str,
                   context: Optional[Dict[str, Any]] = None) -> ErrorContext:
    """
    Attach a severity to ``exc``; unknown types count as HIGH.

    Args:
        exc: The exception to classify
        component: Where it happened
        context: Extra data for the log entry
    """
    severity = next(
        (sev for exc_type, sev in SEVERITY_BY_TYPE if isinstance(exc, exc_type)),
        ErrorSeverity.HIGH,
    )
    return ErrorContext(
        error_type=type(exc).__name__,
        component=component,
        message=str(exc),
        severity=severity,
        original_exception=exc,
        context_data=dict(context or {}),
    )


def log_error(error_ctx: ErrorContext, logger_obj: Optional[logging.Logger] = None):
    """Log a classified error at the level matching its severity."""
    logger_obj = logger_obj or logger
    # 'message' is reserved on LogRecord
    extra = {k: v for k, v in error_ctx.to_dict().items() if k != "message"}
    logger_obj.log(
        _LOG_LEVELS[error_ctx.severity],
        f"{error_ctx.severity.value.upper()} in {error_ctx.component}: {error_ctx.message}",
        extra=extra,
        exc_info=error_ctx.original_exception if error_ctx.severity >= ErrorSeverity.HIGH else None,
    )


# ============================================================================
# Safe Execution
# ============================================================================

T = TypeVar("T")


def safe_execute(
    func: Callable[..., T],
    *args,
    component: str = "unknown",
    fallback_value: Optional[Any] = None,
    context: Optional[Dict[str, Any]] = None,
    **kwargs
) -> Any:
    """
    Call ``func`` and return ``fallback_value`` instead of raising.

    Usage:
        safe_execute(listener, snapshot, component="telemetry_loop.listener")

    Project exceptions are re-tagged with ``component`` and ``context``
    before logging.
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        if isinstance(e, EclssGuardException):
            e.component = component
            e.context.update(context or {})
            details = e.context
        else:
            details = {"function": getattr(func, "__name__", repr(func)), **(context or {})}
        log_error(classify_error(e, component, details))
        return fallback_value
