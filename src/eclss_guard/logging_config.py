"""
ECLSS Guard structured logging.

structlog renders the event logs of the diagnosis controller and the
telemetry loop; the stdlib root logger (used by library modules with
``extra=`` context) gets a matching console or python-json-logger handler.
"""

import logging
import sys
from typing import Optional

import structlog
from pythonjsonlogger import jsonlogger

from . import __version__

# ============================================================================
# CONFIGURATION
# ============================================================================

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _stdlib_handler(json_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        formatter = jsonlogger.JsonFormatter(
            "%(timestamp)s %(levelname)s %(name)s %(message)s", timestamp=True
        )
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    service_name: str = "eclss-guard",
    json_output: bool = False,
):
    """
    Configure structlog and the root logger for one process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        service_name: Bound as ``service`` on every structlog event
        json_output: JSON lines instead of human readable console output
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    renderer = (
        structlog.processors.JSONRenderer() if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stdlib_handler(json_output))
    root.setLevel(level)

    clear_context()
    bind_context(service=service_name, version=__version__)


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """Structured logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**context):
    """Attach key/values to every subsequent event in this context."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context():
    structlog.contextvars.clear_contextvars()


# ============================================================================
# DOMAIN EVENTS
# ============================================================================

def log_detection(
    logger: structlog.BoundLogger,
    category: str,
    fault: str,
    probability: float,
    score: float,
    **extra
):
    """
    Log the opening of a diagnosis episode.

    Severity is ``critical`` when the top fault is more likely than not.

    Args:
        logger: Structlog logger
        category: Injected anomaly category
        fault: Top-ranked fault name
        probability: Its normalized probability (0-1)
        score: Anomaly score that crossed the threshold
    """
    logger.info(
        "anomaly_detected",
        severity="critical" if probability >= 0.5 else "warning",
        category=category,
        fault=fault,
        probability=round(probability, 3),
        score=round(score, 1),
        **extra
    )


def log_recovery_action(
    logger: structlog.BoundLogger,
    action: str,
    category: str,
    duration_ms: Optional[float] = None,
    **extra
):
    """Log the operator resolving an episode with ``action``."""
    logger.info(
        "recovery_action",
        action=action,
        category=category,
        status="completed",
        duration_ms=duration_ms,
        **extra
    )


def log_performance_metric(
    logger: structlog.BoundLogger,
    metric_name: str,
    value: float,
    unit: str = "ms",
    threshold: Optional[float] = None,
    **extra
):
    """Log a timing at debug level, or at warning level above ``threshold``."""
    alert = threshold is not None and value > threshold
    emit = logger.warning if alert else logger.debug
    emit(
        "performance_metric",
        metric=metric_name,
        value=round(value, 2),
        unit=unit,
        threshold=threshold,
        alert=alert,
        **extra
    )
