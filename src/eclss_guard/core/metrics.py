"""
Prometheus Metrics for ECLSS Guard

Exposes in-process metrics for:
- Telemetry ticks and anomaly score
- Anomaly injections and diagnosis episodes
- Speech announcements
"""

from prometheus_client import (
    Counter, Gauge, Histogram,
    CollectorRegistry, generate_latest,
)

# Dedicated registry so repeated imports in tests do not collide with the default one
REGISTRY = CollectorRegistry()

# ============================================================================
# Telemetry Metrics
# ============================================================================

TELEMETRY_TICKS_TOTAL = Counter(
    'eclss_guard_telemetry_ticks_total',
    'Total telemetry ticks processed',
    registry=REGISTRY
)

TICK_DURATION_SECONDS = Histogram(
    'eclss_guard_tick_duration_seconds',
    'Time spent generating, scoring and evaluating one tick',
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
    registry=REGISTRY
)

ANOMALY_SCORE = Gauge(
    'eclss_guard_anomaly_score',
    'Most recent anomaly score (0-100)',
    registry=REGISTRY
)

# ============================================================================
# Diagnosis Metrics
# ============================================================================

ANOMALY_INJECTIONS_TOTAL = Counter(
    'eclss_guard_anomaly_injections_total',
    'Anomaly injection commands by outcome',
    ['category', 'outcome'],  # outcome: 'accepted' or 'rejected'
    registry=REGISTRY
)

DIAGNOSIS_EPISODES_TOTAL = Counter(
    'eclss_guard_diagnosis_episodes_total',
    'Diagnosis episodes opened',
    ['category', 'top_fault'],
    registry=REGISTRY
)

RESOLUTIONS_TOTAL = Counter(
    'eclss_guard_resolutions_total',
    'Diagnosis episodes resolved by the operator',
    ['category'],
    registry=REGISTRY
)

# ============================================================================
# Speech Metrics
# ============================================================================

SPEECH_UTTERANCES_TOTAL = Counter(
    'eclss_guard_speech_utterances_total',
    'Utterances by terminal outcome',
    ['outcome'],  # completed, canceled, errored, unavailable
    registry=REGISTRY
)


def get_metrics_text() -> str:
    """Get all metrics in Prometheus text format"""
    return generate_latest(REGISTRY).decode('utf-8')
