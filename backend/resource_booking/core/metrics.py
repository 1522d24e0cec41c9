"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking creation attempts',
    ['status']  # success, conflict, invalid, error
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking creation latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_status_changes = Counter(
    'booking_status_changes_total',
    'Booking status transitions applied by administrators',
    ['status']  # approved, rejected, cancelled
)

# Database metrics
db_retries = Counter(
    'db_retry_attempts_total',
    'Database retry attempts due to resource version conflicts'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

# Side effects
side_effect_failures = Counter(
    'side_effect_failures_total',
    'Notification and activity log writes that failed',
    ['kind']  # notification, activity_log, handler
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, conflict, invalid, error"""
    booking_attempts.labels(status=status).inc()


def record_status_change(status: str):
    booking_status_changes.labels(status=status).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()


def record_side_effect_failure(kind: str):
    side_effect_failures.labels(kind=kind).inc()
