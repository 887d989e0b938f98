"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_operations = Counter(
    'booking_operations_total',
    'Booking lifecycle operations',
    ['operation']  # create, update, cancel, delete
)

sunbed_transitions = Counter(
    'sunbed_status_transitions_total',
    'Sunbed status changes',
    ['status']  # target status
)

# Zone metrics
zone_operations = Counter(
    'zone_operations_total',
    'Zone lifecycle operations',
    ['operation']  # add, resize, replace, rename, delete
)

# Occupancy metrics
occupancy_recomputes = Counter(
    'occupancy_recomputes_total',
    'Occupancy recomputations'
)

beach_occupancy = Gauge(
    'beach_occupancy_rate',
    'Current occupancy percentage per beach',
    ['beach_id']
)

# Notification metrics
notification_errors = Counter(
    'notification_publish_errors_total',
    'Change notifications that failed to publish'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_booking_operation(operation: str):
    booking_operations.labels(operation=operation).inc()


def record_sunbed_transition(status: str, count: int = 1):
    if count:
        sunbed_transitions.labels(status=status).inc(count)


def record_zone_operation(operation: str):
    zone_operations.labels(operation=operation).inc()


def record_occupancy(beach_id: int, occupancy_rate: int):
    """Record a recompute and publish the resulting rate."""
    occupancy_recomputes.inc()
    beach_occupancy.labels(beach_id=str(beach_id)).set(occupancy_rate)


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
