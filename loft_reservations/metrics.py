"""
Prometheus metrics for reservation validation, creation and status changes.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., reservations created)
    - Histogram: Observations bucketed by value (e.g., query latency)

Example:
    >>> from loft_reservations.metrics import reservation_validations
    >>> reservation_validations.labels(outcome="valid").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Reservation Metrics
# =============================================================================

reservation_validations = Counter(
    "loft_reservation_validations_total",
    "Total reservation validations by outcome",
    ["outcome"],
)
"""
Counter for validation pipeline runs.

Labels:
    outcome: valid, invalid_input, loft_rejected, pricing_failed, invalid, error
"""

reservations_created = Counter(
    "loft_reservations_created_total",
    "Total reservations persisted",
    ["booking_source"],
)

reservation_create_failures = Counter(
    "loft_reservation_create_failures_total",
    "Reservation creations that did not persist a row",
    ["reason"],
)
"""
Labels:
    reason: validation, foreign_key, unique, exclusion, unknown, error
"""

availability_checks = Counter(
    "loft_availability_checks_total",
    "Availability checks against existing reservations",
    ["result"],
)
"""
Labels:
    result: available, conflict, error
"""

status_transitions = Counter(
    "loft_reservation_status_transitions_total",
    "Reservation status change attempts",
    ["target", "result"],
)
"""
Labels:
    target: Requested status (confirmed, cancelled, ...)
    result: applied, rejected, error
"""

# =============================================================================
# Database Metrics
# =============================================================================

db_query_duration = Histogram(
    "loft_db_query_duration_seconds",
    "Database query execution time in seconds",
    ["operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, float("inf")),
)
"""
Histogram for database query duration.

Labels:
    operation: get_loft, conflict_check, insert, lookup, update_status, cancel

Buckets: 0.01s, 0.05s, 0.1s, 0.25s, 0.5s, 1s, 2.5s, 5s, +Inf
"""
