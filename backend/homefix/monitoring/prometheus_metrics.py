"""
Prometheus metrics for HomeFix.

Metrics live in a custom registry so that test runs and multiple app
instances in one process do not collide with the default registry.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "homefix_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "homefix_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "homefix_errors_total",
    "Total number of failed service operations by error type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_transitions_total = Counter(
    "homefix_booking_transitions_total",
    "Booking transition attempts by target and outcome",
    ["target", "outcome"],
    registry=REGISTRY,
)

lock_operations_total = Counter(
    "homefix_lock_operations_total",
    "Distributed lock operations by scope, action and outcome",
    ["scope", "action", "outcome"],
    registry=REGISTRY,
)

side_effect_failures_total = Counter(
    "homefix_side_effect_failures_total",
    "Notification and realtime deliveries that failed after commit",
    ["channel"],
    registry=REGISTRY,
)

rating_recomputations_total = Counter(
    "homefix_rating_recomputations_total",
    "Full rating recomputations by projection",
    ["projection"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so call sites do not import individual collectors."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_transition(target: str, outcome: str) -> None:
        booking_transitions_total.labels(target=target, outcome=outcome).inc()

    @staticmethod
    def record_lock(scope: str, action: str, outcome: str) -> None:
        lock_operations_total.labels(scope=scope, action=action, outcome=outcome).inc()

    @staticmethod
    def record_side_effect_failure(channel: str) -> None:
        side_effect_failures_total.labels(channel=channel).inc()

    @staticmethod
    def record_rating_recomputation(projection: str) -> None:
        rating_recomputations_total.labels(projection=projection).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
