"""
Prometheus metrics for MentorHub.

Service timings come from ``@BaseService.measure_operation``. Domain
counters track booking outcomes, the per-mentor booking lock and
notification emission/delivery. Everything lives in a dedicated registry
exposed at ``/metrics``.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "mentorhub_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "mentorhub_service_operations_total",
    "Service operations by result",
    ["service", "operation", "status", "error_type"],
    registry=REGISTRY,
)

bookings_total = Counter(
    "mentorhub_bookings_total",
    "Booking attempts by outcome",
    ["outcome"],  # created | conflict
    registry=REGISTRY,
)

booking_lock_total = Counter(
    "mentorhub_booking_lock_total",
    "Per-mentor booking lock operations",
    ["operation", "outcome"],
    registry=REGISTRY,
)

notifications_total = Counter(
    "mentorhub_notifications_total",
    "Notification emits and deliveries by status",
    ["stage", "status", "notification_type"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so call sites never touch label plumbing."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(
            service=service,
            operation=operation,
            status="error" if error_type else "success",
            error_type=error_type or "",
        ).inc()

    @staticmethod
    def record_booking_outcome(outcome: str) -> None:
        bookings_total.labels(outcome=outcome).inc()

    @staticmethod
    def record_booking_lock(operation: str, outcome: str) -> None:
        booking_lock_total.labels(operation=operation, outcome=outcome).inc()

    @staticmethod
    def record_notification(stage: str, status: str, notification_type: str) -> None:
        notifications_total.labels(
            stage=stage, status=status, notification_type=notification_type
        ).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
