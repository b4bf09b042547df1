"""
Prometheus metrics for payment monitoring.

Tracks:
- Payments completed, by currency
- Payments failed, by currency and reason
- Status notifications received, by status
"""
from prometheus_client import Counter

payments_processed_total = Counter(
    "payments_processed_total",
    "Total number of payments that reached the completed status",
    ["currency"],
)

payments_failed_total = Counter(
    "payments_failed_total",
    "Total number of payments that reached the failed status",
    ["currency", "reason"],
)

payment_notifications_total = Counter(
    "payment_notifications_total",
    "Total status notifications applied to payments",
    ["status"],
)


class PaymentMetrics:
    """Helper class for collecting payment metrics."""

    @staticmethod
    def increment_payment_processed(currency: str) -> None:
        """Record a completed payment."""
        payments_processed_total.labels(currency=currency).inc()

    @staticmethod
    def increment_payment_failed(currency: str, reason: str) -> None:
        """Record a failed payment."""
        payments_failed_total.labels(currency=currency, reason=reason).inc()

    @staticmethod
    def record_notification(status: str) -> None:
        """Record an applied status notification."""
        payment_notifications_total.labels(status=status).inc()


# Export singleton instance
metrics = PaymentMetrics()
