"""Monitoring and observability package."""
from .health import HealthCheck
from .logging import setup_logging
from .metrics import PaymentMetrics, metrics

__all__ = ["metrics", "PaymentMetrics", "setup_logging", "HealthCheck"]
