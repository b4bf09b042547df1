"""Core payment logic."""
from .payment_service import PaymentError, PaymentNotFoundError, PaymentService

__all__ = ["PaymentError", "PaymentNotFoundError", "PaymentService"]
