"""FastAPI application and routes."""
from .main import app
from .schemas import (
    PaymentNotification,
    PaymentResponse,
    PaymentStatusResponse,
    QRCodeResponse,
)

__all__ = [
    "app",
    "PaymentNotification",
    "PaymentResponse",
    "PaymentStatusResponse",
    "QRCodeResponse",
]
