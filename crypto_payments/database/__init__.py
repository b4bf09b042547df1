"""Database package for crypto payments."""
from .connection import close_db, get_db, get_session_factory, init_db
from .models import Base, Payment, PaymentStatus
from .repository import PaymentRepository

__all__ = [
    "Base",
    "Payment",
    "PaymentStatus",
    "PaymentRepository",
    "close_db",
    "get_db",
    "get_session_factory",
    "init_db",
]
