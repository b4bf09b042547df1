"""SQLAlchemy database models for crypto payment records."""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, Index, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class PaymentStatus(str, Enum):
    """Known payment statuses. The column itself is not constrained to these."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


def _new_payment_id() -> str:
    return str(uuid.uuid4())


class Payment(Base):
    """
    Payment records table.

    One row per payment attempt. Status is overwritten by inbound
    notifications; every other field is written once at creation.
    """

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_payment_id)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=PaymentStatus.PENDING.value, index=True
    )
    currency: Mapped[str | None] = mapped_column(String(10), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(36, 18), nullable=True)
    network: Mapped[str | None] = mapped_column(String(32), nullable=True)
    wallet_address: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("idx_payments_network_status", "network", "status"),
    )

    # Load generated timestamps on flush; lazy refresh is not possible under asyncio.
    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        """String representation of Payment."""
        return (
            f"<Payment(id={self.id}, amount={self.amount}, "
            f"currency={self.currency}, status={self.status})>"
        )
