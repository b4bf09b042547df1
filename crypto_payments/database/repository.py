"""Payment store backed by an async SQLAlchemy session."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crypto_payments.database.models import Payment


class PaymentRepository:
    """
    Key-by-id persistence for payment records.

    find() returns None for an unknown id; deciding whether that is an
    error is up to the caller. save() flushes but does not commit, the
    session owner decides when the transaction ends.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, payment_id: str) -> Payment | None:
        """Fetch a payment by its identifier."""
        result = await self.session.execute(select(Payment).where(Payment.id == payment_id))
        return result.scalar_one_or_none()

    async def save(self, payment: Payment) -> None:
        """Insert or update a payment."""
        self.session.add(payment)
        await self.session.flush()
