"""
Payment record facade.

Reads payments from the store, reports their status, renders QR codes
for the payment page and applies inbound status notifications. Creation,
listing, cancellation and receipts are placeholders that return fixed
data without touching the store.
"""
import base64
from typing import Any, Dict, List, Mapping, Optional, Union

import structlog

from crypto_payments.config import get_settings
from crypto_payments.database.models import Payment, PaymentStatus
from crypto_payments.database.repository import PaymentRepository
from crypto_payments.integrations.qr_encoder import QRCodeEncoder
from crypto_payments.monitoring.logging import payment_context
from crypto_payments.monitoring.metrics import PaymentMetrics

logger = structlog.get_logger(__name__)

DEFAULT_CURRENCY = "USD"
UNKNOWN_FAILURE_REASON = "unknown"

SUPPORTED_NETWORKS = ("ethereum", "polygon", "bsc")

EXCHANGE_RATES: Dict[str, Union[int, float]] = {
    "ETH/USD": 3000,
    "MATIC/USD": 1.5,
    "BNB/USD": 400,
}


class PaymentError(Exception):
    """Base exception for payment errors."""

    pass


class PaymentNotFoundError(PaymentError):
    """Raised when no payment matches the given id or reference."""

    def __init__(self, message: str = "Payment not found"):
        super().__init__(message)


def _normalize_status(status: Any) -> Any:
    """Statuses are stored lower-case, whatever spelling the notifier uses."""
    if isinstance(status, PaymentStatus):
        return status.value
    if isinstance(status, str):
        return status.strip().lower()
    return status


class PaymentService:
    """
    Request-scoped facade over the payment store.

    Collaborators are injected so callers control the session lifetime and
    tests can substitute fakes.
    """

    def __init__(
        self,
        repository: PaymentRepository,
        metrics: PaymentMetrics,
        qr_encoder: QRCodeEncoder,
        payment_base_url: Optional[str] = None,
    ):
        """
        Initialize payment service.

        Args:
            repository: Payment store
            metrics: Metrics sink for processed/failed counters
            qr_encoder: Encoder turning a payment URL into a PNG
            payment_base_url: Base URL of payment pages (defaults to settings)
        """
        self.repository = repository
        self.metrics = metrics
        self.qr_encoder = qr_encoder
        base_url = payment_base_url or get_settings().payment_base_url
        self.payment_base_url = base_url.rstrip("/")

    def payment_url(self, payment_id: str) -> str:
        return f"{self.payment_base_url}/payment/{payment_id}"

    async def get_payment_details(self, payment_id: str) -> Payment:
        """
        Fetch a payment.

        Raises:
            PaymentNotFoundError: If no payment has this id
        """
        payment = await self.repository.find(payment_id)
        if payment is None:
            logger.info("payment_not_found", payment_id=payment_id)
            raise PaymentNotFoundError()
        return payment

    async def get_payment_status(self, payment_id: str) -> Dict[str, Any]:
        payment = await self.get_payment_details(payment_id)
        return {"status": payment.status}

    async def generate_qr(self, payment_id: str) -> bytes:
        """Render a PNG QR code pointing at the payment page."""
        await self.get_payment_details(payment_id)
        return await self.qr_encoder.encode(self.payment_url(payment_id))

    async def generate_qr_code(self, payment_id: str) -> Dict[str, str]:
        """Same as generate_qr, with the image base64-encoded next to its URL."""
        image = await self.generate_qr(payment_id)
        return {
            "qr_code_data": base64.b64encode(image).decode("ascii"),
            "payment_url": self.payment_url(payment_id),
        }

    async def handle_notify(self, payment_id: str, data: Mapping[str, Any]) -> None:
        """
        Apply a status notification to a payment.

        Any status overwrites any previous one; duplicates are applied again.
        Completed and failed statuses are counted per currency.

        Args:
            payment_id: Payment ID
            data: Notification body with optional "status" and "reason"

        Raises:
            PaymentNotFoundError: If no payment has this id
        """
        payment = await self.get_payment_details(payment_id)

        status = _normalize_status(data.get("status"))
        if not status:
            logger.info("payment_notification_ignored", payment_id=payment_id)
            return

        currency = payment.currency or DEFAULT_CURRENCY
        with payment_context(payment_id, currency):
            previous_status = payment.status
            payment.status = status
            await self.repository.save(payment)
            self.metrics.record_notification(str(status))
            logger.info(
                "payment_status_updated", previous_status=previous_status, status=status
            )

            if status == PaymentStatus.COMPLETED:
                self.metrics.increment_payment_processed(currency)
            elif status == PaymentStatus.FAILED:
                reason = data.get("reason") or UNKNOWN_FAILURE_REASON
                logger.warning("payment_failed", reason=reason)
                self.metrics.increment_payment_failed(currency, reason)

    def get_networks(self) -> List[str]:
        return list(SUPPORTED_NETWORKS)

    def get_exchange_rates(self) -> Dict[str, Union[int, float]]:
        return dict(EXCHANGE_RATES)

    # Placeholders: these return fixed data and never touch the store.

    async def create_payment(self, dto: Mapping[str, Any]) -> Dict[str, Any]:
        return {"id": "stub", **dto}

    async def get_payments(self, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return {
            "items": [],
            "total": 0,
            "page": 1,
            "limit": 10,
        }

    async def get_payment_by_id(self, payment_id: str) -> Payment:
        return await self.get_payment_details(payment_id)

    async def cancel_payment(self, payment_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        return {"status": PaymentStatus.FAILED.value, "cancellation_reason": reason}

    async def get_payment_by_reference(self, reference: str) -> Payment:
        """
        Fetch a payment by external reference.

        Payments carry no separate reference column, so the reference is
        looked up as the payment id.

        Raises:
            PaymentNotFoundError: If no payment matches
        """
        payment = await self.repository.find(reference)
        if payment is None:
            logger.info("payment_reference_not_found", reference=reference)
            raise PaymentNotFoundError()
        return payment

    async def generate_receipt(self, payment_id: str) -> Dict[str, Any]:
        return {"id": payment_id, "content": "Receipt stub"}
