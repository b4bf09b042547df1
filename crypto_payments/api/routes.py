"""
API routes for crypto payments.

PaymentNotFoundError raised by the service is turned into a 404 by the
exception handler registered in api.main.
"""
from typing import Any, Dict, List, Optional, Union

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.ext.asyncio import AsyncSession

from crypto_payments.core.payment_service import PaymentService
from crypto_payments.database.connection import get_db
from crypto_payments.database.models import Payment
from crypto_payments.database.repository import PaymentRepository
from crypto_payments.integrations.qr_encoder import QRCodeEncoder
from crypto_payments.monitoring.health import HealthCheck
from crypto_payments.monitoring.metrics import metrics

from .schemas import (
    CancelPaymentRequest,
    CancelPaymentResponse,
    HealthCheckResponse,
    NotificationResponse,
    PaymentListResponse,
    PaymentNotification,
    PaymentResponse,
    PaymentStatusResponse,
    QRCodeResponse,
    ReceiptResponse,
)

logger = structlog.get_logger(__name__)

# Create routers
payment_router = APIRouter(prefix="/payments", tags=["payments"])
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])
monitoring_router = APIRouter(tags=["monitoring"])

# Stateless collaborators shared across requests
qr_encoder = QRCodeEncoder()
health_check = HealthCheck()


def get_payment_service(db: AsyncSession = Depends(get_db)) -> PaymentService:
    """Build a request-scoped PaymentService around the request's session."""
    return PaymentService(
        repository=PaymentRepository(db),
        metrics=metrics,
        qr_encoder=qr_encoder,
    )


@payment_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a payment",
    description="Placeholder: echoes the request with a fixed id, nothing is stored",
)
async def create_payment(
    payload: Dict[str, Any] = Body(
        ...,
        examples=[{"amount": "25.00", "currency": "USD", "network": "polygon"}],
    ),
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Create a payment. The body is echoed back as sent."""
    logger.info("api_create_payment_request", fields=sorted(payload))
    return await service.create_payment(payload)


@payment_router.get(
    "",
    response_model=PaymentListResponse,
    summary="List payments",
)
async def list_payments(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    payment_status: Optional[str] = Query(default=None, alias="status"),
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """List payments."""
    filters = {"page": page, "limit": limit, "status": payment_status}
    return await service.get_payments(filters)


@payment_router.get("/networks", response_model=List[str], summary="Supported networks")
async def get_networks(service: PaymentService = Depends(get_payment_service)) -> List[str]:
    return service.get_networks()


@payment_router.get(
    "/exchange-rates", response_model=Dict[str, Union[int, float]], summary="Exchange rates"
)
async def get_exchange_rates(
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Union[int, float]]:
    return service.get_exchange_rates()


@payment_router.get(
    "/reference/{reference}",
    response_model=PaymentResponse,
    summary="Get payment by reference",
)
async def get_payment_by_reference(
    reference: str,
    service: PaymentService = Depends(get_payment_service),
) -> Payment:
    return await service.get_payment_by_reference(reference)


@payment_router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    summary="Get payment",
)
async def get_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Payment:
    return await service.get_payment_by_id(payment_id)


@payment_router.get(
    "/{payment_id}/details",
    response_model=PaymentResponse,
    summary="Get payment details",
)
async def get_payment_details(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Payment:
    return await service.get_payment_details(payment_id)


@payment_router.get(
    "/{payment_id}/status",
    response_model=PaymentStatusResponse,
    summary="Get payment status",
)
async def get_payment_status(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    return await service.get_payment_status(payment_id)


@payment_router.get(
    "/{payment_id}/qr",
    summary="Payment QR code image",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_payment_qr(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Response:
    """Render the payment page URL as a PNG QR code."""
    image = await service.generate_qr(payment_id)
    return Response(content=image, media_type="image/png")


@payment_router.get(
    "/{payment_id}/qr-code",
    response_model=QRCodeResponse,
    summary="Payment QR code as base64",
)
async def get_payment_qr_code(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, str]:
    return await service.generate_qr_code(payment_id)


@payment_router.post(
    "/{payment_id}/cancel",
    response_model=CancelPaymentResponse,
    summary="Cancel a payment",
    description="Placeholder: the stored payment is not modified",
)
async def cancel_payment(
    payment_id: str,
    request: Optional[CancelPaymentRequest] = None,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    reason = request.reason if request else None
    logger.info("api_cancel_payment_request", payment_id=payment_id, reason=reason)
    return await service.cancel_payment(payment_id, reason)


@payment_router.get(
    "/{payment_id}/receipt",
    response_model=ReceiptResponse,
    summary="Payment receipt",
)
async def get_receipt(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    return await service.generate_receipt(payment_id)


@webhook_router.post(
    "/payments/{payment_id}",
    response_model=NotificationResponse,
    summary="Payment status notification",
    description="Apply a status update sent by the payment network watcher",
)
async def payment_notification(
    payment_id: str,
    notification: PaymentNotification,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Handle a payment status notification."""
    logger.info(
        "api_payment_notification_received",
        payment_id=payment_id,
        status=notification.status,
    )
    await service.handle_notify(payment_id, notification.model_dump(exclude_none=True))
    return {"status": "processed", "payment_id": payment_id}


@monitoring_router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Check overall system health",
)
async def health() -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    return await health_check.check_all()


@monitoring_router.get(
    "/health/live",
    response_model=HealthCheckResponse,
    summary="Liveness check",
)
async def liveness() -> Dict[str, Any]:
    return await health_check.liveness()


@monitoring_router.get(
    "/health/ready",
    response_model=HealthCheckResponse,
    summary="Readiness check",
)
async def readiness() -> Dict[str, Any]:
    """Readiness check endpoint."""
    result = await health_check.readiness()
    if result["status"] != "healthy":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result)
    return result


@monitoring_router.get(
    "/metrics",
    summary="Prometheus metrics",
    include_in_schema=False,
)
async def prometheus_metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
