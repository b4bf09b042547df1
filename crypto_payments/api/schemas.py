"""
Pydantic schemas for API request/response models.

Responses are serialized with camelCase keys.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that accepts snake_case and emits camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaymentResponse(CamelModel):
    """Response schema for a stored payment."""

    id: str = Field(..., description="Payment ID")
    status: str = Field(..., description="Payment status")
    currency: Optional[str] = Field(default=None, description="Currency code")
    amount: Optional[Decimal] = Field(default=None, description="Payment amount")
    network: Optional[str] = Field(default=None, description="Blockchain network")
    wallet_address: Optional[str] = Field(default=None, description="Receiving wallet address")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class PaymentStatusResponse(CamelModel):
    """Response schema for payment status."""

    status: str = Field(..., description="Payment status")


class QRCodeResponse(CamelModel):
    """Response schema for a base64 QR code."""

    qr_code_data: str = Field(..., description="Base64-encoded PNG")
    payment_url: str = Field(..., description="URL encoded in the QR code")


class PaymentListResponse(CamelModel):
    """Paginated payment list."""

    items: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = Field(..., description="Total matching payments")
    page: int = Field(..., description="Page number")
    limit: int = Field(..., description="Page size")


class CancelPaymentRequest(BaseModel):
    """Request schema for cancelling a payment."""

    reason: Optional[str] = Field(default=None, description="Cancellation reason")


class CancelPaymentResponse(CamelModel):
    """Response schema for a cancellation."""

    status: str = Field(..., description="Payment status after cancellation")
    cancellation_reason: Optional[str] = Field(default=None, description="Cancellation reason")


class ReceiptResponse(CamelModel):
    """Response schema for a receipt."""

    id: str = Field(..., description="Payment ID")
    content: str = Field(..., description="Receipt content")


class PaymentNotification(BaseModel):
    """Webhook body carrying a payment status update."""

    status: Optional[str] = Field(
        default=None,
        description="New payment status, case-insensitive; stored lower-case (e.g. completed, failed)",
    )
    reason: Optional[str] = Field(default=None, description="Failure reason")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"status": "completed"},
                {"status": "failed", "reason": "timeout"},
            ]
        }
    )


class NotificationResponse(BaseModel):
    """Response schema for webhook processing."""

    status: str = Field(..., description="Processing status")
    payment_id: str = Field(..., description="Payment ID")


class HealthCheckResponse(BaseModel):
    """Response schema for health checks."""

    status: str = Field(..., description="Overall health status (healthy/unhealthy)")
    checks: Optional[Dict[str, Any]] = Field(default=None, description="Individual service checks")
    message: Optional[str] = Field(default=None, description="Status message")
