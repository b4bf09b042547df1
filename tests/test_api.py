"""
Integration tests for the HTTP API against an in-memory database.
"""
import base64
from typing import Any

import pytest
from httpx import AsyncClient
from prometheus_client import REGISTRY

from crypto_payments.api import routes
from crypto_payments.monitoring.health import HealthCheck

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestPaymentEndpoints:
    """Payment read endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_payment(self, client: AsyncClient, insert_payment: Any) -> None:
        await insert_payment(id="pay_1", currency="USDT", network="bsc", wallet_address="0xabc")

        response = await client.get("/payments/pay_1")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "pay_1"
        assert data["status"] == "pending"
        assert data["walletAddress"] == "0xabc"
        assert response.headers["X-Request-ID"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        [
            "/payments/missing",
            "/payments/missing/details",
            "/payments/missing/status",
            "/payments/missing/qr",
            "/payments/missing/qr-code",
            "/payments/reference/missing",
        ],
    )
    async def test_unknown_payment_returns_404(self, client: AsyncClient, path: str) -> None:
        response = await client.get(path)

        assert response.status_code == 404
        assert response.json() == {"detail": "Payment not found"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_payment_status(self, client: AsyncClient, insert_payment: Any) -> None:
        await insert_payment(id="pay_2", status="processing")

        response = await client.get("/payments/pay_2/status")

        assert response.status_code == 200
        assert response.json() == {"status": "processing"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_payment_by_reference(self, client: AsyncClient, insert_payment: Any) -> None:
        await insert_payment(id="ref_9")

        response = await client.get("/payments/reference/ref_9")

        assert response.status_code == 200
        assert response.json()["id"] == "ref_9"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_qr_image(self, client: AsyncClient, insert_payment: Any) -> None:
        await insert_payment(id="pay_qr")

        response = await client.get("/payments/pay_qr/qr")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(PNG_SIGNATURE)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_qr_code_json(self, client: AsyncClient, insert_payment: Any) -> None:
        await insert_payment(id="pay_qr")

        response = await client.get("/payments/pay_qr/qr-code")

        assert response.status_code == 200
        data = response.json()
        assert data["paymentUrl"] == "https://example.com/payment/pay_qr"
        assert base64.b64decode(data["qrCodeData"]).startswith(PNG_SIGNATURE)


class TestStaticEndpoints:
    """Networks, rates and placeholder endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_networks(self, client: AsyncClient) -> None:
        response = await client.get("/payments/networks")

        assert response.json() == ["ethereum", "polygon", "bsc"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_exchange_rates(self, client: AsyncClient) -> None:
        response = await client.get("/payments/exchange-rates")

        assert response.json() == {"ETH/USD": 3000, "MATIC/USD": 1.5, "BNB/USD": 400}
        assert response.text.replace(" ", "") == '{"ETH/USD":3000,"MATIC/USD":1.5,"BNB/USD":400}'

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_payment_is_not_stored(self, client: AsyncClient) -> None:
        response = await client.post(
            "/payments", json={"currency": "USD", "network": "polygon"}
        )

        assert response.status_code == 201
        assert response.json() == {"id": "stub", "currency": "USD", "network": "polygon"}
        assert (await client.get("/payments/stub")).status_code == 404

    @pytest.mark.integration
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"amount": -5},
            {"amount": "25.00", "currency": "USDT-LONGNAME"},
            {"amount": 0, "network": "unknown-chain", "extra": {"nested": [1, 2]}},
        ],
    )
    async def test_create_payment_echoes_any_body(self, client: AsyncClient, body: dict) -> None:
        response = await client.post("/payments", json=body)

        assert response.status_code == 201
        assert response.json() == {"id": "stub", **body}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_payments(self, client: AsyncClient) -> None:
        response = await client.get("/payments", params={"page": 2, "status": "completed"})

        assert response.json() == {"items": [], "total": 0, "page": 1, "limit": 10}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cancel_payment(self, client: AsyncClient, insert_payment: Any) -> None:
        await insert_payment(id="pay_c")

        response = await client.post("/payments/pay_c/cancel", json={"reason": "changed mind"})

        assert response.json() == {"status": "failed", "cancellationReason": "changed mind"}
        status_response = await client.get("/payments/pay_c/status")
        assert status_response.json() == {"status": "pending"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cancel_payment_without_body(self, client: AsyncClient) -> None:
        response = await client.post("/payments/pay_x/cancel")

        assert response.status_code == 200
        assert response.json() == {"status": "failed", "cancellationReason": None}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_receipt(self, client: AsyncClient) -> None:
        response = await client.get("/payments/anything/receipt")

        assert response.json() == {"id": "anything", "content": "Receipt stub"}


class TestWebhookEndpoint:
    """Status notifications over HTTP."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_completed_notification(self, client: AsyncClient, insert_payment: Any) -> None:
        await insert_payment(id="pay_w1", currency="DAI")
        before = REGISTRY.get_sample_value("payments_processed_total", {"currency": "DAI"}) or 0.0

        response = await client.post("/webhooks/payments/pay_w1", json={"status": "completed"})

        assert response.status_code == 200
        assert response.json() == {"status": "processed", "payment_id": "pay_w1"}
        assert (await client.get("/payments/pay_w1/status")).json() == {"status": "completed"}
        after = REGISTRY.get_sample_value("payments_processed_total", {"currency": "DAI"})
        assert after == before + 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_failed_notification_without_reason(
        self, client: AsyncClient, insert_payment: Any
    ) -> None:
        await insert_payment(id="pay_w2", currency="WETH")
        labels = {"currency": "WETH", "reason": "unknown"}
        before = REGISTRY.get_sample_value("payments_failed_total", labels) or 0.0

        await client.post("/webhooks/payments/pay_w2", json={"status": "failed"})

        assert REGISTRY.get_sample_value("payments_failed_total", labels) == before + 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upper_case_status_is_normalized(
        self, client: AsyncClient, insert_payment: Any
    ) -> None:
        await insert_payment(id="pay_w3", currency="SOL")
        before = REGISTRY.get_sample_value("payments_processed_total", {"currency": "SOL"}) or 0.0

        await client.post("/webhooks/payments/pay_w3", json={"status": "COMPLETED"})

        assert (await client.get("/payments/pay_w3/status")).json() == {"status": "completed"}
        after = REGISTRY.get_sample_value("payments_processed_total", {"currency": "SOL"})
        assert after == before + 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_notification_for_unknown_payment(self, client: AsyncClient) -> None:
        response = await client.post("/webhooks/payments/missing", json={"status": "completed"})

        assert response.status_code == 404


class TestMonitoringEndpoints:
    """Health and metrics endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health(
        self, client: AsyncClient, session_factory: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(routes, "health_check", HealthCheck(session_factory))

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient) -> None:
        response = await client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client: AsyncClient) -> None:
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "payments_processed_total" in response.text
