"""
FastAPI application for crypto payments.

Wires routers, CORS, per-request log context and the error mapping:
PaymentNotFoundError becomes 404, anything unhandled becomes 500.
"""
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crypto_payments import __version__
from crypto_payments.config import get_settings
from crypto_payments.core.payment_service import PaymentNotFoundError
from crypto_payments.database.connection import close_db, init_db
from crypto_payments.monitoring.logging import setup_logging

from .routes import monitoring_router, payment_router, webhook_router

setup_logging()
logger = structlog.get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, Any]:
    """Create tables on startup, dispose of the engine on shutdown."""
    logger.info("application_startup", version=__version__)
    await init_db()
    try:
        yield
    finally:
        await close_db()
        logger.info("application_shutdown")


app = FastAPI(
    title="Crypto Payments",
    description=(
        "Payment records for on-chain payments: status lookup, QR codes for the "
        "payment page, status notifications, supported networks and exchange rates."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next: Any) -> Response:
    """Tag every log line of a request with its id and echo the id back."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    started = time.perf_counter()

    with structlog.contextvars.bound_contextvars(
        request_id=request_id, method=request.method, path=request.url.path
    ):
        response = await call_next(request)
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )

    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(PaymentNotFoundError)
async def payment_not_found_handler(request: Request, exc: PaymentNotFoundError) -> JSONResponse:
    logger.warning("api_payment_not_found", path=request.url.path)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(payment_router)
app.include_router(webhook_router)
app.include_router(monitoring_router)


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "crypto_payments.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.api_workers,
        log_config=None,
    )


if __name__ == "__main__":
    run()
