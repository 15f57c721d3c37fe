"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ledgerly.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ledgerly.api.v1 import balances, debts
from ledgerly.domain.exceptions import (
    AccountServiceError,
    AlreadySettledError,
    ConflictError,
    DomainException,
    NotFoundError,
    OverpaymentError,
    TransactionServiceError,
    ValidationError,
)
from ledgerly.infrastructure.observability.logging import setup_logging
from ledgerly.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# First match wins, so subclasses go before their bases
ERROR_STATUS_CODES = [
    (ValidationError, 422),
    (OverpaymentError, 422),
    (NotFoundError, 404),
    (AlreadySettledError, 409),
    (ConflictError, 409),
    (TransactionServiceError, 503),
    (AccountServiceError, 503),
]


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Translate domain errors into JSON error responses"""
    status_code = next((code for cls, code in ERROR_STATUS_CODES if isinstance(exc, cls)), 400)
    content = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, ValidationError) and exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=status_code, content=content)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Ledgerly Debts",
        description="Debt ledger: installments, catch-up, repayments and balances",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(debts.router, prefix="/v1", tags=["debts"])
    app.include_router(balances.router, prefix="/v1", tags=["balances"])

    return app


app = create_app()
