"""FastAPI application factory for the income ledger API."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from src.api.middleware import SecurityHeadersMiddleware
from src.services.exceptions import (
    InvalidReportError,
    LedgerError,
    ReportNotFoundError,
    UnauthorizedError,
    VerifiedSenderNotFoundError,
    WalletNotFoundError,
)

# Rate limiter (shared instance)
limiter = Limiter(key_func=get_remote_address)

_ERROR_STATUS: dict[type[LedgerError], int] = {
    WalletNotFoundError: status.HTTP_404_NOT_FOUND,
    ReportNotFoundError: status.HTTP_404_NOT_FOUND,
    VerifiedSenderNotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    InvalidReportError: status.HTTP_400_BAD_REQUEST,
}


async def _ledger_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Provalo Income Ledger API",
        version="0.1.0",
        docs_url="/api/docs" if settings.api_debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.api_debug else None,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(LedgerError, _ledger_error_handler)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.api_cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["*"],
    )

    from src.api.routers.health import router as health_router
    from src.api.routers.reports import router as reports_router
    from src.api.routers.senders import router as senders_router
    from src.api.routers.transactions import router as transactions_router
    from src.api.routers.wallets import router as wallets_router

    app.include_router(health_router)
    app.include_router(transactions_router)
    app.include_router(senders_router)
    app.include_router(wallets_router)
    app.include_router(reports_router)

    return app
