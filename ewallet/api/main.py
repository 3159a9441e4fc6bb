"""FastAPI application: account routes plus readiness and Prometheus endpoints"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ewallet.api.middleware import AccessLogMiddleware, MetricsMiddleware
from ewallet.api.v1 import accounts
from ewallet.config import settings
from ewallet.infrastructure.database.session import check_database
from ewallet.infrastructure.observability.logging import setup_logging

setup_logging(settings.log_level, settings.log_format)


def create_app() -> FastAPI:
    app = FastAPI(
        title="E-Wallet Accounts",
        description="Payment and savings accounts with daily interest accrual",
        version="0.1.0",
    )

    # Access log wraps metrics so its duration covers the whole request
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(AccessLogMiddleware)

    @app.get("/health")
    def health_check():
        """Ready only while the account database answers"""
        if not check_database():
            return JSONResponse(
                status_code=503,
                content={"status": "unavailable", "service": settings.service_name, "database": "down"},
            )
        return {"status": "ok", "service": settings.service_name, "database": "up"}

    @app.get("/metrics", include_in_schema=False)
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])

    return app


app = create_app()
