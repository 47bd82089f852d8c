"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finance_tracker.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finance_tracker.api.v1 import analytics, auth, transactions
from finance_tracker.infrastructure.database.session import init_db
from finance_tracker.infrastructure.observability.logging import setup_logging
from finance_tracker.config import settings

setup_logging(settings.log_level, settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Finance Tracker",
        description="Natural-language transaction entry and spending analytics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Last added runs first, so request ids exist before metrics observe
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
    app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])

    return app


app = create_app()
