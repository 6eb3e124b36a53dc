"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fintrack.api.errors import register_exception_handlers
from fintrack.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fintrack.api.v1 import cards, invoices, purchases, subscriptions
from fintrack.infrastructure.database.session import init_db
from fintrack.infrastructure.observability.logging import setup_logging
from fintrack.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fintrack",
        description="Credit card ledger: purchases, installments, invoices and subscriptions",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if settings.storage_backend == "sql":
        init_db()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(cards.router, prefix="/v1", tags=["cards"])
    app.include_router(purchases.router, prefix="/v1", tags=["purchases"])
    app.include_router(invoices.router, prefix="/v1", tags=["invoices"])
    app.include_router(subscriptions.router, prefix="/v1", tags=["subscriptions"])

    return app


app = create_app()
