"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from cashflow_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cashflow_gateway.api.v1 import optimize, analytics
from cashflow_gateway.infrastructure.database.models import Base
from cashflow_gateway.infrastructure.database.session import engine
from cashflow_gateway.infrastructure.observability.logging import setup_logging
from cashflow_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Cash-Flow Settlement Gateway",
        description="Minimal settlement plans for inter-bank debts",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    Base.metadata.create_all(bind=engine)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(optimize.router, prefix="/v1", tags=["optimize"])
    app.include_router(analytics.router, prefix="/v1", tags=["analytics"])

    return app


app = create_app()
