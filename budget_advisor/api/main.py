"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from budget_advisor.api.middleware import RequestIDMiddleware, MetricsMiddleware
from budget_advisor.api.v1 import recommendation, calculate, totals
from budget_advisor.infrastructure.observability.logging import setup_logging
from budget_advisor.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Budget Advisor",
        description="Monthly budget recommendations from household transaction history",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(recommendation.router, prefix="/v1", tags=["recommendations"])
    app.include_router(calculate.router, prefix="/v1", tags=["recommendations"])
    app.include_router(totals.router, prefix="/v1", tags=["totals"])

    return app


app = create_app()
