"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from mca_servicing.api.middleware import RequestIDMiddleware, MetricsMiddleware
from mca_servicing.api.v1 import fundings, payback_plans, paybacks, schedule
from mca_servicing.infrastructure.observability.logging import setup_logging
from mca_servicing.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="MCA Servicing Gateway",
        description="Payback plan scheduling and payback generation for MCA fundings",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

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

    # Register API routers (schedule preview before the {plan_id} routes)
    app.include_router(schedule.router, prefix="/v1", tags=["schedule"])
    app.include_router(fundings.router, prefix="/v1", tags=["fundings"])
    app.include_router(payback_plans.router, prefix="/v1", tags=["payback-plans"])
    app.include_router(paybacks.router, prefix="/v1", tags=["paybacks"])

    return app


app = create_app()
