"""
StayPulse FastAPI Application
=============================

REST API over the review dashboard controller.

Endpoints:
    GET   /api/health                              - Health check
    GET   /api/dashboard                           - Filtered dashboard views
    POST  /api/dashboard/refresh                   - Reload reviews
    GET   /api/dashboard/approved                  - Approved reviews
    PATCH /api/dashboard/reviews/{id}/approval     - Toggle approval
    PATCH /api/dashboard/reviews/approval/bulk     - Bulk approval

Usage:
    uvicorn staypulse.api.main:app --reload --port 8080

    Or:
    python -m staypulse.api.main
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from typing import Optional

from ..data.config import get_settings
from ..data.reviews_client import ReviewsApiClient
from ..orchestrator.dashboard_state import ReviewDashboard
from ..orchestrator.logging_config import setup_logging_from_settings
from .dashboard_routes import router as dashboard_router
from .models import HealthResponse

logger = logging.getLogger(__name__)


def create_app(dashboard: Optional[ReviewDashboard] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        dashboard: Controller to serve; a service-backed one is created
            from settings when omitted.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting StayPulse API ({settings.environment})...")
        yield
        logger.info("Shutting down StayPulse API...")

    app = FastAPI(
        title="StayPulse API",
        description="Guest review dashboard: normalized reviews, filters and derived metrics",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.state.dashboard = dashboard or ReviewDashboard(ReviewsApiClient.from_settings(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(dashboard_router)

    @app.get("/api/health", response_model=HealthResponse)
    def health_check():
        """Controller state summary; does not call the upstream service."""
        state: ReviewDashboard = app.state.dashboard
        return HealthResponse(
            status="degraded" if state.error else "healthy",
            version=settings.app_version,
            environment=settings.environment,
            reviews_loaded=len(state.reviews),
            last_generated_at=state.last_generated_at,
            error=state.error,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    setup_logging_from_settings()
    cfg = get_settings().api

    print("=" * 60)
    print("STAYPULSE API SERVER")
    print("=" * 60)
    print(f"Starting server at http://{cfg.host}:{cfg.port}")
    print(f"  - Swagger UI: http://{cfg.host}:{cfg.port}/docs")
    print("=" * 60)

    uvicorn.run(
        "staypulse.api.main:app",
        host=cfg.host,
        port=cfg.port,
        reload=not get_settings().is_production(),
        log_level="info",
    )
