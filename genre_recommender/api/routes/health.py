"""Health and metrics endpoints."""

from datetime import datetime

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..schemas import HealthResponse


def register_health_routes(app, service) -> None:
    """Register health check and metrics routes.

    Args:
        app: FastAPI application instance
        service: RecommendationService instance
    """

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=service.metrics.get_metrics(),
            media_type=CONTENT_TYPE_LATEST
        )
