"""FastAPI application factory.

This module provides the main application factory that assembles
all routes and middleware into a complete FastAPI application.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .routes import (
    register_health_routes,
    register_recommendation_routes,
    register_management_routes,
)
from ..serving.service import RecommendationService


# Global service instance, created on first use
_service: Optional[RecommendationService] = None


def get_service() -> RecommendationService:
    """Get the global service instance.

    Returns:
        RecommendationService instance
    """
    global _service
    if _service is None:
        _service = RecommendationService()
    return _service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting genre recommender...")
    yield
    logger.info("Shutting down genre recommender...")


def create_app(service: Optional[RecommendationService] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with:
    - CORS middleware configured
    - All routes registered
    - Lifespan manager for startup/shutdown

    Args:
        service: Service to serve; defaults to the global instance

    Returns:
        Configured FastAPI application instance
    """
    service = service or get_service()

    app = FastAPI(
        title="Genre Recommender",
        description="Similar-item recommendations from cached text embeddings",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_health_routes(app, service)
    register_recommendation_routes(app, service)
    register_management_routes(app, service)

    logger.info("FastAPI application created with all routes registered")

    return app
