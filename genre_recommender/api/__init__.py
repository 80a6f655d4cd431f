"""HTTP API for the genre recommender.

Routes are organized into submodules:

- routes/health.py: Health checks and metrics
- routes/recommendations.py: Similar-item recommendations
- routes/management.py: Embedding cache management

Usage:
    from genre_recommender.api import create_app
    app = create_app()
"""

from .app import create_app, get_service
from .schemas import (
    CacheWarmResponse,
    HealthResponse,
    RecommendationItem,
    StatusResponse,
)

__all__ = [
    # App factory
    "create_app",
    "get_service",
    # Schemas
    "CacheWarmResponse",
    "HealthResponse",
    "RecommendationItem",
    "StatusResponse",
]
