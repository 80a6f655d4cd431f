"""Serving components for the recommender.

This module provides:
- RecommendationService: core business logic for recommendations
- run_server: server entry point

The HTTP layer lives in genre_recommender/api/.
"""

from .service import (
    RankedResult,
    RecommendationOutcome,
    RecommendationService,
    STATUS_NOT_FOUND,
    STATUS_OK,
    STATUS_UNAVAILABLE,
    format_percentage,
)
from .server import run_server

__all__ = [
    "RankedResult",
    "RecommendationOutcome",
    "RecommendationService",
    "STATUS_NOT_FOUND",
    "STATUS_OK",
    "STATUS_UNAVAILABLE",
    "format_percentage",
    "run_server",
]
