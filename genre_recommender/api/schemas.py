"""Pydantic schemas for API responses."""

from typing import List, Optional

from pydantic import BaseModel, Field


class RecommendationItem(BaseModel):
    """Single recommended item."""

    name: str
    rating: str
    description: str
    creator: str
    contributors: str
    similarity: float = Field(..., description="Raw cosine similarity in [-1, 1]")
    similarityPercentage: str = Field(..., description="Similarity x 100, e.g. '87.50%'")


class CacheWarmResponse(BaseModel):
    """Result of warming a category's embedding cache."""

    status: str
    category: str
    generated: int
    already_cached: int
    failures: List[str]


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    timestamp: str


class StatusResponse(BaseModel):
    """Generic status response."""

    status: str
    message: Optional[str] = None
