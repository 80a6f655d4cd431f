"""Recommendation endpoints."""

from typing import List, Optional

from fastapi import HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from loguru import logger

from ...errors import InvalidCategory
from ...serving import STATUS_UNAVAILABLE
from ..schemas import RecommendationItem


def register_recommendation_routes(app, service) -> None:
    """Register recommendation-related routes.

    Args:
        app: FastAPI application instance
        service: RecommendationService instance
    """

    @app.get("/api/recommend", response_model=List[RecommendationItem])
    async def get_recommendations(
        name: Optional[str] = Query(default=None, description="Reference item name"),
        genre: Optional[str] = Query(default=None, description="Category to search in"),
        count: int = Query(default=5, le=100, description="Number of recommendations"),
    ):
        """Get items of ``genre`` similar to ``name``.

        Returns:
            Recommended items, most similar first
        """
        if not name or not name.strip() or not genre or not genre.strip():
            raise HTTPException(
                status_code=400,
                detail="Missing required parameters: 'name' and 'genre'"
            )

        logger.info(f"Received request: name={name}, genre={genre}, count={count}")
        try:
            outcome = await run_in_threadpool(service.recommend, genre, name.strip(), count)
        except InvalidCategory as e:
            raise HTTPException(status_code=400, detail=str(e))

        if outcome.status == STATUS_UNAVAILABLE:
            raise HTTPException(status_code=503, detail="Recommendations unavailable.")
        if not outcome.results:
            raise HTTPException(status_code=404, detail="No recommendations found.")

        return outcome.to_dicts()
