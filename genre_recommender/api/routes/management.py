"""Management endpoints for the embedding cache."""

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool

from ...errors import InvalidCategory
from ..schemas import CacheWarmResponse, StatusResponse


def register_management_routes(app, service) -> None:
    """Register embedding cache management routes.

    Args:
        app: FastAPI application instance
        service: RecommendationService instance
    """

    @app.post("/cache/{genre}/warm", response_model=CacheWarmResponse)
    async def warm_cache(genre: str):
        """Generate embeddings for every uncached item of a genre.

        Returns:
            Counts of generated and already cached items, plus failures
        """
        try:
            report = await run_in_threadpool(service.warm_cache, genre)
        except InvalidCategory as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {
            "status": "success",
            "category": report.category,
            "generated": len(report.generated),
            "already_cached": report.already_cached,
            "failures": report.diagnostics,
        }

    @app.post("/cache/{genre}/invalidate", response_model=StatusResponse)
    async def invalidate_cache(genre: str):
        """Drop the in-memory embeddings of a genre; the cache file is kept."""
        try:
            dropped = service.invalidate_cache(genre)
        except InvalidCategory as e:
            raise HTTPException(status_code=400, detail=str(e))
        message = "Cache invalidated" if dropped else "Cache was not loaded"
        return {"status": "success", "message": message}
