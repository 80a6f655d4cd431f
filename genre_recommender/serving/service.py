"""Recommendation service business logic.

This module contains the RecommendationService that turns
``(category, reference item, count)`` into ranked similar items. The API
layer (genre_recommender/api/) and the CLI call this service.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from ..catalog import CatalogEntry, CsvCatalog, validate_category
from ..config import get_config
from ..embeddings import (
    EmbeddingCacheManager,
    EmbeddingProvider,
    OllamaEmbeddingProvider,
    PopulateReport,
    build_prompt,
)
from ..errors import EmbeddingProviderError, ItemNotFound
from ..monitoring import MetricsCollector
from ..ranking import rank


STATUS_OK = "ok"
STATUS_NOT_FOUND = "not_found"
STATUS_UNAVAILABLE = "unavailable"


def format_percentage(score: float) -> str:
    """Raw cosine score scaled by 100, sign preserved: 0.5 -> '50.00%'.

    Scores that round to zero print as '0.00%', never '-0.00%'.
    """
    return f"{round(score * 100, 2) + 0.0:.2f}%"


@dataclass
class RankedResult:
    """One recommended item with its similarity to the reference."""

    name: str
    score: float
    entry: CatalogEntry

    @property
    def similarity_percentage(self) -> str:
        return format_percentage(self.score)

    def to_dict(self) -> Dict[str, Any]:
        result = self.entry.to_dict()
        result["similarity"] = self.score
        result["similarityPercentage"] = self.similarity_percentage
        return result


@dataclass
class RecommendationOutcome:
    """Result of one recommend() call.

    ``not_found`` and ``unavailable`` both carry no results, but only
    ``unavailable`` means something went wrong.
    """

    category: str
    reference_name: str
    status: str = STATUS_OK
    results: List[RankedResult] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.results]


class RecommendationService:
    """Main recommendation service.

    This service handles:
    - Reference item lookup in the category catalog
    - Embedding resolution through the durable cache
    - Cosine ranking against the rest of the category
    - Joining ranked names back to catalog details
    """

    def __init__(
        self,
        catalog: Optional[CsvCatalog] = None,
        cache_manager: Optional[EmbeddingCacheManager] = None,
        provider: Optional[EmbeddingProvider] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """Initialize recommendation service.

        Components not passed in are built from the global configuration.

        Args:
            catalog: Catalog collaborator
            cache_manager: Embedding cache manager
            provider: Embedding provider, used only when cache_manager is
                not given
            metrics: Metrics collector
        """
        self.config = get_config()
        self.metrics = metrics or MetricsCollector()
        self.catalog = catalog or CsvCatalog(self.config.get("storage.data_dir"))

        if cache_manager is None:
            embedding_config = self.config.get("embedding", {})
            provider = provider or OllamaEmbeddingProvider(embedding_config)
            timeout = float(embedding_config.get("timeout_seconds", 30))
            cache_manager = EmbeddingCacheManager(
                provider,
                cache_dir=self.config.get("storage.cache_dir"),
                wait_timeout=timeout * 2,
                metrics=self.metrics,
            )
        self.cache_manager = cache_manager

    def recommend(self, category: str, reference_name: str, k: int) -> RecommendationOutcome:
        """Recommend up to k items of ``category`` similar to ``reference_name``.

        Args:
            category: Category (genre) name
            reference_name: Name of the reference item (case-insensitive)
            k: Number of results requested

        Returns:
            RecommendationOutcome; status is ``not_found`` when the reference
            item is unknown and ``unavailable`` when its embedding cannot be
            obtained

        Raises:
            InvalidCategory: category name is not usable as a file name
        """
        start_time = time.time()
        category = validate_category(category)
        outcome = RecommendationOutcome(category=category, reference_name=reference_name)

        logger.info(f"Searching for '{reference_name}' in category '{category}'")
        try:
            reference = self.catalog.get(category, reference_name)
        except ItemNotFound as e:
            logger.info(str(e))
            outcome.status = STATUS_NOT_FOUND
            return self._finish(outcome, start_time)

        with self.metrics.stage_timer("reference_embedding"):
            try:
                query_vector = self.cache_manager.get_or_create(
                    category, reference.name, build_prompt(reference.prompt_fields)
                )
            except EmbeddingProviderError as e:
                logger.error(f"Recommendations unavailable for '{reference.name}': {e}")
                outcome.status = STATUS_UNAVAILABLE
                outcome.diagnostics.append(f"{reference.name}: {e}")
                return self._finish(outcome, start_time)

        entries = self.catalog.list_all(category)
        with self.metrics.stage_timer("populate"):
            report = self.cache_manager.populate(category, entries)
        cache = self.cache_manager.load(category)
        outcome.diagnostics.extend(cache.diagnostics)
        outcome.diagnostics.extend(report.diagnostics)

        # Only items still present in the catalog are candidates.
        catalog_index: Dict[str, CatalogEntry] = {}
        for entry in entries:
            catalog_index.setdefault(entry.name.casefold(), entry)
        candidates = {
            name: vector for name, vector in cache.items()
            if name.casefold() in catalog_index
        }

        skipped = []
        with self.metrics.stage_timer("ranking"):
            ranked = rank(query_vector, candidates, reference.name, k, skipped=skipped)
        for name, reason in skipped:
            self.metrics.record_error("UnscorableCandidate", "ranking")
            outcome.diagnostics.append(f"{name}: {reason}")

        for name, score in ranked:
            entry = catalog_index[name.casefold()]
            outcome.results.append(RankedResult(name=entry.name, score=score, entry=entry))

        logger.info(
            f"Generated {len(outcome.results)} recommendations for '{reference.name}' "
            f"({len(outcome.diagnostics)} diagnostics)"
        )
        return self._finish(outcome, start_time)

    def warm_cache(self, category: str) -> PopulateReport:
        """Generate embeddings for every uncached item of the category."""
        category = validate_category(category)
        return self.cache_manager.populate(category, self.catalog.list_all(category))

    def invalidate_cache(self, category: str) -> bool:
        """Drop the category's in-memory embeddings (the file is kept)."""
        return self.cache_manager.invalidate(validate_category(category))

    def _finish(self, outcome: RecommendationOutcome, start_time: float) -> RecommendationOutcome:
        self.metrics.record_recommendation(outcome.status, time.time() - start_time)
        return outcome
