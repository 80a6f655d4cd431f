"""Exception hierarchy for the recommendation pipeline.

Per-item failures (a bad cache row, a provider error for one candidate, a
vector of the wrong length) are caught at the batch boundary and reported as
diagnostics. Only failing to embed the reference item aborts a request.
"""


class RecommenderError(Exception):
    """Base class for all recommender errors."""


class InvalidCategory(RecommenderError):
    """Category name cannot be mapped to catalog/cache files."""


class ItemNotFound(RecommenderError):
    """Reference item is absent from the category's catalog."""

    def __init__(self, category: str, name: str):
        super().__init__(f"Item '{name}' not found in category '{category}'")
        self.category = category
        self.name = name


class MalformedCacheRow(RecommenderError):
    """A single durable cache row could not be decoded."""


class EmbeddingProviderError(RecommenderError):
    """Embedding for an item could not be obtained from the provider."""


class EmbeddingParseError(EmbeddingProviderError):
    """Provider responded, but no numeric vector could be extracted."""


class DimensionMismatch(RecommenderError):
    """Two vectors being compared have different lengths."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Vector length {actual} does not match {expected}")
        self.expected = expected
        self.actual = actual


class ZeroNormVector(RecommenderError):
    """Cosine similarity is undefined for a zero vector."""
