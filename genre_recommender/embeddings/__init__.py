"""Embedding generation, encoding and the durable per-category cache."""

from .cache import (
    EmbeddingCache,
    EmbeddingCacheManager,
    EmbeddingResult,
    PopulateReport,
    normalize_name,
)
from .codec import (
    CACHE_HEADER,
    decode_line,
    decode_row,
    decode_vector,
    encode_row,
    encode_vector,
    parse_embedding_response,
)
from .provider import EmbeddingProvider, OllamaEmbeddingProvider, build_prompt

__all__ = [
    # Cache
    "EmbeddingCache",
    "EmbeddingCacheManager",
    "EmbeddingResult",
    "PopulateReport",
    "normalize_name",
    # Codec
    "CACHE_HEADER",
    "decode_line",
    "decode_row",
    "decode_vector",
    "encode_row",
    "encode_vector",
    "parse_embedding_response",
    # Providers
    "EmbeddingProvider",
    "OllamaEmbeddingProvider",
    "build_prompt",
]
