"""Similarity ranking."""

from .similarity import cosine_similarity, rank

__all__ = ["cosine_similarity", "rank"]
