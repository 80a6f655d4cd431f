"""Genre-scoped similar-item recommender built on cached text embeddings."""

__version__ = "1.0.0"
