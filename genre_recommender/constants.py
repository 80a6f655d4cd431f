"""Centralized constants and default configuration values.

Values that may change between environments can be overridden through
environment variables; the YAML config takes precedence over these defaults
when present (see genre_recommender.config).
"""

import os


# =============================================================================
# Storage
# =============================================================================

# Directory holding one catalog CSV per category (e.g. data/Drama.csv)
DATA_DIR = os.getenv("RECOMMENDER_DATA_DIR", "data")

# Directory holding one embedding cache per category (e.g. data/Drama_embeddings.csv)
CACHE_DIR = os.getenv("RECOMMENDER_CACHE_DIR", DATA_DIR)

CATALOG_SUFFIX = ".csv"
CACHE_SUFFIX = "_embeddings.csv"


# =============================================================================
# Catalog column positions
# =============================================================================

NAME_COLUMN = 1
RATING_COLUMN = 6
DESCRIPTION_COLUMN = 7
CREATOR_COLUMN = 8
CONTRIBUTORS_COLUMN = 10
MIN_CATALOG_COLUMNS = CONTRIBUTORS_COLUMN + 1


# =============================================================================
# Embedding provider
# =============================================================================

OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434/api/embeddings")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "nomic-embed-text")
EMBEDDING_TIMEOUT_SECONDS = float(os.getenv("EMBEDDING_TIMEOUT", "30"))


# =============================================================================
# API & Serving
# =============================================================================

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8080"))
DEFAULT_RECOMMENDATION_COUNT = 5
MAX_RECOMMENDATION_COUNT = 100

# Category names become file names
CATEGORY_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9 _\-]{0,63}$"
