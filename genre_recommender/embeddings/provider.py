"""Embedding providers.

A provider turns prompt text into a raw response that contains the vector
somewhere inside a bracketed list; extraction happens in
``codec.parse_embedding_response``. The cache manager receives the provider
as a constructor argument, so tests can pass a deterministic stub.
"""

from typing import Any, Dict, Optional, Protocol, Sequence

import requests
from loguru import logger

from .. import constants
from ..errors import EmbeddingProviderError


class EmbeddingProvider(Protocol):
    """Anything that can turn prompt text into a raw embedding response."""

    def generate(self, prompt: str) -> str:
        ...


def build_prompt(fields: Sequence[str]) -> str:
    """Join the attribute fields used for embedding into one prompt."""
    return " ".join(str(f).strip() for f in fields if f is not None and str(f).strip())


class OllamaEmbeddingProvider:
    """Calls an Ollama-compatible ``/api/embeddings`` endpoint."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize the provider.

        Args:
            config: Embedding configuration (url, model, timeout_seconds)
        """
        self.config = config or {}
        self.url = self.config.get("url", constants.OLLAMA_URL)
        self.model = self.config.get("model", constants.EMBEDDING_MODEL)
        self.timeout = float(
            self.config.get("timeout_seconds", constants.EMBEDDING_TIMEOUT_SECONDS)
        )
        self.session = requests.Session()

    def generate(self, prompt: str) -> str:
        """Request an embedding for ``prompt`` and return the raw body.

        Raises:
            EmbeddingProviderError: transport failure, timeout or non-2xx status
        """
        payload = {"model": self.model, "prompt": prompt}
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise EmbeddingProviderError(
                f"Embedding request timed out after {self.timeout}s"
            ) from e
        except requests.RequestException as e:
            raise EmbeddingProviderError(f"Embedding request failed: {e}") from e

        if not response.ok:
            raise EmbeddingProviderError(
                f"Embedding endpoint returned status {response.status_code}"
            )

        logger.debug(f"Received embedding response ({len(response.content)} bytes)")
        return response.text

    def close(self):
        self.session.close()
