"""Unit tests for the Ollama embedding provider."""

from unittest.mock import MagicMock

import pytest
import requests

from genre_recommender.embeddings import OllamaEmbeddingProvider, build_prompt
from genre_recommender.errors import EmbeddingProviderError


@pytest.fixture
def provider():
    provider = OllamaEmbeddingProvider({
        "url": "http://localhost:11434/api/embeddings",
        "model": "nomic-embed-text",
        "timeout_seconds": 5,
    })
    provider.session = MagicMock()
    return provider


def make_response(status_code=200, text='{"embedding": [0.1, 0.2]}'):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text
    response.content = text.encode()
    return response


class TestBuildPrompt:

    def test_joins_fields(self):
        assert build_prompt(["Frank Darabont", "Tim Robbins, Morgan Freeman"]) == (
            "Frank Darabont Tim Robbins, Morgan Freeman"
        )

    def test_skips_blank_fields(self):
        assert build_prompt(["", "  Cast  ", None]) == "Cast"


class TestOllamaEmbeddingProvider:
    """Tests for OllamaEmbeddingProvider."""

    def test_posts_model_and_prompt(self, provider):
        provider.session.post.return_value = make_response()

        body = provider.generate("Director Cast")

        assert body == '{"embedding": [0.1, 0.2]}'
        provider.session.post.assert_called_once_with(
            "http://localhost:11434/api/embeddings",
            json={"model": "nomic-embed-text", "prompt": "Director Cast"},
            timeout=5.0,
        )

    def test_timeout(self, provider):
        provider.session.post.side_effect = requests.Timeout("slow")

        with pytest.raises(EmbeddingProviderError, match="timed out"):
            provider.generate("prompt")

    def test_connection_error(self, provider):
        provider.session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(EmbeddingProviderError):
            provider.generate("prompt")

    def test_error_status(self, provider):
        provider.session.post.return_value = make_response(status_code=500, text="boom")

        with pytest.raises(EmbeddingProviderError, match="500"):
            provider.generate("prompt")

    def test_defaults_from_constants(self):
        provider = OllamaEmbeddingProvider()

        assert provider.model == "nomic-embed-text"
        assert provider.url.endswith("/api/embeddings")
