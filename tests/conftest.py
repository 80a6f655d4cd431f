"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root and tests dir to path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from genre_recommender.config import reset_config
from genre_recommender.monitoring import MetricsCollector
from helpers import StubProvider


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config at a temp directory for every test."""
    monkeypatch.setenv("RECOMMENDER_CONFIG", str(tmp_path / "missing-config.yaml"))
    monkeypatch.setenv("RECOMMENDER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("RECOMMENDER_CACHE_DIR", str(tmp_path))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def data_dir(tmp_path):
    """Directory holding catalog and cache files."""
    return tmp_path


@pytest.fixture
def stub_provider():
    return StubProvider()


@pytest.fixture
def metrics():
    return MetricsCollector()
