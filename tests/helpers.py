"""Shared test helpers: catalog writer and a deterministic provider."""

import csv
import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from genre_recommender.errors import EmbeddingProviderError


CATALOG_HEADER = [
    "Rank", "Title", "Genre", "Year", "Runtime", "Votes",
    "Rating", "Description", "Director", "Writers", "Actors",
]


def prompt_for(name: str) -> str:
    """Prompt text the service builds for an item written by write_catalog."""
    return f"Director of {name} Cast of {name}"


def write_catalog(directory: Path, category: str, names: Sequence[str]) -> Path:
    """Write a catalog CSV whose director/actors columns derive from the name."""
    path = directory / f"{category}.csv"
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CATALOG_HEADER)
        for i, name in enumerate(names, start=1):
            writer.writerow([
                i, name, category, 2000 + i, 120, 1000,
                f"{7 + i / 10:.1f}", f"About {name}",
                f"Director of {name}", "", f"Cast of {name}",
            ])
    return path


class StubProvider:
    """Deterministic embedding provider keyed by prompt text."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, failing=()):
        self.vectors = dict(vectors or {})
        self.failing = set(failing)
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def generate(self, prompt: str) -> str:
        with self._lock:
            self.calls.append(prompt)
        if prompt in self.failing:
            raise EmbeddingProviderError(f"stub failure for {prompt!r}")
        if prompt not in self.vectors:
            return "no vector here"
        return json.dumps({"embedding": self.vectors[prompt]})

    @classmethod
    def for_items(cls, vectors_by_name: Dict[str, List[float]], failing_names=()):
        """Build a stub keyed by item name instead of prompt text."""
        return cls(
            {prompt_for(name): vector for name, vector in vectors_by_name.items()},
            failing=[prompt_for(name) for name in failing_names],
        )
