"""Durable per-category embedding cache.

One append-only CSV file per category holds every vector generated so far.
The file is read once per process on first use; afterwards lookups are served
from memory and each newly generated vector is appended to the file.

Concurrency:
    * at most one provider call is in flight per (category, item); other
      callers for the same item wait for that call and share its result
    * reading and appending one category's file are serialized by a
      per-category lock owned by the manager, so invalidating the in-memory
      cache never splits an item's generation or a file's writers in two
    * an entry becomes visible in memory as a single dict assignment
"""

import os
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
from loguru import logger

from .. import constants
from ..errors import EmbeddingProviderError, MalformedCacheRow, RecommenderError
from ..monitoring import MetricsCollector
from .codec import CACHE_HEADER, decode_line, decode_row, encode_row, is_header, parse_embedding_response
from .provider import EmbeddingProvider, build_prompt


def normalize_name(name: str) -> str:
    """Cache key for an item name (case-insensitive)."""
    return name.strip().casefold()


@dataclass
class EmbeddingResult:
    """Tagged outcome of resolving one item's vector."""

    name: str
    vector: Optional[np.ndarray] = None
    error: Optional[RecommenderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.vector is not None


@dataclass
class PopulateReport:
    """Summary of a populate pass over a category."""

    category: str
    already_cached: int = 0
    generated: List[str] = field(default_factory=list)
    failures: List[EmbeddingResult] = field(default_factory=list)

    @property
    def diagnostics(self) -> List[str]:
        return [f"{r.name}: {r.error}" for r in self.failures]


class EmbeddingCache:
    """In-memory view of one category's cache file."""

    def __init__(self, category: str, path: Path):
        self.category = category
        self.path = path
        self.diagnostics: List[str] = []
        # normalized name -> (display name, vector)
        self._entries: Dict[str, Tuple[str, np.ndarray]] = {}

    def get(self, name: str) -> Optional[np.ndarray]:
        entry = self._entries.get(normalize_name(name))
        return entry[1] if entry is not None else None

    def put(self, name: str, vector: np.ndarray):
        vector = np.array(vector, dtype=np.float64)
        vector.setflags(write=False)
        self._entries[normalize_name(name)] = (name.strip(), vector)

    def items(self) -> List[Tuple[str, np.ndarray]]:
        """Snapshot of ``(display name, vector)`` pairs."""
        return list(self._entries.values())

    def as_mapping(self) -> Dict[str, np.ndarray]:
        return {name: vector for name, vector in self.items()}

    def __contains__(self, name: str) -> bool:
        return normalize_name(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class EmbeddingCacheManager:
    """Owns the embedding cache of every category seen by this process."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        cache_dir: str = constants.CACHE_DIR,
        wait_timeout: Optional[float] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """Initialize the cache manager.

        Args:
            provider: Embedding provider used on cache misses
            cache_dir: Directory holding ``<category>_embeddings.csv`` files
            wait_timeout: Seconds a caller waits for another caller's
                in-flight generation of the same item (None waits forever)
            metrics: Optional metrics collector
        """
        self.provider = provider
        self.cache_dir = Path(cache_dir)
        self.wait_timeout = wait_timeout
        self.metrics = metrics

        self._caches: Dict[str, EmbeddingCache] = {}
        self._registry_lock = threading.Lock()
        # Per-category state that outlives invalidate()
        self._load_locks: Dict[str, threading.Lock] = {}
        self._file_locks: Dict[str, threading.Lock] = {}
        # (category, normalized name) -> generation in flight
        self._inflight: Dict[Tuple[str, str], Future] = {}
        self._inflight_lock = threading.Lock()

    def cache_path(self, category: str) -> Path:
        return self.cache_dir / f"{category}{constants.CACHE_SUFFIX}"

    def _category_locks(self, category: str) -> Tuple[threading.Lock, threading.Lock]:
        with self._registry_lock:
            load_lock = self._load_locks.setdefault(category, threading.Lock())
            file_lock = self._file_locks.setdefault(category, threading.Lock())
        return load_lock, file_lock

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, category: str) -> EmbeddingCache:
        """Return the category's cache, reading the durable file on first use.

        A missing file yields an empty cache. Malformed rows are skipped and
        recorded in ``cache.diagnostics``.
        """
        cache = self._caches.get(category)
        if cache is not None:
            return cache

        load_lock, file_lock = self._category_locks(category)
        with load_lock:
            cache = self._caches.get(category)
            if cache is None:
                cache = EmbeddingCache(category, self.cache_path(category))
                # An append either lands before the read or after registration.
                with file_lock:
                    self._read_cache_file(cache)
                    self._caches[category] = cache
        return cache

    def _read_cache_file(self, cache: EmbeddingCache):
        if not cache.path.exists():
            logger.info(f"No embedding cache for '{cache.category}' yet, starting empty")
            return

        loaded = 0
        with open(cache.path, "rb") as f:
            for line_number, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    line = decode_line(raw)
                    if line_number == 1 and is_header(line):
                        continue
                    name, vector = decode_row(line)
                except MalformedCacheRow as e:
                    message = f"{cache.path.name}:{line_number}: {e}"
                    logger.warning(f"Skipping malformed cache row {message}")
                    cache.diagnostics.append(message)
                    if self.metrics:
                        self.metrics.record_error("MalformedCacheRow", "cache")
                    continue
                cache.put(name, vector)
                loaded += 1

        logger.info(
            f"Loaded {len(cache)} embeddings for '{cache.category}' from {cache.path} "
            f"({loaded} rows, {len(cache.diagnostics)} skipped)"
        )

    def invalidate(self, category: str) -> bool:
        """Drop the in-memory cache; the next access reloads the file.

        Generations already in flight keep running and are still shared
        with callers that arrive after the invalidation.

        Returns:
            True if a cache was loaded for the category
        """
        with self._registry_lock:
            dropped = self._caches.pop(category, None)
        if dropped is not None:
            logger.info(f"Invalidated in-memory embedding cache for '{category}'")
        return dropped is not None

    # ------------------------------------------------------------------
    # Lookup / generation
    # ------------------------------------------------------------------

    def get_or_create(self, category: str, item_name: str, prompt_text: str) -> np.ndarray:
        """Return the item's vector, generating and persisting it on a miss.

        Raises:
            EmbeddingProviderError: the provider failed, timed out or returned
                no parseable vector (EmbeddingParseError)
        """
        cache = self.load(category)
        vector = cache.get(item_name)
        if vector is not None:
            logger.debug(f"Embedding cache hit: {category}/{item_name}")
            self._record_lookup(category, hit=True)
            return vector

        key = (category, normalize_name(item_name))
        with self._inflight_lock:
            vector = self.load(category).get(item_name)
            if vector is not None:
                self._record_lookup(category, hit=True)
                return vector
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        self._record_lookup(category, hit=False)
        if not owner:
            logger.debug(f"Waiting for in-flight embedding of {category}/{item_name}")
            try:
                return future.result(timeout=self.wait_timeout)
            except FutureTimeout as e:
                raise EmbeddingProviderError(
                    f"Timed out waiting for embedding of '{item_name}'"
                ) from e

        try:
            vector = self._generate(item_name, prompt_text)
            vector = self._persist(category, item_name, vector)
            future.set_result(vector)
            return vector
        except Exception as e:
            future.set_exception(e)
            raise
        finally:
            with self._inflight_lock:
                self._inflight.pop(key, None)

    def try_get_or_create(self, category: str, item_name: str, prompt_text: str) -> EmbeddingResult:
        """Like get_or_create, but returns failures instead of raising them."""
        try:
            return EmbeddingResult(item_name, vector=self.get_or_create(category, item_name, prompt_text))
        except EmbeddingProviderError as e:
            logger.warning(f"Could not embed '{item_name}' in '{category}': {e}")
            if self.metrics:
                self.metrics.record_error(type(e).__name__, "cache")
            return EmbeddingResult(item_name, error=e)

    def populate(self, category: str, entries: Iterable) -> PopulateReport:
        """Make sure every catalog entry of the category has a vector.

        Args:
            category: Category name
            entries: Catalog entries exposing ``name`` and ``prompt_fields``

        Returns:
            PopulateReport with the generated names and per-item failures
        """
        cache = self.load(category)
        report = PopulateReport(category=category)

        for entry in entries:
            if entry.name in cache:
                report.already_cached += 1
                continue
            result = self.try_get_or_create(category, entry.name, build_prompt(entry.prompt_fields))
            if result.ok:
                report.generated.append(entry.name)
            else:
                report.failures.append(result)

        if report.generated or report.failures:
            logger.info(
                f"Populated '{category}': {len(report.generated)} generated, "
                f"{report.already_cached} cached, {len(report.failures)} failed"
            )
        return report

    def _generate(self, item_name: str, prompt_text: str) -> np.ndarray:
        logger.info(f"Generating embedding for '{item_name}'")
        try:
            raw = self.provider.generate(prompt_text)
            vector = parse_embedding_response(raw)
        except EmbeddingProviderError:
            self._record_provider_call("error")
            raise
        except Exception as e:
            self._record_provider_call("error")
            raise EmbeddingProviderError(f"Embedding provider failed: {e}") from e
        self._record_provider_call("success")
        return vector

    def _persist(self, category: str, item_name: str, vector: np.ndarray) -> np.ndarray:
        """Append the vector to the category's file and publish it in memory.

        Returns:
            The read-only vector as stored in the cache
        """
        _, file_lock = self._category_locks(category)
        with file_lock:
            self._append(self.cache_path(category), item_name, vector)
            cache = self._caches.get(category)
            if cache is None:
                # Invalidated mid-generation; the next load reads the new row.
                cache = EmbeddingCache(category, self.cache_path(category))
            cache.put(item_name, vector)
            return cache.get(item_name)

    def _append(self, path: Path, item_name: str, vector: np.ndarray):
        """Append one row to a category file; the caller holds its file lock.

        A write failure is logged; the vector is still kept in memory.
        """
        row = encode_row(item_name, vector)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            prefix = ""
            if not path.exists() or path.stat().st_size == 0:
                prefix = CACHE_HEADER + "\n"
            elif not self._ends_with_newline(path):
                # Previous process died mid-row; start a fresh line.
                prefix = "\n"
            with open(path, "a", encoding="utf-8", newline="") as f:
                f.write(prefix + row)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            logger.error(f"Failed to persist embedding for '{item_name}' to {path}: {e}")
            if self.metrics:
                self.metrics.record_error("OSError", "cache_write")

    @staticmethod
    def _ends_with_newline(path: Path) -> bool:
        with open(path, "rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1) == b"\n"

    def _record_lookup(self, category: str, hit: bool):
        if self.metrics:
            self.metrics.record_cache_lookup(category, hit)

    def _record_provider_call(self, outcome: str):
        if self.metrics:
            self.metrics.record_provider_call(outcome)
