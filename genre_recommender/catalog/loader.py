"""CSV catalog access.

Each category (genre) has its own CSV file with a header row. Only a few
columns are used, at fixed positions:

    1  name          6  rating        7  description
    8  director      10 actors

Director and actors are the attributes the embedding prompt is built from.
"""

import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd
from loguru import logger

from .. import constants
from ..errors import InvalidCategory, ItemNotFound


_CATEGORY_RE = re.compile(constants.CATEGORY_PATTERN)


def validate_category(category: str) -> str:
    """Return the stripped category name, or raise InvalidCategory.

    Category names are used as file names, so anything outside letters,
    digits, spaces, ``_`` and ``-`` is rejected.
    """
    cleaned = (category or "").strip()
    if not _CATEGORY_RE.match(cleaned):
        raise InvalidCategory(f"Invalid category name: {category!r}")
    return cleaned


@dataclass(frozen=True)
class CatalogEntry:
    """One catalog row."""

    name: str
    rating: str
    description: str
    creator: str
    contributors: str

    @property
    def prompt_fields(self) -> Tuple[str, str]:
        """Attributes the embedding is derived from, in prompt order."""
        return (self.creator, self.contributors)

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "rating": self.rating,
            "description": self.description,
            "creator": self.creator,
            "contributors": self.contributors,
        }


class CsvCatalog:
    """Reads per-category catalog CSVs, re-reading a file when it changes."""

    def __init__(self, data_dir: str = constants.DATA_DIR):
        """Initialize the catalog.

        Args:
            data_dir: Directory containing ``<category>.csv`` files
        """
        self.data_dir = Path(data_dir)
        self._lock = threading.Lock()
        # category -> (mtime, entries, index by case-folded name)
        self._loaded: Dict[str, Tuple[float, List[CatalogEntry], Dict[str, CatalogEntry]]] = {}

    def catalog_path(self, category: str) -> Path:
        return self.data_dir / f"{validate_category(category)}{constants.CATALOG_SUFFIX}"

    def lookup(self, category: str, name: str) -> Optional[CatalogEntry]:
        """Find an entry by name (case-insensitive); None if absent."""
        _, index = self._get(category)
        return index.get((name or "").strip().casefold())

    def get(self, category: str, name: str) -> CatalogEntry:
        """Like lookup, but raise ItemNotFound when the item is absent."""
        entry = self.lookup(category, name)
        if entry is None:
            raise ItemNotFound(category, name)
        return entry

    def list_all(self, category: str) -> List[CatalogEntry]:
        """All usable entries of the category, in file order."""
        entries, _ = self._get(category)
        return list(entries)

    def _get(self, category: str) -> Tuple[List[CatalogEntry], Dict[str, CatalogEntry]]:
        path = self.catalog_path(category)
        if not path.exists():
            logger.warning(f"Catalog file not found: {path}")
            return [], {}

        mtime = path.stat().st_mtime
        with self._lock:
            cached = self._loaded.get(category)
            if cached is not None and cached[0] == mtime:
                return cached[1], cached[2]

            entries = self._read(path)
            index: Dict[str, CatalogEntry] = {}
            for entry in entries:
                index.setdefault(entry.name.casefold(), entry)
            self._loaded[category] = (mtime, entries, index)
            return entries, index

    @staticmethod
    def _read(path: Path) -> List[CatalogEntry]:
        """Parse one catalog file, skipping rows that are too short or unnamed."""
        logger.info(f"Loading catalog {path}...")
        try:
            frame = pd.read_csv(
                path,
                header=0,
                dtype=str,
                keep_default_na=False,
                on_bad_lines="warn",
                encoding="utf-8",
                encoding_errors="replace",
            )
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            logger.warning(f"Could not parse catalog {path}: {e}; ignoring it")
            return []

        if frame.shape[1] < constants.MIN_CATALOG_COLUMNS:
            logger.warning(
                f"Catalog {path} has {frame.shape[1]} columns, "
                f"{constants.MIN_CATALOG_COLUMNS} required; ignoring it"
            )
            return []

        frame = frame.fillna("")
        entries = []
        skipped = 0
        for row in frame.itertuples(index=False, name=None):
            name = str(row[constants.NAME_COLUMN]).strip()
            if not name:
                skipped += 1
                continue
            entries.append(CatalogEntry(
                name=name,
                rating=str(row[constants.RATING_COLUMN]).strip(),
                description=str(row[constants.DESCRIPTION_COLUMN]).strip(),
                creator=str(row[constants.CREATOR_COLUMN]).strip(),
                contributors=str(row[constants.CONTRIBUTORS_COLUMN]).strip(),
            ))

        if skipped:
            logger.warning(f"Skipped {skipped} unnamed rows in {path}")
        logger.info(f"Loaded {len(entries):,} catalog entries from {path}")
        return entries
