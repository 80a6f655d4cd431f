"""Catalog access."""

from .loader import CatalogEntry, CsvCatalog, validate_category

__all__ = ["CatalogEntry", "CsvCatalog", "validate_category"]
