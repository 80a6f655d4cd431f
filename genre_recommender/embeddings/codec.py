"""Text codec for embedding vectors and the durable cache file.

Cache file layout::

    name,embedding|v1
    "Alpha","0.1|0.25|-0.5"
    "Beta","0.3|0.0|1.0"

Vector elements are separated by ``|`` so that the row separator ``,`` never
appears inside a field. Elements are written with ``repr`` which round-trips
finite floats exactly.
"""

import csv
import io
import math
from typing import Iterable, Tuple

import numpy as np

from ..errors import EmbeddingParseError, MalformedCacheRow


CODEC_VERSION = 1
VECTOR_SEPARATOR = "|"
CACHE_HEADER = f"name,embedding{VECTOR_SEPARATOR}v{CODEC_VERSION}"

# Header written by the first generation of cache files; rows are identical.
LEGACY_HEADERS = ("MovieName,Embedding",)


def is_header(line: str) -> bool:
    """Return True if ``line`` is a cache header row of a known version."""
    stripped = line.strip()
    return stripped == CACHE_HEADER or stripped in LEGACY_HEADERS


def encode_vector(vector: Iterable[float]) -> str:
    """Encode a vector as ``|``-separated float literals."""
    values = [float(v) for v in np.asarray(vector, dtype=np.float64).ravel()]
    if not values:
        raise ValueError("Cannot encode an empty vector")
    if not all(math.isfinite(v) for v in values):
        raise ValueError("Cannot encode a vector with non-finite values")
    return VECTOR_SEPARATOR.join(repr(v) for v in values)


def decode_vector(text: str) -> np.ndarray:
    """Decode a ``|``-separated vector.

    Raises:
        MalformedCacheRow: empty text, or an element that is not a finite number
    """
    text = text.strip()
    if not text:
        raise MalformedCacheRow("Empty embedding field")
    try:
        values = [float(part) for part in text.split(VECTOR_SEPARATOR)]
    except ValueError as e:
        raise MalformedCacheRow(f"Non-numeric embedding element: {e}") from e
    if not all(math.isfinite(v) for v in values):
        raise MalformedCacheRow("Non-finite embedding element")
    return np.asarray(values, dtype=np.float64)


def encode_row(name: str, vector: Iterable[float]) -> str:
    """Encode one cache row, newline-terminated.

    Line breaks inside the name are collapsed so a row always occupies
    exactly one line of the file.
    """
    clean_name = " ".join(name.splitlines()).strip()
    if not clean_name:
        raise ValueError("Cannot encode a row without an item name")
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([clean_name, encode_vector(vector)])
    return buffer.getvalue()


def decode_line(raw: bytes) -> str:
    """Decode one raw line of the cache file as UTF-8.

    Raises:
        MalformedCacheRow: the line holds invalid or truncated UTF-8
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedCacheRow(f"Undecodable bytes: {e.reason} at offset {e.start}") from e


def decode_row(line: str) -> Tuple[str, np.ndarray]:
    """Decode one cache row into ``(name, vector)``.

    Raises:
        MalformedCacheRow: wrong field count, empty name or a bad vector
    """
    try:
        fields = next(csv.reader([line.rstrip("\r\n")]), [])
    except csv.Error as e:
        raise MalformedCacheRow(f"Unparseable row: {e}") from e
    if len(fields) != 2:
        raise MalformedCacheRow(f"Expected 2 fields, got {len(fields)}")
    name = fields[0].strip()
    if not name:
        raise MalformedCacheRow("Empty item name")
    return name, decode_vector(fields[1])


def parse_embedding_response(raw: str) -> np.ndarray:
    """Extract the vector from a provider response.

    The response is expected to contain a bracketed, comma-separated list of
    numbers, e.g. ``{"embedding": [0.1, -0.2, 0.3]}``. The first ``[...]``
    span is used.

    Raises:
        EmbeddingParseError: no bracketed span, or non-numeric contents
    """
    if raw is None:
        raise EmbeddingParseError("Empty provider response")
    start = raw.find("[")
    end = raw.find("]", start + 1) if start != -1 else -1
    if start == -1 or end == -1:
        raise EmbeddingParseError("No bracketed vector in provider response")

    body = raw[start + 1:end].strip()
    if not body:
        raise EmbeddingParseError("Provider returned an empty vector")
    try:
        values = [float(part) for part in body.split(",")]
    except ValueError as e:
        raise EmbeddingParseError(f"Non-numeric vector element: {e}") from e
    if not all(math.isfinite(v) for v in values):
        raise EmbeddingParseError("Provider returned non-finite values")
    return np.asarray(values, dtype=np.float64)
