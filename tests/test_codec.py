"""Unit tests for the embedding vector codec.

Tests cover:
- Vector and row encoding/decoding
- Separator disambiguation and quoting
- Malformed row detection
- Provider response parsing
"""

import numpy as np
import pytest

from genre_recommender.embeddings.codec import (
    CACHE_HEADER,
    decode_line,
    decode_row,
    decode_vector,
    encode_row,
    encode_vector,
    is_header,
    parse_embedding_response,
)
from genre_recommender.errors import (
    EmbeddingParseError,
    EmbeddingProviderError,
    MalformedCacheRow,
)


class TestVectorEncoding:
    """Tests for encode_vector / decode_vector."""

    def test_round_trip_preserves_values(self):
        """Test finite floats survive encode/decode within 1e-9."""
        rng = np.random.default_rng(7)
        vector = rng.normal(size=64) * 1e3

        decoded = decode_vector(encode_vector(vector))

        np.testing.assert_allclose(decoded, vector, rtol=0, atol=1e-9)

    def test_extreme_magnitudes(self):
        """Test very small and very large values round-trip exactly."""
        vector = [1e-300, -2.5e300, 0.1, -0.0, 123456789.123456789]

        decoded = decode_vector(encode_vector(vector))

        assert decoded.tolist() == [float(v) for v in vector]

    def test_uses_pipe_separator(self):
        """Test elements never contain the row separator."""
        encoded = encode_vector([0.5, -1.0, 2.0])

        assert "," not in encoded
        assert encoded.split("|") == ["0.5", "-1.0", "2.0"]

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            encode_vector([1.0, float("nan")])

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            encode_vector([])

    def test_decode_non_numeric(self):
        with pytest.raises(MalformedCacheRow):
            decode_vector("0.1|abc|0.3")

    def test_decode_empty_element(self):
        with pytest.raises(MalformedCacheRow):
            decode_vector("0.1||0.3")

    def test_decode_infinity(self):
        with pytest.raises(MalformedCacheRow):
            decode_vector("0.1|inf")


class TestRowEncoding:
    """Tests for encode_row / decode_row."""

    def test_row_round_trip(self):
        """Test a row decodes to the same name and vector."""
        line = encode_row("Alpha", [1.0, 0.0, -0.25])

        name, vector = decode_row(line)

        assert name == "Alpha"
        assert vector.tolist() == [1.0, 0.0, -0.25]

    def test_row_is_quoted_single_line(self):
        line = encode_row("Alpha", [1.0, 2.0])

        assert line == '"Alpha","1.0|2.0"\n'

    def test_name_with_comma_and_quotes(self):
        """Test names containing separators and quotes are escaped."""
        name = 'Crouching Tiger, "Hidden" Dragon'

        decoded_name, _ = decode_row(encode_row(name, [1.0]))

        assert decoded_name == name

    def test_newline_in_name_is_collapsed(self):
        line = encode_row("Line\nBreak", [1.0])

        assert line.count("\n") == 1
        assert decode_row(line)[0] == "Line Break"

    def test_wrong_field_count(self):
        with pytest.raises(MalformedCacheRow):
            decode_row('"Alpha","1.0|2.0","extra"')

    def test_single_field(self):
        with pytest.raises(MalformedCacheRow):
            decode_row('"Alpha"')

    def test_empty_name(self):
        with pytest.raises(MalformedCacheRow):
            decode_row('"","1.0|2.0"')

    def test_legacy_comma_row_is_rejected(self):
        """Test an unescaped comma-separated vector is detected as malformed."""
        with pytest.raises(MalformedCacheRow):
            decode_row('Alpha,1.0,2.0')

    def test_decode_line_utf8(self):
        assert decode_line("\"Café\",\"1.0\"\n".encode("utf-8")) == "\"Café\",\"1.0\"\n"

    def test_decode_line_truncated_multibyte(self):
        with pytest.raises(MalformedCacheRow):
            decode_line(b"\"Caf\xc3")


class TestHeader:

    def test_current_header(self):
        assert is_header(CACHE_HEADER + "\n")

    def test_legacy_header(self):
        assert is_header("MovieName,Embedding")

    def test_data_row_is_not_header(self):
        assert not is_header(encode_row("Alpha", [1.0]))


class TestParseEmbeddingResponse:
    """Tests for provider response parsing."""

    def test_json_response(self):
        vector = parse_embedding_response('{"embedding":[0.1,-0.2,0.3]}')

        assert vector.tolist() == [0.1, -0.2, 0.3]

    def test_uses_first_bracketed_span(self):
        vector = parse_embedding_response('x [1, 2] y [3, 4]')

        assert vector.tolist() == [1.0, 2.0]

    def test_whitespace_and_exponents(self):
        vector = parse_embedding_response("[ 1e-3 ,\n -2.5E2 ]")

        assert vector.tolist() == [0.001, -250.0]

    @pytest.mark.parametrize("raw", [
        "no vector here",
        "[]",
        "[1.0, two]",
        "[1.0, 2.0",
        '{"error": "model not found"}',
        "[NaN, 1.0]",
    ])
    def test_unparseable_responses(self, raw):
        with pytest.raises(EmbeddingParseError):
            parse_embedding_response(raw)

    def test_parse_error_is_provider_error(self):
        """Test callers catching provider errors also catch parse errors."""
        with pytest.raises(EmbeddingProviderError):
            parse_embedding_response("nothing")
