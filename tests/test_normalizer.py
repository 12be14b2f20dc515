# ==============================================================================
# Tests for the Request Normalizer
# ==============================================================================
"""
Unit tests for body parsing and fingerprint normalization.

Tests cover:
- JSON body decoding (empty, malformed, non-object)
- Fingerprint coercion and trimming
- Pass-through of unchecked fields
- Opt-in strict website name validation
"""

import pytest

from sessioncollector.core.errors import (
    InvalidFingerprintType,
    InvalidRequestBody,
    InvalidWebsiteName,
    MissingFingerprint,
)
from sessioncollector.core.normalizer import (
    format_number,
    normalize_fingerprint,
    normalize_raw_request,
    normalize_request,
    parse_body,
)

# ==============================================================================
# parse_body
# ==============================================================================


class TestParseBody:
    """Tests for raw body decoding."""

    def test_object_body(self):
        assert parse_body(b'{"fingerprint": "abc"}') == {"fingerprint": "abc"}

    def test_empty_body_is_empty_object(self):
        assert parse_body(b"") == {}
        assert parse_body(None) == {}

    def test_malformed_json(self):
        with pytest.raises(InvalidRequestBody) as exc_info:
            parse_body(b"{not json")
        assert exc_info.value.status_code == 400
        assert exc_info.value.to_payload() == {"error": "Invalid JSON in request body"}

    def test_non_object_json(self):
        """Arrays and scalars are not request objects."""
        for raw in (b"[1, 2]", b"42", b"null", b'"text"'):
            with pytest.raises(InvalidRequestBody):
                parse_body(raw)

    def test_invalid_utf8(self):
        with pytest.raises(InvalidRequestBody):
            parse_body(b"\xff\xfe")

    @pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
    def test_non_standard_constants_rejected(self, token):
        """NaN and Infinity are not JSON, wherever they appear."""
        for raw in (
            f'{{"fingerprint": {token}, "websiteName": "example.com"}}',
            f'{{"fingerprint": "42", "data": {token}}}',
            f'{{"fingerprint": "42", "data": [1, {{"x": {token}}}]}}',
        ):
            with pytest.raises(InvalidRequestBody):
                parse_body(raw.encode())

    def test_constant_names_inside_strings_allowed(self):
        assert parse_body(b'{"data": "NaN"}') == {"data": "NaN"}


# ==============================================================================
# format_number
# ==============================================================================


class TestFormatNumber:
    """Tests for JavaScript-style number rendering."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (42, "42"),
            (42.0, "42"),
            (-7, "-7"),
            (0.0, "0"),
            (-0.0, "0"),
            (0.1, "0.1"),
            (123.456, "123.456"),
            (0.000001, "0.000001"),
            (1e-7, "1e-7"),
            (1.5e-7, "1.5e-7"),
            (-2.5e-8, "-2.5e-8"),
            (1e20, "100000000000000000000"),
            (1e21, "1e+21"),
            (1.2345e25, "1.2345e+25"),
            (10**21, "1e+21"),
            (float("inf"), "Infinity"),
            (float("-inf"), "-Infinity"),
            (float("nan"), "NaN"),
        ],
    )
    def test_renders_like_javascript(self, value, expected):
        assert format_number(value) == expected


# ==============================================================================
# normalize_fingerprint
# ==============================================================================


class TestNormalizeFingerprint:
    """Tests for fingerprint coercion and trimming."""

    def test_integer_becomes_decimal_string(self):
        assert normalize_fingerprint(42) == "42"

    def test_integer_and_numeric_string_match(self):
        assert normalize_fingerprint(42) == normalize_fingerprint("42")
        assert normalize_fingerprint(42) == normalize_fingerprint(" 42 ")

    def test_integral_float_matches_integer(self):
        assert normalize_fingerprint(42.0) == "42"

    def test_fractional_float(self):
        assert normalize_fingerprint(4.5) == "4.5"

    def test_exponent_forms(self):
        assert normalize_fingerprint(1e-7) == "1e-7"
        assert normalize_fingerprint(1e21) == "1e+21"
        assert normalize_fingerprint(1e21) == normalize_fingerprint(10**21)

    def test_negative_and_zero(self):
        assert normalize_fingerprint(-7) == "-7"
        assert normalize_fingerprint(0) == "0"

    def test_idempotent(self):
        for value in (42, "  abc  ", 3.25, "x y"):
            once = normalize_fingerprint(value)
            assert normalize_fingerprint(once) == once

    def test_string_is_trimmed(self):
        assert normalize_fingerprint("  visitor-1\n") == "visitor-1"

    def test_inner_whitespace_kept(self):
        assert normalize_fingerprint(" a b ") == "a b"

    @pytest.mark.parametrize("value", [None, True, False, [], ["42"], {"id": 1}])
    def test_wrong_type_rejected(self, value):
        with pytest.raises(InvalidFingerprintType) as exc_info:
            normalize_fingerprint(value)
        assert exc_info.value.message == "Fingerprint must be a string or number."

    @pytest.mark.parametrize("value", ["", "   ", "\t\n"])
    def test_blank_rejected(self, value):
        with pytest.raises(MissingFingerprint) as exc_info:
            normalize_fingerprint(value)
        assert exc_info.value.message == "Fingerprint missing."


# ==============================================================================
# normalize_request
# ==============================================================================


class TestNormalizeRequest:
    """Tests for full request normalization."""

    def test_fields_pass_through(self):
        request = normalize_request(
            {
                "apiKey": "key-1",
                "tinyCode": "tc",
                "fingerprint": 42,
                "data": {"type": "click"},
                "action": "append",
                "websiteName": "example.com",
            }
        )
        assert request.fingerprint == "42"
        assert request.api_key == "key-1"
        assert request.tiny_code == "tc"
        assert request.data == {"type": "click"}
        assert request.action == "append"
        assert request.website_name == "example.com"

    def test_missing_optional_fields_are_none(self):
        request = normalize_request({"fingerprint": "abc"})
        assert request.api_key is None
        assert request.tiny_code is None
        assert request.data is None
        assert request.action is None
        assert request.website_name is None

    def test_unknown_action_passes_through(self):
        request = normalize_request({"fingerprint": "abc", "action": "pause"})
        assert request.action == "pause"

    def test_missing_fingerprint_is_type_error(self):
        """An absent fingerprint is neither string nor number."""
        with pytest.raises(InvalidFingerprintType):
            normalize_request({"websiteName": "example.com"})

    def test_raw_request(self):
        request = normalize_raw_request(b'{"fingerprint": 7, "websiteName": "site"}')
        assert request.fingerprint == "7"
        assert request.website_name == "site"

    def test_raw_empty_body(self):
        with pytest.raises(InvalidFingerprintType):
            normalize_raw_request(b"")


class TestStrictWebsiteName:
    """Tests for opt-in website name validation."""

    def test_lenient_by_default(self):
        request = normalize_request({"fingerprint": "a", "websiteName": "has spaces/and:colons"})
        assert request.website_name == "has spaces/and:colons"

    def test_strict_accepts_safe_name(self):
        request = normalize_request(
            {"fingerprint": "a", "websiteName": "example.com"}, strict_website_name=True
        )
        assert request.website_name == "example.com"

    @pytest.mark.parametrize("name", [None, "", "a/b", "a:b", "x" * 129, 5])
    def test_strict_rejects(self, name):
        with pytest.raises(InvalidWebsiteName):
            normalize_request({"fingerprint": "a", "websiteName": name}, strict_website_name=True)

    def test_fingerprint_checked_before_website(self):
        with pytest.raises(MissingFingerprint):
            normalize_request({"fingerprint": " ", "websiteName": "a/b"}, strict_website_name=True)
