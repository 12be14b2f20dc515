# ==============================================================================
# Request Normalizer
# ==============================================================================
"""
Validation and canonicalization of ingest request bodies.

Runs before any store access and has no side effects. Only the fingerprint
is checked: numbers are converted to their decimal string form, strings are
trimmed, and an empty result is rejected. Every other field passes through
unchanged unless strict website-name validation is enabled.
"""

import json
import math
import re
from decimal import Decimal
from typing import Any

from sessioncollector.core.errors import (
    InvalidFingerprintType,
    InvalidRequestBody,
    InvalidWebsiteName,
    MissingFingerprint,
)
from sessioncollector.core.models import IngestRequest

WEBSITE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


def _reject_constant(token: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise InvalidRequestBody()


def format_number(value: int | float) -> str:
    """
    Render a number the way a JavaScript client would print it.

    Integral values below 1e21 print as plain digits. Other values use the
    shortest round-trip digits, in positional form for 1e-6 <= |x| < 1e21
    and exponent form (1e-7, 1.5e+21) outside that range.
    """
    if isinstance(value, int):
        if abs(value) < 10**21:
            return str(value)
        value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "-Infinity" if value < 0 else "Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digits)
    k = len(digits)
    n = exponent + k  # position of the decimal point relative to the digits

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if n - 1 >= 0 else '-'}{abs(n - 1)}"
    return f"-{text}" if sign else text


def parse_body(raw: bytes | str | None) -> dict:
    """
    Decode a request body into a JSON object.

    An empty body is treated as an empty object.

    Raises:
        InvalidRequestBody: If the body is not valid JSON or not an object
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidRequestBody() from exc
    if not raw:
        raw = "{}"
    try:
        body = json.loads(raw, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise InvalidRequestBody() from exc
    if not isinstance(body, dict):
        raise InvalidRequestBody()
    return body


def normalize_fingerprint(value: Any) -> str:
    """
    Coerce and trim a fingerprint.

    Numbers are rendered by format_number, so 42 and 42.0 map to the same
    key and 1e-7 stays "1e-7".

    Raises:
        InvalidFingerprintType: If the value is neither a string nor a number
        MissingFingerprint: If nothing is left after trimming
    """
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool):
        raise InvalidFingerprintType()
    if isinstance(value, (int, float)):
        value = format_number(value)
    elif not isinstance(value, str):
        raise InvalidFingerprintType()

    value = value.strip()
    if not value:
        raise MissingFingerprint()
    return value


def normalize_request(body: dict, strict_website_name: bool = False) -> IngestRequest:
    """
    Build a normalized request from a decoded body.

    Args:
        body: Decoded JSON object
        strict_website_name: Also require a safe website name

    Returns:
        IngestRequest with a canonical fingerprint
    """
    fingerprint = normalize_fingerprint(body.get("fingerprint"))

    website_name = body.get("websiteName")
    if strict_website_name and not (
        isinstance(website_name, str) and WEBSITE_NAME_PATTERN.match(website_name)
    ):
        raise InvalidWebsiteName()

    return IngestRequest(
        apiKey=body.get("apiKey"),
        tinyCode=body.get("tinyCode"),
        fingerprint=fingerprint,
        data=body.get("data"),
        action=body.get("action"),
        websiteName=website_name,
    )


def normalize_raw_request(raw: bytes | str | None, strict_website_name: bool = False) -> IngestRequest:
    """Parse and normalize a raw request body in one step."""
    return normalize_request(parse_body(raw), strict_website_name=strict_website_name)
