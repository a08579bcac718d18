"""
Random token, hashing and request-signing helpers.

Every credential the platform issues (session tokens, nonces, API keys) is a
hex string drawn from ``secrets``. API keys are persisted only as sha256
digests. Signed agent writes are HMAC-SHA256 over
``<nonce>.<timestamp>.<sha256(body)>`` keyed with the agent's API key.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import math
import re
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

NONCE_BYTES = 16
SESSION_TOKEN_BYTES = 24
API_KEY_BYTES = 32
API_KEY_PREFIX_LENGTH = 8

# Largest integer a JavaScript number holds exactly
MAX_SAFE_INTEGER = 2**53

_LONE_SURROGATE = re.compile(r"[\ud800-\udfff]")


def random_hex(num_bytes: int) -> str:
    return secrets.token_hex(num_bytes)


def generate_nonce() -> str:
    """Generate a 32-character hex nonce."""
    return random_hex(NONCE_BYTES)


def generate_session_token() -> str:
    """Generate a 48-character hex bearer token."""
    return random_hex(SESSION_TOKEN_BYTES)


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class GeneratedApiKey:
    """A freshly issued API key: the plain value is never stored."""

    plain: str
    prefix: str
    hash: str


def generate_api_key() -> GeneratedApiKey:
    plain = random_hex(API_KEY_BYTES)
    return GeneratedApiKey(plain=plain, prefix=plain[:API_KEY_PREFIX_LENGTH], hash=hash_api_key(plain))


def hash_api_key(key: str) -> str:
    return sha256_hex(key)


def _utf16_order(key: str) -> bytes:
    return key.encode("utf-16-be", "surrogatepass")


def _string_literal(value: str) -> str:
    encoded = json.dumps(value, ensure_ascii=False)
    return _LONE_SURROGATE.sub(lambda match: "\\u%04x" % ord(match.group()), encoded)


def _number_literal(value: float) -> str:
    """Format a number the way ECMAScript ``Number.prototype.toString`` does.

    Integers beyond 2**53 are rounded to the nearest double first; values
    that overflow a double become ``null``.
    """
    if isinstance(value, int) and abs(value) <= MAX_SAFE_INTEGER:
        return str(value)
    try:
        number = float(value)
    except OverflowError:
        return "null"
    if not math.isfinite(number):
        return "null"
    if number == 0:
        return "0"

    _, digit_tuple, exponent = Decimal(repr(abs(number))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k
    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if n - 1 >= 0 else '-'}{abs(n - 1)}"
    return "-" + text if number < 0 else text


def stable_stringify(value: Any) -> str:
    """Serialize parsed JSON into the canonical form agents hash before signing.

    Object keys are sorted by UTF-16 code units at every depth and no
    whitespace is emitted. Strings and numbers are written exactly as a
    JavaScript ``JSON.stringify`` writes them, so lone surrogates stay
    escaped, ``1.0`` becomes ``1`` and ``1e21`` becomes ``1e+21``.

    Raises:
        TypeError: If the value holds something JSON cannot carry
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return _string_literal(value)
    if isinstance(value, (int, float)):
        return _number_literal(value)
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(stable_stringify(item) for item in value) + "]"
    if isinstance(value, dict):
        keys = sorted(value, key=_utf16_order)
        return "{" + ",".join(f"{_string_literal(key)}:{stable_stringify(value[key])}" for key in keys) + "}"
    raise TypeError(f"Cannot canonicalize {type(value).__name__}")


def hash_body(body: Any) -> str:
    return sha256_hex(stable_stringify(body))


def sign_request(key: str, nonce: str, timestamp: str, body_hash: str) -> str:
    """Compute the hex HMAC-SHA256 signature of a write request.

    Args:
        key: Secret the agent signs with (its API key)
        nonce: One-time nonce issued by ``POST /api/agents/nonce``
        timestamp: Millisecond epoch string sent in ``x-agent-timestamp``
        body_hash: ``hash_body`` of the JSON request body

    Returns:
        Lower-case hex digest
    """
    payload = f"{nonce}.{timestamp}.{body_hash}"
    return hmac.new(key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def signatures_match(expected: str, provided: str) -> bool:
    """Constant-time comparison of two hex signatures."""
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))
