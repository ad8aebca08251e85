"""Webhook signature verification.

The provider signs every delivery with::

    HMAC-SHA256(key=SHA-256(app token), message=request body)

and sends the hex digest in the ``crypto-pay-api-signature`` header.
Verification must run over the exact bytes received: a body that was
parsed and re-serialized by a web framework may differ byte-for-byte from
what was signed. Hosts should pass the raw body; :func:`canonical_body` is
a fallback for hosts that only keep the parsed object.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from cryptopay.utils.crypto import constant_time_equals, hmac_sha256_hex, sha256

if TYPE_CHECKING:
    from collections.abc import Mapping

SIGNATURE_HEADER = "crypto-pay-api-signature"


def derive_secret(token: str) -> bytes:
    """HMAC key derived from the app token."""
    return sha256(token.encode())


def canonical_body(body: Mapping[str, Any]) -> bytes:
    """Serialize a parsed body in the compact form the provider signs."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode()


def compute_signature(token: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of *body* under the secret derived from *token*."""
    return hmac_sha256_hex(derive_secret(token), body)


def get_signature_header(headers: Mapping[str, str]) -> str | None:
    """Find the signature header regardless of its case."""
    for name, value in headers.items():
        if name.lower() == SIGNATURE_HEADER:
            return value
    return None


def verify_signature(
    token: str, body: bytes | Mapping[str, Any], headers: Mapping[str, str]
) -> bool:
    """Check that *body* was signed by the provider for *token*.

    Returns ``False`` when the header is missing or the digest differs.
    """
    signature = get_signature_header(headers)
    if not signature:
        return False
    raw = body if isinstance(body, bytes) else canonical_body(body)
    return constant_time_equals(compute_signature(token, raw), signature)
