"""Cryptographic helpers — hashing, HMAC."""

from __future__ import annotations

import hashlib
import hmac


def sha256(data: bytes) -> bytes:
    """Single SHA-256 hash."""
    return hashlib.sha256(data).digest()


def hmac_sha256_hex(key: bytes, message: bytes) -> str:
    """HMAC-SHA256 of *message* under *key*, hex-encoded."""
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def constant_time_equals(a: str, b: str) -> bool:
    """Compare two strings without leaking the position of the first mismatch."""
    return hmac.compare_digest(a.encode(), b.encode())
