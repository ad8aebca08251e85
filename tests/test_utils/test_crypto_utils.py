"""Tests for hashing and HMAC helpers."""

from __future__ import annotations

from cryptopay.utils.crypto import constant_time_equals, hmac_sha256_hex, sha256


class TestHashes:
    def test_sha256_empty(self) -> None:
        assert sha256(b"").hex() == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_hmac_rfc4231_case_2(self) -> None:
        digest = hmac_sha256_hex(b"Jefe", b"what do ya want for nothing?")
        assert digest == "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"


class TestConstantTimeEquals:
    def test_equal(self) -> None:
        assert constant_time_equals("abc", "abc") is True

    def test_different(self) -> None:
        assert constant_time_equals("abc", "abd") is False

    def test_different_length(self) -> None:
        assert constant_time_equals("abc", "abcd") is False
