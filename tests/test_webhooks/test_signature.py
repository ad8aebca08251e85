"""Tests for webhook signature verification."""

from __future__ import annotations

import pytest

from cryptopay.webhooks.signature import (
    SIGNATURE_HEADER,
    canonical_body,
    compute_signature,
    derive_secret,
    get_signature_header,
    verify_signature,
)

TOKEN = "T1"  # noqa: S105
BODY = (
    b'{"update_id":1,"update_type":"invoice_paid","request_date":"2025-01-01T00:00:00.000Z",'
    b'"payload":{"invoice_id":7,"status":"paid"}}'
)
BODY_SIGNATURE = "575eb72fb97d67224f0a8b202679bf3e2188b4f7f1b8426f5fc4b9912a149644"


class TestComputeSignature:
    def test_secret_is_sha256_of_token(self):
        assert derive_secret(TOKEN).hex() == (
            "1f93603db53bfad5c92390f735d0cbb8617b4ab8214ae91c5664a3d1e9b009c8"
        )

    def test_known_vector(self):
        assert compute_signature(TOKEN, BODY) == BODY_SIGNATURE

    def test_short_body_vector(self):
        assert compute_signature(TOKEN, b'{"ok":true}') == (
            "75cb9e2bd8359101632fcc7f3b5bcf64a0d06f2586d1b8dc30930daf2c03e4fd"
        )

    def test_depends_on_token(self):
        assert compute_signature("T2", BODY) != BODY_SIGNATURE


class TestVerifySignature:
    def test_valid(self):
        assert verify_signature(TOKEN, BODY, {SIGNATURE_HEADER: BODY_SIGNATURE}) is True

    def test_header_name_case_insensitive(self):
        headers = {"Crypto-Pay-API-Signature": BODY_SIGNATURE}
        assert verify_signature(TOKEN, BODY, headers) is True

    def test_missing_header(self):
        assert verify_signature(TOKEN, BODY, {}) is False

    def test_empty_header(self):
        assert verify_signature(TOKEN, BODY, {SIGNATURE_HEADER: ""}) is False

    def test_wrong_token(self):
        assert verify_signature("other", BODY, {SIGNATURE_HEADER: BODY_SIGNATURE}) is False

    @pytest.mark.parametrize("index", [0, 10, len(BODY) - 1])
    def test_flipped_body_byte(self, index):
        tampered = bytearray(BODY)
        tampered[index] ^= 0x01
        headers = {SIGNATURE_HEADER: BODY_SIGNATURE}
        assert verify_signature(TOKEN, bytes(tampered), headers) is False

    def test_flipped_header_char(self):
        flipped = ("0" if BODY_SIGNATURE[0] != "0" else "1") + BODY_SIGNATURE[1:]
        assert verify_signature(TOKEN, BODY, {SIGNATURE_HEADER: flipped}) is False

    def test_uppercase_digest_rejected(self):
        headers = {SIGNATURE_HEADER: BODY_SIGNATURE.upper()}
        assert verify_signature(TOKEN, BODY, headers) is False

    def test_mapping_body_is_canonicalized(self):
        parsed = {
            "update_id": 1,
            "update_type": "invoice_paid",
            "request_date": "2025-01-01T00:00:00.000Z",
            "payload": {"invoice_id": 7, "status": "paid"},
        }
        assert canonical_body(parsed) == BODY
        assert verify_signature(TOKEN, parsed, {SIGNATURE_HEADER: BODY_SIGNATURE}) is True

    def test_reformatted_bytes_rejected(self):
        spaced = BODY.replace(b",", b", ")
        assert verify_signature(TOKEN, spaced, {SIGNATURE_HEADER: BODY_SIGNATURE}) is False


def test_get_signature_header():
    assert get_signature_header({"CRYPTO-PAY-API-SIGNATURE": "abc"}) == "abc"
    assert get_signature_header({"content-type": "application/json"}) is None
