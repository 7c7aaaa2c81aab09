"""
Tests for envelope sealing — squad.envelope.
"""

from __future__ import annotations

import secrets
from unittest import TestCase

import pytest

from squad import ENVELOPE_KEY_SIZE, ENVELOPE_NONCE_SIZE, ENVELOPE_TAG_SIZE

# Skip envelope tests if cryptography is not installed
try:
    import cryptography  # noqa: F401
    HAS_CRYPTO = True
except ImportError:
    HAS_CRYPTO = False

skip_no_crypto = pytest.mark.skipif(
    not HAS_CRYPTO,
    reason="cryptography package not installed",
)


def _subset(shares, indices):
    return {i: shares[i] for i in indices}


class TestEnvelope(TestCase):

    @skip_no_crypto
    def test_roundtrip(self):
        from squad.envelope import seal, unseal

        plaintext = secrets.token_bytes(10_000)
        sealed = seal(plaintext, 3, 5)
        assert len(sealed.shares) == 5
        for share in sealed.shares.values():
            assert len(share) == ENVELOPE_KEY_SIZE

        assert unseal(sealed.payload, _subset(sealed.shares, [1, 4, 5])) == plaintext

    @skip_no_crypto
    def test_tagged_roundtrip_with_field(self):
        from squad.core.field import FIELD_REED_SOLOMON
        from squad.envelope import seal, unseal

        sealed = seal(b"document", 2, 3, field=FIELD_REED_SOLOMON, tag=True)
        recovered = unseal(
            sealed.payload,
            _subset(sealed.shares, [2, 3]),
            field=FIELD_REED_SOLOMON,
            tag=True,
        )
        assert recovered == b"document"

    @skip_no_crypto
    def test_empty_plaintext(self):
        from squad.envelope import seal, unseal

        sealed = seal(b"", 2, 2)
        assert unseal(sealed.payload, sealed.shares) == b""

    @skip_no_crypto
    def test_insufficient_shares(self):
        from squad.envelope import EnvelopeError, seal, unseal

        sealed = seal(b"secret document", 3, 5)
        with pytest.raises(EnvelopeError, match="Decryption failed"):
            unseal(sealed.payload, _subset(sealed.shares, [1, 2]))

    @skip_no_crypto
    def test_insufficient_tagged_shares(self):
        from squad.core.errors import TagVerificationFailed
        from squad.core.entropy import SeededRandomSource
        from squad.envelope import seal, unseal

        sealed = seal(b"secret document", 3, 5, tag=True, rng=SeededRandomSource(3))
        with pytest.raises(TagVerificationFailed):
            unseal(sealed.payload, _subset(sealed.shares, [1, 2]), tag=True)

    @skip_no_crypto
    def test_tampered_ciphertext(self):
        from squad.envelope import EncryptedPayload, EnvelopeError, seal, unseal

        sealed = seal(b"secret", 2, 3)
        tampered = EncryptedPayload(
            nonce=sealed.payload.nonce,
            ciphertext=bytes([sealed.payload.ciphertext[0] ^ 1]) + sealed.payload.ciphertext[1:],
        )
        with pytest.raises(EnvelopeError, match="Decryption failed"):
            unseal(tampered, sealed.shares)

    @skip_no_crypto
    def test_wrong_key_length(self):
        from squad.envelope import EnvelopeError, seal, unseal
        from squad.core.split import split

        sealed = seal(b"secret", 2, 3)
        with pytest.raises(EnvelopeError, match="expected 32"):
            unseal(sealed.payload, split(b"short key", 2, 2))

    @skip_no_crypto
    def test_seeded_seal_is_deterministic(self):
        from squad.core.entropy import SeededRandomSource
        from squad.envelope import seal

        a = seal(b"same", 2, 3, rng=SeededRandomSource(11))
        b = seal(b"same", 2, 3, rng=SeededRandomSource(11))
        assert a == b

    def test_payload_serialization(self):
        from squad.envelope import EncryptedPayload

        payload = EncryptedPayload(
            nonce=b"\x01" * ENVELOPE_NONCE_SIZE,
            ciphertext=b"\x02" * (ENVELOPE_TAG_SIZE + 5),
        )
        raw = payload.to_bytes()
        assert raw[:ENVELOPE_NONCE_SIZE] == payload.nonce
        assert EncryptedPayload.from_bytes(raw) == payload

    def test_payload_too_short(self):
        from squad.envelope import EncryptedPayload, EnvelopeError

        with pytest.raises(EnvelopeError, match="too short"):
            EncryptedPayload.from_bytes(b"\x00" * (ENVELOPE_NONCE_SIZE + ENVELOPE_TAG_SIZE - 1))

    def test_envelope_error_is_value_error(self):
        from squad.envelope import EnvelopeError

        assert issubclass(EnvelopeError, ValueError)

    def test_missing_cryptography_message(self):
        """If cryptography is missing, import should give a clear message."""
        from squad.envelope import _import_cryptography
        if HAS_CRYPTO:
            _import_cryptography()  # should not raise
        else:
            with pytest.raises(ImportError, match="squad\\[envelope\\]"):
                _import_cryptography()
