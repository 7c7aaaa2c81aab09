"""
Envelope sealing: encrypt a payload, share only the key.

Splitting is per byte, so every share is as large as the secret. For large
files, seal() encrypts the plaintext under a fresh AES-256-GCM key and
splits that 32-byte key instead; the ciphertext can be stored anywhere and
only the small key shares need to be distributed.

Sealed payload layout: nonce (12 bytes) || ciphertext (includes 16-byte GCM tag)

The `cryptography` package is lazily imported, a missing dependency
produces a clear error message.

Install with: pip install squad[envelope]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from squad import ENVELOPE_KEY_SIZE, ENVELOPE_NONCE_SIZE, ENVELOPE_TAG_SIZE
from squad.core.combine import combine
from squad.core.entropy import DEFAULT_RANDOM, RandomSource
from squad.core.errors import SquadError
from squad.core.field import FIELD_256, FieldEngine
from squad.core.split import split

log = logging.getLogger(__name__)


class EnvelopeError(SquadError, ValueError):
    """Sealed payload is malformed or failed authentication."""


def _import_cryptography():
    """Lazily import the cryptography package.

    Raises ImportError with a helpful message if not installed.
    """
    try:
        from cryptography.hazmat.primitives.ciphers.aead import AESGCM

        return AESGCM
    except ImportError:
        raise ImportError(
            "cryptography is required for envelope sealing. "
            "Install with: pip install squad[envelope]"
        )


@dataclass(frozen=True)
class EncryptedPayload:
    """Container for an AES-256-GCM encrypted payload.

    Attributes:
        nonce: The 12-byte nonce used for encryption.
        ciphertext: The encrypted data including GCM auth tag.
    """

    nonce: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        """Serialize to bytes: nonce(12) + ciphertext."""
        return self.nonce + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> EncryptedPayload:
        """Deserialize from bytes."""
        if len(data) < ENVELOPE_NONCE_SIZE + ENVELOPE_TAG_SIZE:
            raise EnvelopeError("Encrypted payload too short")
        return cls(
            nonce=bytes(data[:ENVELOPE_NONCE_SIZE]),
            ciphertext=bytes(data[ENVELOPE_NONCE_SIZE:]),
        )


@dataclass(frozen=True)
class SealedSecret:
    payload: EncryptedPayload
    shares: dict[int, bytes]


def _zero(buf: bytearray) -> None:
    # Best-effort key zeroing
    for i in range(len(buf)):
        buf[i] = 0


def seal(
    plaintext: bytes,
    k: int,
    n: int,
    *,
    field: FieldEngine = FIELD_256,
    tag: bool = False,
    rng: RandomSource | None = None,
) -> SealedSecret:
    """Encrypt plaintext under a random key and split the key into n shares.

    Args:
        plaintext: Data to encrypt. May be empty.
        k: Minimum number of key shares needed to unseal.
        n: Total number of key shares.
        field: GF(256) instance used to split the key.
        tag: Tag the key shares (see split()).
        rng: Source for the key, nonce and polynomial coefficients.

    Returns:
        SealedSecret with the encrypted payload and the key shares.

    Raises:
        InvalidInput: If k / n are invalid.
    """
    AESGCM = _import_cryptography()
    source = rng if rng is not None else DEFAULT_RANDOM

    key = bytearray(source.read(ENVELOPE_KEY_SIZE))
    nonce = source.read(ENVELOPE_NONCE_SIZE)
    try:
        shares = split(bytes(key), k, n, field=field, tag=tag, rng=rng)
        ciphertext = AESGCM(bytes(key)).encrypt(nonce, bytes(plaintext), None)
    finally:
        _zero(key)

    log.debug("Sealed %d bytes under a %d-of-%d key split", len(plaintext), k, n)
    return SealedSecret(
        payload=EncryptedPayload(nonce=nonce, ciphertext=ciphertext),
        shares=shares,
    )


def unseal(
    payload: EncryptedPayload,
    shares: Mapping[int, bytes],
    *,
    field: FieldEngine = FIELD_256,
    tag: bool = False,
) -> bytes:
    """Recombine the key shares and decrypt the payload.

    Raises:
        TagVerificationFailed: If tag=True and the key shares fail the tag check.
        EnvelopeError: If the recovered key does not decrypt the payload
            (too few or wrong shares, wrong field, or tampered ciphertext).
    """
    AESGCM = _import_cryptography()

    key = bytearray(combine(shares, field=field, tag=tag))
    try:
        if len(key) != ENVELOPE_KEY_SIZE:
            raise EnvelopeError(
                f"Recovered key is {len(key)} bytes, expected {ENVELOPE_KEY_SIZE}"
            )
        try:
            return AESGCM(bytes(key)).decrypt(payload.nonce, payload.ciphertext, None)
        except Exception:
            raise EnvelopeError(
                "Decryption failed: insufficient or wrong shares, or tampered ciphertext"
            )
    finally:
        _zero(key)
