"""
Splitting a secret into Shamir shares.

Each byte of the (tag || secret) stream gets its own random polynomial of
degree k - 1 whose constant term is that byte. Share x holds every
polynomial evaluated at x, so a share is exactly as long as the secret plus
the optional tag.
"""

from __future__ import annotations

import logging
from typing import Any

from squad import MAX_SHARES, MIN_THRESHOLD, TAG_LENGTH
from squad.core.entropy import RandomSource
from squad.core.errors import InvalidInput
from squad.core.field import FIELD_256, FieldEngine
from squad.core.polynomial import make_polynomial

log = logging.getLogger(__name__)


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an integer, got {type(value).__name__}")


def split(
    secret: bytes,
    k: int,
    n: int,
    *,
    field: FieldEngine | None = FIELD_256,
    tag: bool = False,
    rng: RandomSource | None = None,
) -> dict[int, bytes]:
    """Split a secret into n shares, any k of which recreate it.

    Shares are keyed 1..n. The key is the x coordinate used to evaluate the
    polynomials, so a share's payload must stay paired with its key; you
    cannot swap the values of shares[1] and shares[3]. Key 0 is never used,
    it is where the secret lies.

    combine() is unaware of being given fewer than k shares. Pass tag=True to
    share an all-zero 8-byte prefix alongside the secret so that combine()
    can detect that case (and corrupted or mismatched shares).

    Constraints:
        2 <= k <= n <= 255

    Args:
        secret: The bytes to split. Must not be empty.
        k: Minimum number of shares required to recover the secret.
        n: Total number of shares to generate.
        field: GF(256) instance; must match the one used to combine.
        tag: Prepend TAG_LENGTH tag bytes to every share.
        rng: Random source for polynomial coefficients (system CSPRNG by default).

    Returns:
        A dict from share index (1..n) to share bytes.

    Raises:
        InvalidInput: If any parameter is invalid.
    """
    if field is None:
        raise InvalidInput("galois field is nil")
    if isinstance(secret, str):
        raise InvalidInput("secret must be bytes; use split_string() for text")
    if not isinstance(secret, (bytes, bytearray, memoryview)):
        raise InvalidInput(f"secret must be bytes, got {type(secret).__name__}")
    secret = bytes(secret)
    if len(secret) == 0:
        raise InvalidInput("secret is empty")
    _require_int("k", k)
    _require_int("n", n)
    if k < MIN_THRESHOLD:
        raise InvalidInput("k must be at least 2")
    if n < k:
        raise InvalidInput("n must not be less than k")
    if n > MAX_SHARES:
        raise InvalidInput(f"n must not exceed {MAX_SHARES}")

    degree = k - 1
    tag_length = TAG_LENGTH if tag else 0
    buffers = {x: bytearray(len(secret) + tag_length) for x in range(1, n + 1)}

    for i in range(tag_length):
        coeffs = make_polynomial(0, degree, rng)
        for x, buf in buffers.items():
            buf[i] = field.evaluate(coeffs, x)

    for i, byte_val in enumerate(secret):
        coeffs = make_polynomial(byte_val, degree, rng)
        for x, buf in buffers.items():
            buf[tag_length + i] = field.evaluate(coeffs, x)

    log.debug(
        "Split %d-byte secret into %d shares (k=%d, tagged=%s, field=%r)",
        len(secret), n, k, tag, field,
    )
    return {x: bytes(buf) for x, buf in buffers.items()}


def split_string(secret: str, k: int, n: int, **options: Any) -> dict[int, bytes]:
    """UTF-8 encode a string and split it. Same options and errors as split()."""
    if not isinstance(secret, str):
        raise InvalidInput(f"secret must be str, got {type(secret).__name__}; use split() for bytes")
    return split(secret.encode("utf-8"), k, n, **options)
