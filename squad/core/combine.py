"""
Recombining Shamir shares.

Every byte position is recovered independently by interpolating the
(share index, share byte) points at x = 0. Interpolation cannot tell when
fewer than k shares were supplied: it returns a well-formed but wrong
secret. Only the optional tag turns that case into an error.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from squad import MAX_SHARES, TAG_LENGTH
from squad.core.errors import (
    FieldError,
    InvalidInput,
    ReconstructionFailed,
    TagVerificationFailed,
)
from squad.core.field import FIELD_256, FieldEngine

log = logging.getLogger(__name__)


def _validate(shares: Mapping[int, bytes], tag: bool) -> int:
    """Check indices and payload lengths. Returns the common share length."""
    length = len(next(iter(shares.values())))
    for x, data in shares.items():
        if isinstance(x, bool) or not isinstance(x, int):
            raise InvalidInput(f"share index must be an integer, got {x!r}")
        if not 1 <= x <= MAX_SHARES:
            raise InvalidInput(f"share index {x} out of range [1, {MAX_SHARES}]")
        if len(data) != length:
            raise InvalidInput(
                f"share {x} has length {len(data)}, expected {length}"
            )
    if tag and length < TAG_LENGTH:
        raise InvalidInput(
            f"shares are {length} bytes, shorter than the {TAG_LENGTH}-byte tag"
        )
    return length


def combine(
    shares: Mapping[int, bytes],
    *,
    field: FieldEngine | None = FIELD_256,
    tag: bool = False,
) -> bytes:
    """Attempt to recreate the original secret from a set of shares.

    At least k of the original shares must be present, otherwise the result
    is silently garbage unless the shares were tagged and tag=True.

    The field must be the one used by split(). The tag flag may be left off
    for tagged shares, in which case the secret comes back with an 8-byte
    zero prefix.

    Args:
        shares: Mapping of share index to share bytes.
        field: GF(256) instance used at split time.
        tag: Verify and strip the TAG_LENGTH tag prefix.

    Returns:
        The recovered secret. Empty if no shares were given.

    Raises:
        InvalidInput: If field is None or share indices or lengths are malformed.
        TagVerificationFailed: If tagging is on and the tag is not all zero.
        ReconstructionFailed: If the field engine cannot interpolate the points.
    """
    if field is None:
        raise InvalidInput("galois field is nil")
    if not shares:
        return b""

    share_length = _validate(shares, tag)
    tag_offset = TAG_LENGTH if tag else 0
    secret_length = share_length - tag_offset
    if secret_length == 0:
        return b""

    entries = list(shares.items())

    try:
        for i in range(tag_offset):
            samples = [(x, data[i]) for x, data in entries]
            if field.interpolate(samples, 0) != 0:
                log.debug("Tag byte %d did not interpolate to zero (%d shares)", i, len(entries))
                raise TagVerificationFailed("tag verification failed: tag mismatch")

        secret = bytearray(secret_length)
        for i in range(secret_length):
            samples = [(x, data[i + tag_offset]) for x, data in entries]
            secret[i] = field.interpolate(samples, 0)
    except FieldError as e:
        raise ReconstructionFailed(f"secret reconstruction failed: {e}") from e

    log.debug(
        "Combined %d shares into %d-byte secret (tagged=%s, field=%r)",
        len(entries), secret_length, tag, field,
    )
    return bytes(secret)


def combine_string(shares: Mapping[int, bytes], **options: Any) -> str:
    """Combine shares and UTF-8 decode the result. Same options as combine()."""
    return combine(shares, **options).decode("utf-8")
