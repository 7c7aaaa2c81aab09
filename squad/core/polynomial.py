"""Random polynomial construction over GF(256)."""

from __future__ import annotations

from squad.core.entropy import DEFAULT_RANDOM, RandomSource
from squad.core.errors import EntropyError, InvalidInput


def make_polynomial(
    constant: int,
    degree: int,
    rng: RandomSource | None = None,
) -> list[int]:
    """Build a polynomial of the given degree with a fixed constant term.

    Args:
        constant: The constant term (a secret or tag byte), 0..255.
        degree: Polynomial degree, k - 1. Must be at least 1.
        rng: Source for the random coefficients. Defaults to the system CSPRNG.

    Returns:
        degree + 1 coefficients, lowest order first. coefficients[0] == constant.

    Raises:
        InvalidInput: If constant or degree is out of range.
        EntropyError: If the random source returns a short read.
    """
    if not 0 <= constant <= 0xFF:
        raise InvalidInput(f"constant {constant} is not a byte")
    if degree < 1:
        raise InvalidInput("degree must be at least 1")

    source = rng if rng is not None else DEFAULT_RANDOM
    coeffs = source.read(degree)
    if len(coeffs) != degree:
        raise EntropyError(
            f"random source returned {len(coeffs)} bytes, expected {degree}"
        )
    return [constant, *coeffs]
