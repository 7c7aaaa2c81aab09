"""
Core secret sharing primitives.

Provides:
    - GF256 / FieldEngine — GF(2^8) arithmetic and the capability split/combine consume
    - FIELD_AES / FIELD_REED_SOLOMON / FIELD_256 — named field presets
    - make_polynomial — random polynomial with a fixed constant term
    - split / split_string — secret -> {index: share}
    - combine / combine_string — {index: share} -> secret, with optional tag check

All modules use stdlib only.
"""

from squad.core.errors import (
    EntropyError,
    FieldError,
    InvalidInput,
    ReconstructionFailed,
    SquadError,
    TagVerificationFailed,
)
from squad.core.field import (
    FIELD_256,
    FIELD_AES,
    FIELD_PRESETS,
    FIELD_REED_SOLOMON,
    GF256,
    FieldEngine,
    Generators,
    Point,
    Polynomials,
    get_field,
)
from squad.core.entropy import DEFAULT_RANDOM, RandomSource, SeededRandomSource, SystemRandomSource
from squad.core.polynomial import make_polynomial
from squad.core.split import split, split_string
from squad.core.combine import combine, combine_string

__all__ = [
    "DEFAULT_RANDOM",
    "EntropyError",
    "FIELD_256",
    "FIELD_AES",
    "FIELD_PRESETS",
    "FIELD_REED_SOLOMON",
    "FieldEngine",
    "FieldError",
    "GF256",
    "Generators",
    "InvalidInput",
    "Point",
    "Polynomials",
    "RandomSource",
    "ReconstructionFailed",
    "SeededRandomSource",
    "SquadError",
    "SystemRandomSource",
    "TagVerificationFailed",
    "combine",
    "combine_string",
    "get_field",
    "make_polynomial",
    "split",
    "split_string",
]
