"""
squad — Shamir's Secret Sharing over GF(2^8).

Architecture:
    Field engine:  GF(256) with exp/log tables, AES (0x11B/0x03) and Reed-Solomon (0x11D/0x02) presets
    Core:          split() -> {index: share bytes} -> combine() -> secret bytes
    Tagging:       optional 8-byte zero prefix shared alongside the secret, checked on combine
    Boundary:      index-prefixed share files, optional AES-256-GCM envelope, `squad` CLI

Usage:
    shares = split(b"Hello, World!", 3, 5)
    del shares[2], shares[4]
    assert combine(shares) == b"Hello, World!"
"""

__version__ = "0.1.0"

# Share indices are one byte and index 0 is the secret itself
MAX_SHARES = 255
MIN_THRESHOLD = 2

# Length of the zero prefix shared when tagging is enabled. This value will never change.
TAG_LENGTH = 8

# Share file convention: one index byte followed by the share payload
SHARE_INDEX_SIZE = 1
SHARE_FILE_TEMPLATE = "share-{index:03d}"
SHARE_FILE_MODE = 0o600

# Envelope constants
ENVELOPE_KEY_SIZE = 32  # AES-256
ENVELOPE_NONCE_SIZE = 12  # AES-GCM standard nonce
ENVELOPE_TAG_SIZE = 16  # GCM authentication tag
ENVELOPE_SUFFIX = ".sealed"

# Default field preset name (see squad.core.field.FIELD_PRESETS)
DEFAULT_FIELD = "aes"

from squad.core import (  # noqa: E402
    FIELD_256,
    FIELD_AES,
    FIELD_PRESETS,
    FIELD_REED_SOLOMON,
    GF256,
    FieldEngine,
    FieldError,
    Generators,
    InvalidInput,
    Polynomials,
    ReconstructionFailed,
    SquadError,
    TagVerificationFailed,
    combine,
    combine_string,
    get_field,
    split,
    split_string,
)

__all__ = [
    "FIELD_256",
    "FIELD_AES",
    "FIELD_PRESETS",
    "FIELD_REED_SOLOMON",
    "GF256",
    "FieldEngine",
    "FieldError",
    "Generators",
    "InvalidInput",
    "Polynomials",
    "ReconstructionFailed",
    "SquadError",
    "TAG_LENGTH",
    "TagVerificationFailed",
    "combine",
    "combine_string",
    "get_field",
    "split",
    "split_string",
]
