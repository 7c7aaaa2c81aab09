"""
Random byte sources for polynomial coefficients.

SystemRandomSource is the only source suitable for real secrets.
SeededRandomSource exists so tests can reproduce a split exactly.
"""

from __future__ import annotations

import random
import secrets
import threading
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    def read(self, size: int) -> bytes: ...


class SystemRandomSource:
    """CSPRNG-backed source (os.urandom via the secrets module)."""

    def read(self, size: int) -> bytes:
        return secrets.token_bytes(size)

    def __repr__(self) -> str:
        return "SystemRandomSource()"


class SeededRandomSource:
    """Deterministic source for tests. NOT cryptographically secure."""

    def __init__(self, seed: int | str | bytes) -> None:
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def read(self, size: int) -> bytes:
        with self._lock:
            return bytes(self._rng.getrandbits(8) for _ in range(size))


DEFAULT_RANDOM = SystemRandomSource()
