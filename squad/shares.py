"""
Share persistence convention.

A persisted share is one index byte followed by the share payload, so the
index survives independently of whatever the file is called:

    share file = index (1 byte, 1..255) || payload (len(secret) + tag bytes)

Binary files carry those bytes directly; ".hex" files carry the same bytes
as lowercase hex text. Writes are atomic (temp file + os.replace).
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from squad import MAX_SHARES, SHARE_FILE_MODE, SHARE_FILE_TEMPLATE, SHARE_INDEX_SIZE
from squad.core.errors import InvalidInput

log = logging.getLogger(__name__)

HEX_SUFFIX = ".hex"
ENCODINGS = ("binary", "hex")
_SHARE_NAME = re.compile(r"share-\d{3}(\.hex)?")


@dataclass(frozen=True)
class Share:
    """A single share.

    Attributes:
        index: The x-coordinate (1..255).
        data: The share payload (same length as the secret plus any tag).
    """

    index: int
    data: bytes

    def __post_init__(self) -> None:
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            raise InvalidInput(f"Share index must be an integer, got {self.index!r}")
        if not 1 <= self.index <= MAX_SHARES:
            raise InvalidInput(f"Share index {self.index} out of range [1, {MAX_SHARES}]")
        object.__setattr__(self, "data", bytes(self.data))

    def to_bytes(self) -> bytes:
        """Encode as index_byte + data_bytes."""
        return bytes([self.index]) + self.data

    @classmethod
    def from_bytes(cls, raw: bytes) -> Share:
        """Decode from index_byte + data_bytes."""
        if len(raw) < SHARE_INDEX_SIZE + 1:
            raise InvalidInput("Share too short")
        return cls(index=raw[0], data=bytes(raw[SHARE_INDEX_SIZE:]))

    def to_hex(self) -> str:
        """Encode as hex of index_byte + data_bytes."""
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> Share:
        """Decode from hex."""
        try:
            raw = bytes.fromhex(hex_str.strip())
        except ValueError as e:
            raise InvalidInput(f"Share is not valid hex: {e}") from e
        return cls.from_bytes(raw)


def shares_from_map(shares: Mapping[int, bytes]) -> list[Share]:
    """Convert a split() result into Share objects, ordered by index."""
    return [Share(index=x, data=data) for x, data in sorted(shares.items())]


def shares_to_map(shares: Iterable[Share]) -> dict[int, bytes]:
    """Convert Share objects into the mapping combine() expects.

    Raises:
        InvalidInput: If two shares carry the same index.
    """
    result: dict[int, bytes] = {}
    for share in shares:
        if share.index in result:
            raise InvalidInput(f"Duplicate share index {share.index}")
        result[share.index] = share.data
    return result


def share_filename(index: int, encoding: str = "binary") -> str:
    name = SHARE_FILE_TEMPLATE.format(index=index)
    return name + HEX_SUFFIX if encoding == "hex" else name


def _atomic_write(path: Path, data: bytes, mode: int) -> None:
    dir_name = os.path.dirname(os.path.abspath(path)) or "."
    fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_share(
    share: Share,
    path: str | Path,
    encoding: str = "binary",
    mode: int = SHARE_FILE_MODE,
) -> int:
    """Write a share file atomically. Returns bytes written."""
    if encoding not in ENCODINGS:
        raise InvalidInput(f"Unknown share encoding {encoding!r}")
    data = share.to_hex().encode("ascii") + b"\n" if encoding == "hex" else share.to_bytes()
    _atomic_write(Path(path), data, mode)
    log.debug("Wrote share %d to %s (%s)", share.index, path, encoding)
    return len(data)


def read_share(path: str | Path, encoding: str | None = None) -> Share:
    """Read a share file.

    The index is taken from the file contents, never from its name. If
    encoding is None it is inferred from the suffix: ".hex" means hex text,
    anything else is binary.
    """
    path = Path(path)
    if encoding is None:
        encoding = "hex" if path.suffix == HEX_SUFFIX else "binary"
    if encoding not in ENCODINGS:
        raise InvalidInput(f"Unknown share encoding {encoding!r}")
    if encoding == "hex":
        return Share.from_hex(path.read_text(encoding="ascii"))
    return Share.from_bytes(path.read_bytes())


def existing_share_files(directory: str | Path) -> list[Path]:
    """Share files (binary or hex) already present in a directory."""
    out_dir = Path(directory)
    if not out_dir.is_dir():
        return []
    return sorted(p for p in out_dir.iterdir() if p.is_file() and _SHARE_NAME.fullmatch(p.name))


def write_shares(
    shares: Mapping[int, bytes],
    directory: str | Path,
    encoding: str = "binary",
    overwrite: bool = False,
) -> list[Path]:
    """Write every share of a split() result into a directory.

    Shares from an earlier split left beside the new ones would combine into
    garbage, so a directory that already holds share files is refused. With
    overwrite=True those files are removed first.

    Raises:
        InvalidInput: If the directory already contains share files and
            overwrite is False.
    """
    out_dir = Path(directory)
    existing = existing_share_files(out_dir)
    if existing and not overwrite:
        names = ", ".join(p.name for p in existing)
        raise InvalidInput(f"{out_dir} already contains share files: {names}")
    for path in existing:
        path.unlink()
        log.info("Removed old share file %s", path)

    out_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for share in shares_from_map(shares):
        path = out_dir / share_filename(share.index, encoding)
        write_share(share, path, encoding)
        paths.append(path)
    return paths


def read_shares(paths: Iterable[str | Path]) -> dict[int, bytes]:
    """Read share files into the mapping combine() expects."""
    return shares_to_map(read_share(p) for p in paths)
