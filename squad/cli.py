"""
squad CLI — Shamir secret sharing for files.

Commands:
  squad split    - Split a file into n share files, any k of which recover it
  squad combine  - Recover a file from k or more share files
  squad seal     - Encrypt a file (AES-256-GCM) and split only the key
  squad unseal   - Recover the key from shares and decrypt a sealed file
  squad fields   - List the GF(256) field presets

Environment:
  SQUAD_FIELD      default field preset (aes, reed-solomon)
  SQUAD_TAG        1/true/yes/on to tag shares by default
  SQUAD_LOG_LEVEL  logging level name (DEBUG, INFO, ...)
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from squad import DEFAULT_FIELD, ENVELOPE_SUFFIX, __version__

log = logging.getLogger(__name__)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class CliDefaults:
    """Option defaults taken from the environment."""

    field: str = DEFAULT_FIELD
    tag: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> CliDefaults:
        """Read SQUAD_FIELD, SQUAD_TAG and SQUAD_LOG_LEVEL."""
        return cls(
            field=os.environ.get("SQUAD_FIELD", "") or DEFAULT_FIELD,
            tag=os.environ.get("SQUAD_TAG", "").strip().lower() in _TRUTHY,
            log_level=(os.environ.get("SQUAD_LOG_LEVEL", "") or "INFO").upper(),
        )


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _setup_logging(args: argparse.Namespace, defaults: CliDefaults) -> None:
    level = logging.DEBUG if args.verbose else getattr(logging, defaults.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def _resolve_field(args: argparse.Namespace):
    """Field from --field, falling back to SQUAD_FIELD / the default preset."""
    from squad.core.field import get_field
    from squad.core.errors import InvalidInput

    try:
        return get_field(args.field)
    except InvalidInput as e:
        _fail(str(e))


def _read_input(path_str: str) -> bytes:
    path = Path(path_str)
    if not path.is_file():
        _fail(f"File not found: {path}")
    return path.read_bytes()


def _load_shares(paths: list[str]) -> dict[int, bytes]:
    from squad.core.errors import InvalidInput
    from squad.shares import read_share, shares_to_map

    loaded = []
    for share_path_str in paths:
        share_path = Path(share_path_str)
        if not share_path.is_file():
            _fail(f"Share file not found: {share_path}")
        try:
            loaded.append(read_share(share_path))
        except (InvalidInput, UnicodeDecodeError) as e:
            _fail(f"Parsing {share_path}: {e}")
    try:
        return shares_to_map(loaded)
    except InvalidInput as e:
        _fail(str(e))


def cmd_split(args: argparse.Namespace) -> None:
    """Split a file into Shamir shares."""
    from squad.core.errors import InvalidInput
    from squad.core.split import split
    from squad.shares import write_shares

    secret_path = Path(args.path)
    secret = _read_input(args.path)
    field = _resolve_field(args)

    try:
        shares = split(secret, args.threshold, args.total, field=field, tag=args.tag)
    except InvalidInput as e:
        _fail(str(e))

    out_dir = Path(args.output_dir) if args.output_dir else secret_path.parent
    encoding = "hex" if args.hex else "binary"
    try:
        paths = write_shares(shares, out_dir, encoding, overwrite=args.force)
    except InvalidInput as e:
        _fail(f"{e} (use --force to replace them)")
    for index, share_path in zip(sorted(shares), paths):
        print(f"  Share {index}/{args.total} -> {share_path}")

    print(f"\nSplit into {args.total} shares (threshold: {args.threshold}, field: {args.field}"
          f"{', tagged' if args.tag else ''})")


def cmd_combine(args: argparse.Namespace) -> None:
    """Combine Shamir shares to recover a file."""
    from squad.core.combine import combine
    from squad.core.errors import SquadError

    shares = _load_shares(args.share_files)
    field = _resolve_field(args)

    try:
        secret = combine(shares, field=field, tag=args.tag)
    except SquadError as e:
        _fail(str(e))

    out_path = Path(args.output)
    out_path.write_bytes(secret)
    print(f"Recovered secret -> {out_path} ({len(secret)} bytes)")


def cmd_seal(args: argparse.Namespace) -> None:
    """Encrypt a file and split the key into shares."""
    from squad.core.errors import InvalidInput
    from squad.envelope import seal
    from squad.shares import write_shares

    path = Path(args.path)
    plaintext = _read_input(args.path)
    field = _resolve_field(args)

    try:
        sealed = seal(plaintext, args.threshold, args.total, field=field, tag=args.tag)
    except (InvalidInput, ImportError) as e:
        _fail(str(e))

    out_path = Path(args.output) if args.output else path.with_suffix(path.suffix + ENVELOPE_SUFFIX)
    out_dir = Path(args.output_dir) if args.output_dir else out_path.parent
    encoding = "hex" if args.hex else "binary"
    try:
        share_paths = write_shares(sealed.shares, out_dir, encoding, overwrite=args.force)
    except InvalidInput as e:
        _fail(f"{e} (use --force to replace them)")

    out_path.write_bytes(sealed.payload.to_bytes())
    print(f"Sealed {path} -> {out_path}")
    for share_path in share_paths:
        print(f"  Key share -> {share_path}")

    print(f"\nKey split into {args.total} shares (threshold: {args.threshold})")


def cmd_unseal(args: argparse.Namespace) -> None:
    """Recover the key from shares and decrypt a sealed file."""
    from squad.core.errors import SquadError
    from squad.envelope import EncryptedPayload, unseal

    sealed_path = Path(args.path)
    raw = _read_input(args.path)
    shares = _load_shares(args.share_files)
    field = _resolve_field(args)

    try:
        payload = EncryptedPayload.from_bytes(raw)
        plaintext = unseal(payload, shares, field=field, tag=args.tag)
    except (SquadError, ImportError) as e:
        _fail(str(e))

    if args.output:
        out_path = Path(args.output)
    elif sealed_path.suffix == ENVELOPE_SUFFIX:
        out_path = sealed_path.with_suffix("")
    else:
        out_path = sealed_path.with_suffix(".dec")

    out_path.write_bytes(plaintext)
    print(f"Unsealed {sealed_path} -> {out_path} ({len(plaintext)} bytes)")


def cmd_fields(args: argparse.Namespace) -> None:
    """List field presets."""
    from squad.core.field import FIELD_PRESETS

    for name, gf in FIELD_PRESETS.items():
        marker = "*" if name == args.field else " "
        print(f"{marker} {name:<14} polynomial=0x{gf.polynomial:X} generator=0x{gf.generator:02X}")


def _add_field_args(parser: argparse.ArgumentParser, defaults: CliDefaults) -> None:
    parser.add_argument(
        "--field",
        default=defaults.field,
        help=f"GF(256) preset: aes or reed-solomon (default: {defaults.field}, or set SQUAD_FIELD)",
    )
    parser.add_argument(
        "--tag",
        action=argparse.BooleanOptionalAction,
        default=defaults.tag,
        help="Share an 8-byte zero tag to detect bad recombination (or set SQUAD_TAG)",
    )


def _add_split_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-k", "--threshold", type=int, required=True, help="Minimum shares to reconstruct")
    parser.add_argument("-n", "--total", type=int, required=True, help="Total shares to create")
    parser.add_argument("-d", "--output-dir", help="Output directory for share files")
    parser.add_argument("--hex", action="store_true", help="Write shares as .hex text files")
    parser.add_argument(
        "--force", action="store_true", help="Replace share files already in the output directory",
    )


def build_parser(defaults: CliDefaults | None = None) -> argparse.ArgumentParser:
    defaults = defaults or CliDefaults.from_env()

    parser = argparse.ArgumentParser(
        prog="squad",
        description="Shamir's Secret Sharing over GF(256)",
    )
    parser.add_argument("--version", action="version", version=f"squad {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # split
    p_split = sub.add_parser("split", help="Split a file into shares")
    p_split.add_argument("path", help="File containing the secret")
    _add_split_args(p_split)
    _add_field_args(p_split, defaults)

    # combine
    p_combine = sub.add_parser("combine", help="Combine shares to recover a file")
    p_combine.add_argument("share_files", nargs="+", help="Share files to combine")
    p_combine.add_argument("-o", "--output", required=True, help="Output file for recovered secret")
    _add_field_args(p_combine, defaults)

    # seal
    p_seal = sub.add_parser("seal", help="Encrypt a file and split the key")
    p_seal.add_argument("path", help="File to seal")
    p_seal.add_argument("-o", "--output", help=f"Sealed output file (default: <path>{ENVELOPE_SUFFIX})")
    _add_split_args(p_seal)
    _add_field_args(p_seal, defaults)

    # unseal
    p_unseal = sub.add_parser("unseal", help="Decrypt a sealed file with key shares")
    p_unseal.add_argument("path", help="Sealed file")
    p_unseal.add_argument("share_files", nargs="+", help="Key share files")
    p_unseal.add_argument("-o", "--output", help="Output file path")
    _add_field_args(p_unseal, defaults)

    # fields
    p_fields = sub.add_parser("fields", help="List GF(256) field presets")
    p_fields.add_argument("--field", default=defaults.field, help=argparse.SUPPRESS)

    return parser


def main(argv: list[str] | None = None) -> None:
    defaults = CliDefaults.from_env()
    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    if not args.command:
        print("squad — Shamir's Secret Sharing over GF(256)")
        print()
        print("Usage:")
        print("  squad split secret.bin -k 3 -n 5 [--tag] [--field reed-solomon] [--hex]")
        print("  squad combine share-002 share-004 share-005 -o secret.bin [--tag]")
        print("  squad seal big.tar -k 3 -n 5")
        print("  squad unseal big.tar.sealed share-001 share-003 share-005")
        print("  squad fields")
        print()
        print("Run 'squad <command> --help' for details on any command.")
        sys.exit(0)

    _setup_logging(args, defaults)
    log.debug("squad %s: %s", __version__, args.command)

    commands = {
        "split": cmd_split,
        "combine": cmd_combine,
        "seal": cmd_seal,
        "unseal": cmd_unseal,
        "fields": cmd_fields,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
