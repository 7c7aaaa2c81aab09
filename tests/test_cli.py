"""
Tests for the squad command line — squad.cli.
"""

from __future__ import annotations

import pytest

from squad.cli import CliDefaults, build_parser, main

try:
    import cryptography  # noqa: F401
    HAS_CRYPTO = True
except ImportError:
    HAS_CRYPTO = False


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SQUAD_FIELD", "SQUAD_TAG", "SQUAD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def secret_file(tmp_path):
    path = tmp_path / "secret.txt"
    path.write_bytes(b"Hello, World!\n")
    return path


class TestCliDefaults:

    def test_defaults(self):
        defaults = CliDefaults.from_env()
        assert defaults.field == "aes"
        assert defaults.tag is False
        assert defaults.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SQUAD_FIELD", "reed-solomon")
        monkeypatch.setenv("SQUAD_TAG", "yes")
        monkeypatch.setenv("SQUAD_LOG_LEVEL", "debug")
        defaults = CliDefaults.from_env()
        assert defaults.field == "reed-solomon"
        assert defaults.tag is True
        assert defaults.log_level == "DEBUG"

    def test_flag_overrides_env(self, monkeypatch):
        monkeypatch.setenv("SQUAD_TAG", "1")
        parser = build_parser()
        args = parser.parse_args(["combine", "a", "-o", "out", "--no-tag"])
        assert args.tag is False


class TestSplitCombine:

    def test_roundtrip(self, tmp_path, secret_file, capsys):
        out_dir = tmp_path / "shares"
        main(["split", str(secret_file), "-k", "3", "-n", "5", "-d", str(out_dir)])
        assert "Split into 5 shares" in capsys.readouterr().out
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "share-001", "share-002", "share-003", "share-004", "share-005",
        ]

        out = tmp_path / "combined.txt"
        main(["combine", *(str(out_dir / f"share-00{i}") for i in (2, 4, 5)), "-o", str(out)])
        assert out.read_bytes() == secret_file.read_bytes()

    def test_existing_shares_refused(self, tmp_path, secret_file, capsys):
        out_dir = tmp_path / "shares"
        main(["split", str(secret_file), "-k", "3", "-n", "5", "-d", str(out_dir)])
        with pytest.raises(SystemExit) as excinfo:
            main(["split", str(secret_file), "-k", "2", "-n", "3", "-d", str(out_dir)])
        assert excinfo.value.code == 1
        assert "--force" in capsys.readouterr().err
        assert len(list(out_dir.iterdir())) == 5

    def test_force_replaces_stale_shares(self, tmp_path, secret_file):
        out_dir = tmp_path / "shares"
        main(["split", str(secret_file), "-k", "3", "-n", "5", "-d", str(out_dir)])
        main(["split", str(secret_file), "-k", "2", "-n", "3", "-d", str(out_dir), "--force"])
        assert sorted(p.name for p in out_dir.iterdir()) == ["share-001", "share-002", "share-003"]

        out = tmp_path / "combined.txt"
        main(["combine", str(out_dir / "share-001"), str(out_dir / "share-003"), "-o", str(out)])
        assert out.read_bytes() == secret_file.read_bytes()

    def test_tagged_hex_reed_solomon(self, tmp_path, secret_file):
        out_dir = tmp_path / "shares"
        main([
            "split", str(secret_file), "-k", "2", "-n", "3", "-d", str(out_dir),
            "--tag", "--hex", "--field", "reed-solomon",
        ])
        out = tmp_path / "combined.txt"
        main([
            "combine", str(out_dir / "share-001.hex"), str(out_dir / "share-003.hex"),
            "-o", str(out), "--tag", "--field", "reed-solomon",
        ])
        assert out.read_bytes() == secret_file.read_bytes()

    def test_env_defaults_apply(self, tmp_path, secret_file, monkeypatch):
        monkeypatch.setenv("SQUAD_FIELD", "reed-solomon")
        monkeypatch.setenv("SQUAD_TAG", "true")
        out_dir = tmp_path / "shares"
        main(["split", str(secret_file), "-k", "2", "-n", "2", "-d", str(out_dir)])

        share = (out_dir / "share-001").read_bytes()
        assert len(share) == 1 + 8 + len(secret_file.read_bytes())

        out = tmp_path / "combined.txt"
        main(["combine", str(out_dir / "share-001"), str(out_dir / "share-002"), "-o", str(out)])
        assert out.read_bytes() == secret_file.read_bytes()

    def test_tag_failure_exits(self, tmp_path, secret_file, capsys):
        out_dir = tmp_path / "shares"
        main(["split", str(secret_file), "-k", "3", "-n", "5", "-d", str(out_dir), "--tag"])
        with pytest.raises(SystemExit) as excinfo:
            main([
                "combine", str(out_dir / "share-001"), str(out_dir / "share-002"),
                "-o", str(tmp_path / "out"), "--tag",
            ])
        assert excinfo.value.code == 1
        assert "tag verification failed" in capsys.readouterr().err

    def test_invalid_threshold_exits(self, secret_file, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["split", str(secret_file), "-k", "5", "-n", "3"])
        assert excinfo.value.code == 1
        assert "n must not be less than k" in capsys.readouterr().err

    def test_unknown_field_exits(self, secret_file, capsys):
        with pytest.raises(SystemExit):
            main(["split", str(secret_file), "-k", "2", "-n", "3", "--field", "nope"])
        assert "Unknown field preset" in capsys.readouterr().err

    def test_missing_secret_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["split", str(tmp_path / "missing"), "-k", "2", "-n", "3"])
        assert "File not found" in capsys.readouterr().err

    def test_missing_share_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["combine", str(tmp_path / "share-001"), "-o", str(tmp_path / "out")])
        assert "Share file not found" in capsys.readouterr().err

    def test_corrupt_share_file(self, tmp_path, capsys):
        bad = tmp_path / "bad.hex"
        bad.write_text("not hex at all")
        with pytest.raises(SystemExit):
            main(["combine", str(bad), "-o", str(tmp_path / "out")])
        assert "not valid hex" in capsys.readouterr().err


class TestMisc:

    def test_fields(self, capsys):
        main(["fields"])
        out = capsys.readouterr().out
        assert "aes" in out and "0x11B" in out
        assert "reed-solomon" in out and "0x11D" in out

    def test_no_command_prints_usage(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 0
        assert "squad split" in capsys.readouterr().out


@pytest.mark.skipif(not HAS_CRYPTO, reason="cryptography package not installed")
class TestSealUnseal:

    def test_roundtrip(self, tmp_path, secret_file):
        out_dir = tmp_path / "keys"
        main(["seal", str(secret_file), "-k", "2", "-n", "3", "-d", str(out_dir)])
        sealed = tmp_path / "secret.txt.sealed"
        assert sealed.is_file()

        secret_file.rename(tmp_path / "original.txt")
        main(["unseal", str(sealed), str(out_dir / "share-001"), str(out_dir / "share-003")])
        assert (tmp_path / "secret.txt").read_bytes() == (tmp_path / "original.txt").read_bytes()

    def test_insufficient_shares_exit(self, tmp_path, secret_file, capsys):
        out_dir = tmp_path / "keys"
        main(["seal", str(secret_file), "-k", "3", "-n", "3", "-d", str(out_dir)])
        with pytest.raises(SystemExit) as excinfo:
            main([
                "unseal", str(tmp_path / "secret.txt.sealed"),
                str(out_dir / "share-001"), str(out_dir / "share-002"),
                "-o", str(tmp_path / "out"),
            ])
        assert excinfo.value.code == 1
        assert "Decryption failed" in capsys.readouterr().err
