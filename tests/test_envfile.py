"""Tests for the env file reader and gateway token upsert."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from openclaw_setup.config.envfile import (
    GATEWAY_TOKEN_KEY,
    normalize_env_value,
    read_env_file,
    upsert_gateway_token,
)
from openclaw_setup.errors import EnvFileNotFoundError, ValidationError


# ---------------------------------------------------------------------------
# normalize_env_value
# ---------------------------------------------------------------------------


class TestNormalizeEnvValue:
    @pytest.mark.parametrize("raw,expected", [
        ("plain", "plain"),
        ("  spaced  ", "spaced"),
        ('"double"', "double"),
        ("'single'", "single"),
        ('  " padded inside "  ', "padded inside"),
        ("\"'both'\"", "both"),
        ("", ""),
    ])
    def test_values(self, raw: str, expected: str) -> None:
        assert normalize_env_value(raw) == expected

    def test_strips_only_one_layer(self) -> None:
        assert normalize_env_value('""nested""') == '"nested"'


# ---------------------------------------------------------------------------
# read_env_file
# ---------------------------------------------------------------------------


class TestReadEnvFile:
    def test_parses_assignments(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text(
            "# a comment\n"
            "\n"
            "PROVIDER=openai\n"
            "  MODEL = \"gpt-4o\"  \n"
            "API_KEY='sk-test'\n"
        )
        assert read_env_file(path) == {"PROVIDER": "openai", "MODEL": "gpt-4o", "API_KEY": "sk-test"}

    def test_splits_on_first_equals_only(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("DSN=postgres://u:p@h/db?sslmode=require&x=1\n")
        assert read_env_file(path)["DSN"] == "postgres://u:p@h/db?sslmode=require&x=1"

    def test_last_duplicate_wins(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("MODEL=first\nMODEL=second\n")
        assert read_env_file(path) == {"MODEL": "second"}

    def test_skips_lines_without_key_or_equals(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("garbage line\n=value\n   # indented comment\nOK=1\n")
        assert read_env_file(path) == {"OK": "1"}

    def test_is_idempotent(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("A=1\nB='2'\n# c\nA=3\n")
        assert read_env_file(path) == read_env_file(path)

    def test_only_newline_ends_a_line(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("NOTE=a\x0cB=1 C=2\nD=3\r\n")
        assert read_env_file(path) == {"NOTE": "a\x0cB=1 C=2", "D": "3"}

    def test_reader_and_upsert_agree_on_lines(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text(f"NOTE=x\x1c{GATEWAY_TOKEN_KEY}=old\n")
        assert GATEWAY_TOKEN_KEY not in read_env_file(path)

        assert upsert_gateway_token(path, "fresh") is False
        env = read_env_file(path)
        assert env[GATEWAY_TOKEN_KEY] == "fresh"
        assert env["NOTE"] == f"x\x1c{GATEWAY_TOKEN_KEY}=old"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(EnvFileNotFoundError):
            read_env_file(tmp_path / "nope.env")


# ---------------------------------------------------------------------------
# upsert_gateway_token
# ---------------------------------------------------------------------------


class TestUpsertGatewayToken:
    def test_appends_when_absent(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        original = "# deployment\nPROVIDER=openai\nMODEL=gpt-4o\n"
        path.write_text(original)

        updated = upsert_gateway_token(path, "abc123")

        assert updated is False
        lines = path.read_text().split("\n")
        assert lines[:3] == ["# deployment", "PROVIDER=openai", "MODEL=gpt-4o"]
        assert lines[3] == f"{GATEWAY_TOKEN_KEY}=abc123"
        assert len(lines) == len(original.split("\n")) + 1

    def test_appends_to_file_without_trailing_newline(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("A=1")
        upsert_gateway_token(path, "tok")
        assert path.read_text() == f"A=1\n{GATEWAY_TOKEN_KEY}=tok"

    def test_replaces_current_and_legacy_keys(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text(
            "OPENCLAW_GATEWAY_TOKEN=old\n"
            "KEEP=me\n"
            "CLAWDBOT_GATEWAY_TOKEN=older\n"
        )
        before = path.read_text().split("\n")

        updated = upsert_gateway_token(path, "new")

        after = path.read_text().split("\n")
        assert updated is True
        assert len(after) == len(before)
        assert after[0] == f"{GATEWAY_TOKEN_KEY}=new"
        assert after[1] == "KEEP=me"
        assert after[2] == f"{GATEWAY_TOKEN_KEY}=new"

    def test_leaves_commented_token_alone(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("# OPENCLAW_GATEWAY_TOKEN=commented\n")
        upsert_gateway_token(path, "tok")
        content = path.read_text()
        assert "# OPENCLAW_GATEWAY_TOKEN=commented" in content
        assert content.count(f"{GATEWAY_TOKEN_KEY}=tok") == 1

    def test_preserves_unrelated_lines_verbatim(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("  SPACED = 'x'  \n\n# note\n")
        upsert_gateway_token(path, "tok")
        assert path.read_text().startswith("  SPACED = 'x'  \n\n# note\n")

    def test_owner_only_permissions(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("A=1\n")
        path.chmod(0o644)
        upsert_gateway_token(path, "tok")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_empty_token_rejected_without_touching_file(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("A=1\n")
        with pytest.raises(ValidationError):
            upsert_gateway_token(path, "  ")
        assert path.read_text() == "A=1\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(EnvFileNotFoundError):
            upsert_gateway_token(tmp_path / "missing.env", "tok")
