"""Tests for openclaw.json materialization."""

from __future__ import annotations

import json
import re
import stat
from pathlib import Path

import pytest

from openclaw_setup.config.writer import (
    CONFIG_FILENAME,
    ENV_FILENAME,
    ProviderKey,
    build_gateway_config,
    generate_gateway_token,
    materialize,
    write_config_and_env,
)
from openclaw_setup.errors import ValidationError


def _load(config_dir: Path) -> dict:
    return json.loads((config_dir / CONFIG_FILENAME).read_text())


class TestGenerateGatewayToken:
    def test_is_48_lowercase_hex(self) -> None:
        assert re.fullmatch(r"[0-9a-f]{48}", generate_gateway_token())

    def test_is_random(self) -> None:
        assert generate_gateway_token() != generate_gateway_token()


class TestBuildGatewayConfig:
    def test_fixed_gateway_shape(self) -> None:
        doc = json.loads(build_gateway_config("gpt-4o", "tok").to_json())
        assert doc["gateway"] == {
            "mode": "local",
            "bind": "lan",
            "port": 18789,
            "auth": {"mode": "token", "token": "tok"},
            "controlUi": {"allowInsecureAuth": True},
        }
        assert doc["agents"] == {"defaults": {"model": {"primary": "gpt-4o"}}}
        assert "models" not in doc

    def test_key_order_is_stable(self) -> None:
        doc = json.loads(build_gateway_config("m", "t").to_json())
        assert list(doc) == ["gateway", "agents"]
        assert list(doc["gateway"]) == ["mode", "bind", "port", "auth", "controlUi"]

    def test_provider_without_catalog_has_no_models_block(self) -> None:
        cfg = build_gateway_config("gpt-4o", "tok", provider_id="openai", provider_env_key="OPENAI_API_KEY")
        assert cfg.models is None


class TestMaterialize:
    @pytest.mark.parametrize("model,token", [
        ("gpt-4o", "a" * 48),
        ("anthropic/claude-3-7-sonnet", "tok"),
        ("ollama/llama3.3", "0123456789abcdef"),
    ])
    def test_round_trip(self, tmp_path: Path, model: str, token: str) -> None:
        materialize(str(tmp_path / "conf"), model, token)
        doc = _load(tmp_path / "conf")
        assert doc["agents"]["defaults"]["model"]["primary"] == model
        assert doc["gateway"]["auth"]["token"] == token

    def test_creates_nested_config_dir(self, tmp_path: Path) -> None:
        config_dir = tmp_path / "data" / "conf"
        path = materialize(str(config_dir), "m", "t")
        assert path == config_dir / CONFIG_FILENAME
        assert path.is_file()

    def test_config_is_owner_only(self, tmp_path: Path) -> None:
        path = materialize(str(tmp_path), "m", "t")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_deepseek_catalog(self, tmp_path: Path) -> None:
        materialize(
            str(tmp_path), "deepseek-chat", "tok",
            provider_id="DeepSeek", provider_env_key="DEEPSEEK_API_KEY", provider_api_key="sk-secret",
        )
        doc = _load(tmp_path)
        provider = doc["models"]["providers"]["deepseek"]
        assert doc["models"]["mode"] == "merge"
        assert provider["apiKey"] == "${DEEPSEEK_API_KEY}"
        assert provider["baseUrl"] == "https://api.deepseek.com/v1"
        assert provider["api"] == "openai-completions"
        assert provider["models"] == [{
            "id": "deepseek-chat",
            "name": "DeepSeek Chat",
            "reasoning": False,
            "input": ["text"],
            "contextWindow": 128000,
            "maxTokens": 8192,
        }]
        assert "sk-secret" not in (tmp_path / CONFIG_FILENAME).read_text()

    def test_deepseek_key_reference_defaults_to_registry(self, tmp_path: Path) -> None:
        materialize(str(tmp_path), "deepseek-chat", "tok", provider_id="deepseek")
        provider = _load(tmp_path)["models"]["providers"]["deepseek"]
        assert provider["apiKey"] == "${DEEPSEEK_API_KEY}"

    def test_ollama_catalog_from_base_url(self, tmp_path: Path) -> None:
        materialize(str(tmp_path), "ollama/qwen2.5", "tok", provider_id="ollama", base_url="http://host:11434/")
        provider = _load(tmp_path)["models"]["providers"]["ollama"]
        assert provider["baseUrl"] == "http://host:11434/v1"
        assert "apiKey" not in provider
        assert provider["models"][0]["id"] == "qwen2.5"

    def test_ollama_without_base_url_has_no_models_block(self, tmp_path: Path) -> None:
        materialize(str(tmp_path), "llama3.3", "tok", provider_id="ollama")
        assert "models" not in _load(tmp_path)

    def test_env_written_with_credential(self, tmp_path: Path) -> None:
        materialize(
            str(tmp_path), "gpt-4o", "tok",
            provider_id="openai", provider_env_key="OPENAI_API_KEY", provider_api_key="sk-test",
            include_env=True,
        )
        env_path = tmp_path / ENV_FILENAME
        assert env_path.read_text() == "OPENCLAW_GATEWAY_TOKEN=tok\nOPENAI_API_KEY=sk-test\n"
        assert stat.S_IMODE(env_path.stat().st_mode) == 0o600

    def test_env_replaces_previous_file(self, tmp_path: Path) -> None:
        (tmp_path / ENV_FILENAME).write_text("STALE=1\n")
        materialize(str(tmp_path), "llama3.3", "tok", provider_id="ollama", include_env=True)
        assert (tmp_path / ENV_FILENAME).read_text() == "OPENCLAW_GATEWAY_TOKEN=tok\n"

    def test_env_not_written_by_default(self, tmp_path: Path) -> None:
        materialize(str(tmp_path), "m", "t")
        assert not (tmp_path / ENV_FILENAME).exists()

    @pytest.mark.parametrize("config_dir,model,token,match", [
        ("", "m", "t", "config dir"),
        ("conf", "", "t", "model"),
        ("conf", "m", "", "gateway token"),
        ("conf", "   ", "t", "model"),
    ])
    def test_validation_before_any_write(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
        config_dir: str, model: str, token: str, match: str,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ValidationError, match=match):
            materialize(config_dir, model, token, include_env=True)
        assert list(tmp_path.iterdir()) == []


class TestWriteConfigAndEnv:
    def test_writes_token_and_provider_lines(self, tmp_path: Path) -> None:
        write_config_and_env(str(tmp_path), "gpt-4o", "tok", [
            ProviderKey(key="OPENAI_API_KEY", value=" sk-1 "),
            ProviderKey(key="", value="dropped"),
            ProviderKey(key="GROQ_API_KEY", value=""),
            ProviderKey(key="CUSTOM_KEY", value="c"),
        ])
        assert (tmp_path / ENV_FILENAME).read_text() == (
            "OPENCLAW_GATEWAY_TOKEN=tok\nOPENAI_API_KEY=sk-1\nCUSTOM_KEY=c\n"
        )
        assert _load(tmp_path)["agents"]["defaults"]["model"]["primary"] == "gpt-4o"

    def test_requires_token(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            write_config_and_env(str(tmp_path / "conf"), "m", "")
        assert not (tmp_path / "conf").exists()
