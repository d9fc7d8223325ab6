"""Tests for configuration loading and validation."""

from __future__ import annotations

import dataclasses

import pytest

from chatstream.config import ChatStreamConfig, load_config
from chatstream.errors import ConfigurationError

_ENV_VARS = [
    "CHATSTREAM_BASE_URL",
    "CHATSTREAM_API_KEY",
    "CHATSTREAM_API_KEY_ENV",
    "CHATSTREAM_MODEL",
    "CHATSTREAM_MAX_TOKENS",
    "CHATSTREAM_TEMPERATURE",
    "CHATSTREAM_TIMEOUT",
    "OPENAI_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestValidate:
    def test_valid(self):
        ChatStreamConfig(base_url="https://x/v1", api_key="k").validate()

    def test_empty_base_url(self):
        with pytest.raises(ConfigurationError, match="base_url is required") as exc_info:
            ChatStreamConfig(base_url="", api_key="k", model="gpt-4").validate()
        assert exc_info.value.details == {"model": "gpt-4"}

    def test_empty_api_key(self):
        with pytest.raises(ConfigurationError, match="api_key is required"):
            ChatStreamConfig(base_url="https://x/v1").validate()

    def test_frozen(self):
        cfg = ChatStreamConfig(base_url="https://x/v1", api_key="k")
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.model = "other"  # type: ignore[misc]

    def test_to_dict_redacts_key(self):
        cfg = ChatStreamConfig(base_url="https://x/v1", api_key="sk-secret-value")
        assert cfg.to_dict()["api_key"] == "sk-s..."
        assert cfg.to_dict(redact=False)["api_key"] == "sk-secret-value"


class TestLoadConfig:
    def test_defaults(self):
        cfg = load_config()
        assert cfg.model == "gpt-4o"
        assert cfg.base_url == ""
        assert cfg.max_tokens is None

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "chatstream.yaml"
        path.write_text(
            "base_url: https://yaml/v1\n"
            "api_key: yaml-key\n"
            "model: gpt-4\n"
            "max_tokens: 512\n"
            "temperature: 0.3\n"
            "unknown_key: ignored\n"
        )
        cfg = load_config(path)
        assert cfg.base_url == "https://yaml/v1"
        assert cfg.api_key == "yaml-key"
        assert cfg.max_tokens == 512
        assert cfg.temperature == 0.3

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml") == ChatStreamConfig()

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "c.yaml"
        path.write_text("model: from-file\nmax_tokens: 10\n")
        monkeypatch.setenv("CHATSTREAM_MODEL", "from-env")
        monkeypatch.setenv("CHATSTREAM_MAX_TOKENS", "20")
        monkeypatch.setenv("CHATSTREAM_TEMPERATURE", "1.5")

        cfg = load_config(path)

        assert cfg.model == "from-env"
        assert cfg.max_tokens == 20
        assert cfg.temperature == 1.5

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("CHATSTREAM_MODEL", "from-env")
        cfg = load_config(cli_overrides={"model": "from-cli", "base_url": None})
        assert cfg.model == "from-cli"
        assert cfg.base_url == ""

    def test_api_key_from_named_env_var(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert load_config().api_key == "sk-env"

    def test_explicit_api_key_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("CHATSTREAM_API_KEY", "sk-explicit")
        assert load_config().api_key == "sk-explicit"

    def test_custom_api_key_env(self, monkeypatch):
        monkeypatch.setenv("CHATSTREAM_API_KEY_ENV", "MY_LLM_KEY")
        monkeypatch.setenv("MY_LLM_KEY", "sk-custom")
        assert load_config().api_key == "sk-custom"
