"""
Typed configuration model with precedence-based loader.

Precedence (lowest to highest):
    defaults < config file (YAML) < env vars < CLI flags
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from chatstream.errors import ConfigurationError


@dataclass(frozen=True)
class ChatStreamConfig:
    base_url: str = ""
    api_key: str = ""
    model: str = "gpt-4o"
    max_tokens: int | None = None
    temperature: float | None = None
    timeout_seconds: float = 120.0
    api_key_env: str = "OPENAI_API_KEY"

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if the endpoint or key is missing."""
        if not self.base_url:
            raise ConfigurationError(
                "base_url is required", details={"model": self.model}
            )
        if not self.api_key:
            raise ConfigurationError(
                "api_key is required",
                details={"model": self.model, "base_url": self.base_url},
            )

    def to_dict(self, *, redact: bool = True) -> dict:
        d = asdict(self)
        if redact and d["api_key"]:
            d["api_key"] = d["api_key"][:4] + "..."
        return d


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _coerce(value: str, target_type: type) -> Any:
    """Coerce a string env value to the target type."""
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    return value


def _filter_known(raw: dict) -> dict:
    valid_fields = {f.name for f in fields(ChatStreamConfig)}
    return {k: v for k, v in raw.items() if k in valid_fields}


# ---------------------------------------------------------------------------
# ENV var mapping
# ---------------------------------------------------------------------------

_ENV_MAP: dict[str, tuple[str, type]] = {
    "CHATSTREAM_BASE_URL":    ("base_url", str),
    "CHATSTREAM_API_KEY":     ("api_key", str),
    "CHATSTREAM_API_KEY_ENV": ("api_key_env", str),
    "CHATSTREAM_MODEL":       ("model", str),
    "CHATSTREAM_MAX_TOKENS":  ("max_tokens", int),
    "CHATSTREAM_TEMPERATURE": ("temperature", float),
    "CHATSTREAM_TIMEOUT":     ("timeout_seconds", float),
}


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> ChatStreamConfig:
    """
    Build a ChatStreamConfig by layering sources in precedence order:

        defaults  <  config file  <  env vars  <  CLI flags

    If ``api_key`` is still empty afterwards it is read from the environment
    variable named by ``api_key_env``.  The result is not validated; the
    service validates it on construction.
    """
    raw: dict[str, Any] = {}

    # --- 1. Config file ---
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.is_file():
            with p.open("r", encoding="utf-8") as f:
                file_data = yaml.safe_load(f) or {}
            raw.update(_filter_known(file_data))

    # --- 2. Env var overrides ---
    for env_var, (key, target_type) in _ENV_MAP.items():
        val = os.environ.get(env_var)
        if val is not None:
            raw[key] = _coerce(val, target_type)

    # --- 3. CLI flag overrides ---
    if cli_overrides:
        raw.update({k: v for k, v in _filter_known(cli_overrides).items() if v is not None})

    cfg = ChatStreamConfig(**raw)
    if not cfg.api_key and cfg.api_key_env:
        env_key = os.environ.get(cfg.api_key_env, "")
        if env_key:
            cfg = ChatStreamConfig(**{**asdict(cfg), "api_key": env_key})
    return cfg
