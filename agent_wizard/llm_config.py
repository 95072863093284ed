from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from agent_wizard.errors import ConfigurationError

DEFAULT_MODEL = "claude-3-7-sonnet-latest"
DEFAULT_BASE_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_BETA = "output-128k-2025-02-19"

_REPO_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = _REPO_ROOT / "configs" / "config.yaml"

# env var -> (field, parser)
_ENV_FIELDS = {
    "LLM_PROVIDER": ("provider", str),
    "CLAUDE_MODEL": ("model", str),
    "CLAUDE_BASE_URL": ("base_url", str),
    "LLM_MAX_TOKENS": ("max_tokens", int),
    "LLM_TEMPERATURE": ("temperature", float),
    "LLM_SYSTEM_PROMPT": ("system_prompt", str),
    "LLM_CONNECT_TIMEOUT_S": ("connect_timeout_s", float),
    "LLM_READ_TIMEOUT_S": ("read_timeout_s", float),
    "LLM_WRITE_TIMEOUT_S": ("write_timeout_s", float),
    "LLM_MAX_RETRIES": ("max_retries", int),
    "LLM_INITIAL_RETRY_DELAY_MS": ("initial_retry_delay_ms", int),
    "LLM_MAX_RETRY_DELAY_MS": ("max_retry_delay_ms", int),
    "LLM_DEBUG": ("debug", "bool"),
}


@dataclass(frozen=True)
class LLMConfig:
    """Immutable client configuration, built once and handed to the client constructor."""

    provider: str = "claude"
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    anthropic_version: str = DEFAULT_ANTHROPIC_VERSION
    beta: Optional[str] = DEFAULT_BETA
    max_tokens: int = 81920
    temperature: float = 0.7
    system_prompt: Optional[str] = None
    connect_timeout_s: float = 30.0
    read_timeout_s: float = 600.0
    write_timeout_s: float = 60.0
    max_retries: int = 5
    initial_retry_delay_ms: int = 10_000
    max_retry_delay_ms: int = 120_000
    debug: bool = False

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ConfigurationError("max_tokens must be positive")
        if not 0.0 <= self.temperature <= 1.0:
            raise ConfigurationError("temperature must be between 0 and 1")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must not be negative")
        if self.initial_retry_delay_ms < 0 or self.max_retry_delay_ms < 0:
            raise ConfigurationError("retry delays must not be negative")
        if self.initial_retry_delay_ms > self.max_retry_delay_ms:
            raise ConfigurationError("initial_retry_delay_ms exceeds max_retry_delay_ms")

    @classmethod
    def from_config_file(cls, config_path: str | Path | None = None) -> LLMConfig | None:
        """Read the ``models`` section of a YAML config; ``None`` when the file is absent."""
        values = _file_values(config_path)
        if values is None:
            return None
        return _build(values)

    @classmethod
    def from_env(cls) -> LLMConfig:
        return _build(_env_values())

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> LLMConfig:
        """Defaults < config file < environment."""
        values = _file_values(config_path) or {}
        values.update(_env_values())
        return _build(values)


def _build(values: Dict[str, Any]) -> LLMConfig:
    try:
        return LLMConfig(**values)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid LLM configuration: {exc}") from exc


def _file_values(config_path: str | Path | None) -> Dict[str, Any] | None:
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Malformed config file {path}: {exc}") from exc

    if not config_data or "models" not in config_data:
        return None

    models_config = config_data["models"] or {}
    provider = models_config.get("provider", "claude")
    # provider specific block overrides the shared keys
    merged: Dict[str, Any] = {k: v for k, v in models_config.items() if not isinstance(v, dict)}
    merged.update(models_config.get(provider) or {})
    merged["provider"] = provider

    known = {f.name for f in fields(LLMConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in {path}: {', '.join(unknown)}")
    return merged


def _env_values() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name, (field_name, parser) in _ENV_FIELDS.items():
        raw = os.getenv(name)
        if raw is None or raw == "":
            continue
        if parser == "bool":
            values[field_name] = _parse_bool(name, raw)
            continue
        try:
            values[field_name] = parser(raw)
        except ValueError as exc:
            raise ConfigurationError(f"{name} must be a {parser.__name__}") from exc
    return values


def _parse_bool(name: str, raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in {"0", "false", "off", "no"}:
        return False
    if normalized in {"1", "true", "on", "yes"}:
        return True
    raise ConfigurationError(f"{name} must be a boolean")
