"""
Configuration and credential loading for LLM Adventure.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables.
- get_settings() returns the cached Settings with tuning knobs (default model, per-turn token budget, timeouts, endpoints).
- API keys are never read from settings.yml. They live in a per-user credentials file
  (~/.adventure.ini, plain KEY = value lines) and are looked up with get_key().
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict

import yaml
from dotenv import dotenv_values, load_dotenv

from .errors import ConfigError

load_dotenv()

CREDENTIALS_FILENAME = ".adventure.ini"

# provider name -> entry in the credentials file
KEY_NAMES: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def _repo_root() -> str:
    # this file: src/llmadventure_simple/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to read settings file {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def _getter(cfg: dict) -> Callable[..., Any]:
    def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
        if name in cfg:
            val = cfg[name]
            return cast(val) if cast else val
        env = os.environ.get(name)
        if env is not None:
            return cast(env) if cast else env
        return default
    return _get


@dataclass(frozen=True)
class Settings:
    # Session defaults
    default_model: str
    max_tokens: int

    # Transport
    request_timeout_s: float
    openai_base_url: str
    anthropic_base_url: str
    anthropic_version: str

    # Optional override of ~/.adventure.ini
    credentials_file: str | None


def load_settings(path: str | None = None) -> Settings:
    """Build Settings from a YAML file (default: settings.yml at the repo root) and the environment."""
    _get = _getter(_load_yaml(path or os.path.join(_repo_root(), "settings.yml")))
    return Settings(
        default_model=str(_get("ADVENTURE_MODEL", "gpt-3.5-turbo")),
        max_tokens=int(_get("ADVENTURE_MAX_TOKENS", 200, cast=int)),
        request_timeout_s=float(_get("ADVENTURE_REQUEST_TIMEOUT_S", 120.0, cast=float)),
        openai_base_url=str(_get("OPENAI_BASE_URL", "https://api.openai.com/v1")),
        anthropic_base_url=str(_get("ANTHROPIC_BASE_URL", "https://api.anthropic.com")),
        anthropic_version=str(_get("ANTHROPIC_VERSION", "2023-06-01")),
        credentials_file=_get("ADVENTURE_CREDENTIALS_FILE", None),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Load settings on first use; a broken settings.yml surfaces as ConfigError to the caller."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def credentials_path(settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    if settings.credentials_file:
        return os.path.expanduser(settings.credentials_file)
    home = os.environ.get("HOME")
    if not home:
        raise ConfigError("Unable to get home directory path")
    return os.path.join(home, CREDENTIALS_FILENAME)


def load_credentials(path: str) -> Dict[str, str]:
    """Parse the per-user credentials file; a missing file is fatal."""
    if not os.path.isfile(path):
        raise ConfigError(f"Unable to load config file at {path}")
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


def get_key(provider: str, settings: Settings | None = None) -> str:
    """Return the API key for a provider, raising ConfigError if it is absent or empty."""
    key_name = KEY_NAMES.get(provider)
    if key_name is None:
        raise ConfigError(f"Unknown provider '{provider}'")
    path = credentials_path(settings)
    value = (load_credentials(path).get(key_name) or "").strip()
    if not value:
        raise ConfigError(f"{key_name} is missing or empty in {path}")
    return value
