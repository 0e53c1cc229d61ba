"""
app/config.py

Application-level configuration helpers.

The analysis core takes no configuration; these settings are consumed by
the HTTP layer and the LLM adapters only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ALLOWED_ADAPTERS = {"gemini", "openai", "mock"}

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = _PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(*names: str) -> str | None:
    """
    Return the first non-empty value among ``names``.
    """

    _load_env_once()
    for name in names:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def resolve_adapter_name() -> str:
    """
    Read LLM_ADAPTER, falling back to 'gemini' for unknown values.
    """

    name = _get_str_env("LLM_ADAPTER", "gemini").lower()
    return name if name in _ALLOWED_ADAPTERS else "gemini"


def api_key_env_names(adapter: str) -> tuple[str, ...]:
    """
    Environment variables consulted for the API key of ``adapter``.
    """

    if adapter == "openai":
        return ("LLM_API_KEY", "OPENAI_API_KEY")
    return ("GEMINI_API_KEY", "LLM_API_KEY")


@dataclass(frozen=True)
class LLMSettings:
    """
    Generative model selection and sampling parameters.
    """

    adapter: str = "gemini"
    api_key: str | None = None
    model: str = DEFAULT_GEMINI_MODEL
    base_url: str | None = None
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 8192
    max_retries: int = 2


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    HTTP behavior for outbound model calls.
    """

    timeout_seconds: float = 60.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class APISettings:
    """
    HTTP surface settings.
    """

    environment: str = "production"
    cors_allow_origins: tuple[str, ...] = ("*",)


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return cached LLM settings from environment variables.
    """

    adapter = resolve_adapter_name()
    default_model = DEFAULT_OPENAI_MODEL if adapter == "openai" else DEFAULT_GEMINI_MODEL
    default_base_url = None if adapter == "openai" else DEFAULT_GEMINI_BASE_URL
    return LLMSettings(
        adapter=adapter,
        api_key=_get_optional_str_env(*api_key_env_names(adapter)),
        model=_get_str_env("LLM_MODEL", default_model),
        base_url=_get_optional_str_env("LLM_BASE_URL") or default_base_url,
        temperature=min(2.0, max(0.0, _get_float_env("LLM_TEMPERATURE", 0.7))),
        top_k=max(1, _get_int_env("LLM_TOP_K", 40)),
        top_p=min(1.0, max(0.0, _get_float_env("LLM_TOP_P", 0.95))),
        max_output_tokens=max(1, _get_int_env("LLM_MAX_OUTPUT_TOKENS", 8192)),
        max_retries=max(0, _get_int_env("LLM_MAX_RETRIES", 2)),
    )


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return outbound HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 60.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> APISettings:
    """
    Return HTTP surface settings from environment variables.
    """

    raw_origins = _get_str_env("CORS_ALLOW_ORIGINS", "*")
    origins = tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip())
    return APISettings(
        environment=_get_str_env("APP_ENV", "production"),
        cors_allow_origins=origins or ("*",),
    )
