from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - No empty-string values are accepted.
    - The API key check is skipped only when LLM_ADAPTER=mock.
    """

    from app.config import api_key_env_names, load_env_files, resolve_adapter_name

    load_env_files()

    errors: list[str] = []

    # --- LLM adapter ----------------------------------------------------
    raw_adapter = os.getenv("LLM_ADAPTER", "").strip().lower()
    if raw_adapter and raw_adapter not in {"gemini", "openai", "mock"}:
        errors.append(
            f"LLM_ADAPTER='{raw_adapter}' is not valid. Allowed values: ['gemini', 'mock', 'openai']."
        )

    # --- LLM API key ----------------------------------------------------
    adapter = resolve_adapter_name()
    if adapter != "mock":
        key_names = api_key_env_names(adapter)
        if not any(os.getenv(name, "").strip() for name in key_names):
            errors.append(
                f"LLM API key is not set. Provide {' or '.join(key_names)}. "
                "Empty strings are not permitted."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed - missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    from app.config import get_api_settings, get_llm_settings

    api_settings = get_api_settings()
    llm_settings = get_llm_settings()

    application = FastAPI(
        title="Wallet Use Case Generator API",
        version="1.0.0",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(api_settings.cors_allow_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    from app.api.routers import status_router, use_cases_router

    application.include_router(status_router)
    application.include_router(use_cases_router)

    logging.getLogger(__name__).info(
        "Application configured env=%s llm_adapter=%s model=%s",
        api_settings.environment,
        llm_settings.adapter,
        llm_settings.model,
    )
    return application


app = create_app()
