"""
app/services/use_case_service.py

Service layer for the upload-to-use-cases workflow.

One call runs, in order:

    1. parse()                  - CSV bytes to an immutable Dataset
    2. analyze()                - summary text and PatternReport
    3. UseCasePromptBuilder     - prompt from summary, patterns and context
    4. generate_with_retry()    - model call with validation and retry

Parse failures and empty uploads are raised before any model call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from analysis.analyzer import PatternReport, analyze
from analysis.ingestor import parse
from app.config import (
    DEFAULT_GEMINI_BASE_URL,
    LLMSettings,
    get_external_http_settings,
    get_llm_settings,
)
from llm_synthesis.adapter import (
    BaseLLMAdapter,
    GeminiLLMAdapter,
    LLMRequestError,
    MockLLMAdapter,
    OpenAILLMAdapter,
)
from llm_synthesis.prompt_builder import UseCasePromptBuilder
from llm_synthesis.retry import LLMRetryExhaustedError, generate_with_retry
from llm_synthesis.schema import UseCase
from llm_synthesis.validator import LLMOutputValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class EmptyCSVError(ValueError):
    """
    Raised when an upload parses to zero data rows.
    """


class UseCaseGenerationError(RuntimeError):
    """
    Raised when the model does not yield a valid list of use cases.
    """


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UseCaseGenerationResult:
    """
    Outcome of one upload.
    """

    rows: list[dict[str, str]]
    summary: str
    patterns: PatternReport
    use_cases: list[UseCase]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class UseCaseService:
    """
    Coordinates CSV parsing, pattern analysis and use-case generation.
    """

    def __init__(
        self,
        *,
        adapter: BaseLLMAdapter,
        max_retries: int = 2,
        prompt_builder: UseCasePromptBuilder | None = None,
    ) -> None:
        self._adapter = adapter
        self._max_retries = max(0, max_retries)
        self._prompt_builder = prompt_builder or UseCasePromptBuilder()

    def generate(
        self,
        *,
        buffer: bytes,
        business_problem: str = "",
        business_scenario: str = "",
    ) -> UseCaseGenerationResult:
        """
        Turn one uploaded CSV buffer into generated use cases.

        Raises:
            ParseError:             The buffer is not well-formed CSV.
            EmptyCSVError:          The CSV has a header but no data rows.
            LLMConfigurationError:  The selected adapter has no API key.
            UseCaseGenerationError: The model call or its output failed.
        """

        logger.info(
            "Use case request received bytes=%d business_problem=%s business_scenario=%s",
            len(buffer),
            bool(business_problem),
            bool(business_scenario),
        )

        dataset = parse(buffer)
        if not dataset:
            logger.info("CSV file is empty or invalid")
            raise EmptyCSVError("CSV file is empty or invalid")
        logger.info("CSV parsed successfully rows=%d columns=%d", len(dataset), len(dataset.columns))

        analysis = analyze(dataset)
        logger.info(
            "CSV analysis generated summary_length=%d insights=%s",
            len(analysis.summary),
            list(analysis.patterns.insights),
        )

        prompt = self._prompt_builder.build_prompt(
            summary=analysis.summary,
            patterns=analysis.patterns.to_dict(),
            business_problem=business_problem,
            business_scenario=business_scenario,
        )

        try:
            use_cases = generate_with_retry(self._adapter, prompt, max_retries=self._max_retries)
        except (LLMRequestError, LLMRetryExhaustedError, LLMOutputValidationError) as exc:
            logger.error("Use case generation failed: %s", exc)
            raise UseCaseGenerationError(str(exc)) from exc

        logger.info("Use cases generated successfully count=%d", len(use_cases))
        return UseCaseGenerationResult(
            rows=dataset.to_records(),
            summary=analysis.summary,
            patterns=analysis.patterns,
            use_cases=use_cases,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_adapter(settings: LLMSettings) -> BaseLLMAdapter:
    """
    Instantiate the adapter selected by ``settings.adapter``.

    mock   -> MockLLMAdapter    (testing, no API key required)
    openai -> OpenAILLMAdapter
    gemini -> GeminiLLMAdapter  (default)
    """

    if settings.adapter == "mock":
        return MockLLMAdapter()

    if settings.adapter == "openai":
        return OpenAILLMAdapter(
            model=settings.model,
            max_tokens=settings.max_output_tokens,
            temperature=settings.temperature,
            top_p=settings.top_p,
            api_key=settings.api_key,
            base_url=settings.base_url,
        )

    http_settings = get_external_http_settings()
    return GeminiLLMAdapter(
        api_key=settings.api_key,
        model=settings.model,
        base_url=settings.base_url or DEFAULT_GEMINI_BASE_URL,
        temperature=settings.temperature,
        top_k=settings.top_k,
        top_p=settings.top_p,
        max_output_tokens=settings.max_output_tokens,
        timeout_seconds=http_settings.timeout_seconds,
        max_retries=http_settings.max_retries,
        backoff_initial_seconds=http_settings.backoff_initial_seconds,
        backoff_multiplier=http_settings.backoff_multiplier,
    )


@lru_cache(maxsize=1)
def get_use_case_service() -> UseCaseService:
    """
    Build and cache the use-case service with env-driven settings.
    """

    settings = get_llm_settings()
    return UseCaseService(
        adapter=build_adapter(settings),
        max_retries=settings.max_retries,
    )
