"""LLM adapters for use-case generation.

Provides a base interface and concrete adapters for the Gemini REST API,
OpenAI-compatible APIs and a deterministic mock for testing.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class LLMConfigurationError(RuntimeError):
    """Raised when an adapter is missing its API key or model settings."""


class LLMRequestError(RuntimeError):
    """Raised when the model API cannot be reached or rejects the request.

    Attributes:
        status_code: HTTP status returned by the API, if any.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw string response from the model (expected to hold JSON).
        """


class GeminiLLMAdapter(BaseLLMAdapter):
    """Adapter for the Gemini ``generateContent`` REST endpoint.

    Retries on throttling and server errors with exponential backoff;
    any other HTTP failure is raised immediately.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        temperature: float = 0.7,
        top_k: int = 40,
        top_p: float = 0.95,
        max_output_tokens: int = 8192,
        timeout_seconds: float = 60.0,
        max_retries: int = 3,
        backoff_initial_seconds: float = 0.5,
        backoff_multiplier: float = 2.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/models/{model}:generateContent"
        self._generation_config = {
            "temperature": temperature,
            "topK": top_k,
            "topP": top_p,
            "maxOutputTokens": max_output_tokens,
        }
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._backoff_initial_seconds = backoff_initial_seconds
        self._backoff_multiplier = backoff_multiplier

    def generate(self, prompt: str) -> str:
        """Call generateContent and return the first candidate's text.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Text of the first candidate part, or an empty string when the
            response carries no candidate.

        Raises:
            LLMConfigurationError: If no API key is configured.
            LLMRequestError: If the request fails after retries.
        """
        if not self._api_key:
            raise LLMConfigurationError("GEMINI_API_KEY is not set in environment variables")

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": self._generation_config,
        }
        logger.info("Calling Gemini API with prompt length: %d", len(prompt))
        response = self._post(payload)
        try:
            data = response.json()
        except ValueError as exc:
            raise LLMRequestError("Gemini API response was not valid JSON.") from exc
        return self._candidate_text(data)

    @staticmethod
    def _candidate_text(data: Dict[str, Any]) -> str:
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            logger.warning("Gemini API response carried no candidate text")
            return ""

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        """Execute the POST with exponential backoff on retryable failures."""
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key or "",
        }
        last_error: Optional[Exception] = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.post(
                    self._url,
                    json=payload,
                    headers=headers,
                    timeout=self._timeout_seconds,
                )
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            else:
                if response.ok:
                    return response
                error = LLMRequestError(
                    f"API request failed: {response.status_code} {response.reason} - {response.text}",
                    status_code=response.status_code,
                )
                if response.status_code not in RETRYABLE_STATUS_CODES:
                    logger.error("Gemini API request failed status=%s", response.status_code)
                    raise error
                last_error = error

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Gemini API retry attempt=%s/%s wait_seconds=%.2f error=%s",
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                last_error,
            )
            time.sleep(backoff_seconds)

        logger.error("Gemini API request exhausted retries error=%s", last_error)
        if isinstance(last_error, LLMRequestError):
            raise last_error
        raise LLMRequestError("Gemini API request failed after retries.") from last_error


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 8192,
        temperature: float = 0.7,
        top_p: float = 0.95,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            temperature: Sampling temperature.
            top_p: Nucleus sampling mass.
            api_key: API key; a missing key is reported on first use.
            base_url: Optional base URL for OpenAI-compatible endpoints.
        """
        try:
            from openai import OpenAI  # type: ignore[import-untyped]
        except ImportError as exc:
            raise ImportError(
                "openai package is required for OpenAILLMAdapter. "
                "Install it with: pip install openai"
            ) from exc

        self._client = None
        if api_key:
            client_kwargs: dict = {"api_key": api_key}
            if base_url:
                client_kwargs["base_url"] = base_url
            self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._top_p = top_p

    def generate(self, prompt: str) -> str:
        """Call the chat completion API.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw string content from the model response.

        Raises:
            LLMConfigurationError: If no API key is configured.
            LLMRequestError: If the API call fails.
        """
        from openai import OpenAIError  # type: ignore[import-untyped]

        if self._client is None:
            raise LLMConfigurationError("LLM API key is not set in environment variables")

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                top_p=self._top_p,
                max_tokens=self._max_tokens,
                stream=False,
            )
        except OpenAIError as exc:
            raise LLMRequestError(f"API request failed: {exc}") from exc
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock response used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = [
    {
        "title": "Merchant Partnership Scoring",
        "description": "Rank merchants by transaction share to target partnership offers.",
        "businessImpact": "Focuses acquisition spend on merchants that drive volume.",
        "priority": "High",
        "dataPatterns": "Merchant concentration, transaction volume",
        "mermaidDiagram": (
            "graph TD\n"
            "  Analyst[Analyst] --> UC1[Score Merchants]\n"
            "  UC1 --> DB[Transaction DB]"
        ),
    },
    {
        "title": "Regional Expansion Planner",
        "description": "Use location frequency to pick under-served regions.",
        "businessImpact": "Guides field teams toward regions with growth headroom.",
        "priority": "Medium",
        "dataPatterns": "Geographic concentration",
        "mermaidDiagram": (
            "graph TD\n"
            "  Manager[Regional Manager] --> UC1[Review Regions]\n"
            "  UC1 --> DB[Transaction DB]"
        ),
    },
]

_MOCK_RESPONSE_JSON = json.dumps(_MOCK_RESPONSE, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid use-case array.

    Used for local testing and CI pipelines where no LLM API
    is available.
    """

    def generate(self, prompt: str) -> str:
        return _MOCK_RESPONSE_JSON
