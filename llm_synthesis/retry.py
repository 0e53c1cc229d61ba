"""Retry loop for use-case generation.

A response that cannot be parsed or does not match the UseCase schema is
retried with a correction note appended to the prompt. Transport and
configuration errors raised by the adapter propagate on the first attempt.
"""

import logging
from typing import List

from llm_synthesis.adapter import BaseLLMAdapter
from llm_synthesis.schema import UseCase
from llm_synthesis.validator import LLMOutputValidationError, validate_llm_output

logger = logging.getLogger(__name__)

_RETRYABLE_STAGES = frozenset({"json_parse", "schema"})
_PREVIEW_CHARS = 200
_MAX_CORRECTION_ERRORS = 5


class LLMRetryExhaustedError(Exception):
    """Raised when every attempt returned unusable output.

    Attributes:
        attempts: Number of model calls made.
        last_error: Validation error of the final attempt.
        history: Validation errors of all attempts, oldest first.
    """

    def __init__(
        self,
        attempts: int,
        last_error: LLMOutputValidationError,
        history: List[LLMOutputValidationError],
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.history = history
        super().__init__(
            f"Failed to generate valid use cases after {attempts} attempt(s). "
            f"Last error: {last_error}"
        )


def _preview(raw: str) -> str:
    flattened = " ".join(raw.split())
    if len(flattened) <= _PREVIEW_CHARS:
        return flattened
    return flattened[:_PREVIEW_CHARS] + "..."


def _with_correction(prompt: str, error: LLMOutputValidationError) -> str:
    problems = "\n".join(f"- {message}" for message in error.errors[:_MAX_CORRECTION_ERRORS])
    return (
        f"{prompt}\n\n"
        "# CORRECTION\n\n"
        "Your previous answer could not be used:\n"
        f"{problems}\n"
        "Reply again with ONLY the JSON array of use cases.\n"
    )


def generate_with_retry(
    adapter: BaseLLMAdapter,
    prompt: str,
    max_retries: int = 2,
) -> List[UseCase]:
    """Call ``adapter`` until it returns a valid list of use cases.

    Args:
        adapter: Any adapter implementing ``generate(prompt) -> str``.
        prompt: Prompt for the first attempt.
        max_retries: Extra attempts after the first one. Negative values
            count as zero.

    Returns:
        The validated use cases of the first acceptable response.

    Raises:
        LLMRetryExhaustedError: No attempt produced valid output.
        LLMRequestError: Propagated unchanged from the adapter.
        LLMConfigurationError: Propagated unchanged from the adapter.
    """
    total_attempts = 1 + max(0, max_retries)
    history: List[LLMOutputValidationError] = []
    current_prompt = prompt

    for attempt in range(1, total_attempts + 1):
        raw = adapter.generate(current_prompt)
        try:
            use_cases = validate_llm_output(raw)
        except LLMOutputValidationError as exc:
            if exc.stage not in _RETRYABLE_STAGES:
                raise
            history.append(exc)
            logger.warning(
                "Use case attempt %d/%d rejected at stage '%s': %s | response=%r",
                attempt,
                total_attempts,
                exc.stage,
                "; ".join(exc.errors),
                _preview(raw),
            )
            current_prompt = _with_correction(prompt, exc)
            continue

        logger.info(
            "Use case attempt %d/%d accepted count=%d",
            attempt,
            total_attempts,
            len(use_cases),
        )
        return use_cases

    raise LLMRetryExhaustedError(
        attempts=total_attempts,
        last_error=history[-1],
        history=history,
    )
