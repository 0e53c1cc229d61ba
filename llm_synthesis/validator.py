"""Validation layer for raw use-case generation output.

Extracts a JSON array from the model response and validates every item
against the UseCase schema.
"""

import json
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from llm_synthesis.schema import UseCase

_FIELD_ALIASES = (
    "title",
    "description",
    "businessImpact",
    "priority",
    "dataPatterns",
    "mermaidDiagram",
)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_JSON_ARRAY = re.compile(r"\[\s*\{[\s\S]*\}\s*\]")


class LLMOutputValidationError(Exception):
    """Raised when LLM output fails parsing or schema validation.

    Attributes:
        stage: Which validation step failed ("json_parse" or "schema").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed validation.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"LLM output validation failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)


def _extract_json(text: str) -> Any:
    """Decode the JSON payload embedded in a model response.

    Tries, in order: the whole text, the body of a ```json fenced block,
    and the first bracketed array of objects found in the text.

    Args:
        text: Raw LLM response string.

    Returns:
        The decoded JSON value.

    Raises:
        json.JSONDecodeError: If no candidate decodes.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        fenced = _FENCED_JSON.search(text)
        if fenced:
            return json.loads(fenced.group(1))
        array = _JSON_ARRAY.search(text)
        if array:
            return json.loads(array.group(0))
        raise exc


def _project_use_case(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the UseCase keys that are present in the payload."""
    return {key: data[key] for key in _FIELD_ALIASES if key in data}


def validate_llm_output(raw_response: str) -> List[UseCase]:
    """Parse and validate a raw LLM response string.

    Steps:
        1. Extract and parse the JSON payload.
        2. Require a non-empty top-level array.
        3. Validate each item against the UseCase model.

    Args:
        raw_response: The raw string returned by the LLM adapter.

    Returns:
        Validated UseCase instances in response order.

    Raises:
        LLMOutputValidationError: If JSON parsing or schema validation fails.
    """
    # Step 1: JSON parse
    try:
        data = _extract_json((raw_response or "").strip())
    except (json.JSONDecodeError, TypeError) as exc:
        raise LLMOutputValidationError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc

    # Step 2: Array shape
    if not isinstance(data, list) or not data:
        raise LLMOutputValidationError(
            stage="schema",
            errors=["top-level JSON must be a non-empty array of use cases"],
            raw_response=raw_response,
        )

    # Step 3: Item validation
    use_cases: List[UseCase] = []
    errors: List[str] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            errors.append(f"{index}: use case must be an object")
            continue
        try:
            use_cases.append(UseCase.model_validate(_project_use_case(item)))
        except ValidationError as exc:
            errors.extend(
                f"{index}.{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
                for e in exc.errors()
            )

    if errors:
        raise LLMOutputValidationError(
            stage="schema",
            errors=errors,
            raw_response=raw_response,
        )
    return use_cases
