"""
tests/test_llm_validation.py

Pytest unit tests for use-case output validation and retry.

No network access: adapters are in-memory fakes.
"""

from __future__ import annotations

import json

import pytest

from llm_synthesis.adapter import BaseLLMAdapter, LLMRequestError, MockLLMAdapter
from llm_synthesis.retry import LLMRetryExhaustedError, generate_with_retry
from llm_synthesis.validator import LLMOutputValidationError, validate_llm_output

_USE_CASE = {
    "title": "Fraud Alerts",
    "description": "Flag unusually large wallet transfers.",
    "businessImpact": "Reduces chargeback losses.",
    "priority": "High",
    "dataPatterns": "High-value transactions",
    "mermaidDiagram": "graph TD\n  A --> B",
}

_VALID = json.dumps([_USE_CASE])


class _ScriptedAdapter(BaseLLMAdapter):
    """Returns queued responses in order and counts calls."""

    def __init__(self, *responses: str) -> None:
        self._responses = list(responses)
        self.calls = 0
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.calls += 1
        self.prompts.append(prompt)
        return self._responses.pop(0)


class _FailingAdapter(BaseLLMAdapter):
    def __init__(self) -> None:
        self.calls = 0

    def generate(self, prompt: str) -> str:
        self.calls += 1
        raise LLMRequestError("API request failed: 400 Bad Request - invalid", status_code=400)


# ---------------------------------------------------------------------------
# validate_llm_output
# ---------------------------------------------------------------------------


class TestValidateLLMOutput:
    def test_plain_json_array(self) -> None:
        use_cases = validate_llm_output(_VALID)

        assert len(use_cases) == 1
        assert use_cases[0].title == "Fraud Alerts"
        assert use_cases[0].business_impact == "Reduces chargeback losses."

    def test_fenced_json_block(self) -> None:
        raw = f"Here are the use cases:\n```json\n{_VALID}\n```\nLet me know."

        assert validate_llm_output(raw)[0].priority == "High"

    def test_array_embedded_in_prose(self) -> None:
        raw = f"Sure! {_VALID} Hope this helps."

        assert len(validate_llm_output(raw)) == 1

    def test_unknown_keys_are_ignored(self) -> None:
        payload = dict(_USE_CASE, confidence=0.9)

        assert validate_llm_output(json.dumps([payload]))[0].title == "Fraud Alerts"

    def test_mock_adapter_output_is_valid(self) -> None:
        assert len(validate_llm_output(MockLLMAdapter().generate("prompt"))) == 2

    def test_non_json_fails_at_parse_stage(self) -> None:
        with pytest.raises(LLMOutputValidationError) as ctx:
            validate_llm_output("I cannot help with that.")

        assert ctx.value.stage == "json_parse"
        assert ctx.value.raw_response == "I cannot help with that."

    def test_object_instead_of_array_fails_schema(self) -> None:
        with pytest.raises(LLMOutputValidationError) as ctx:
            validate_llm_output(json.dumps(_USE_CASE))

        assert ctx.value.stage == "schema"

    def test_empty_array_fails_schema(self) -> None:
        with pytest.raises(LLMOutputValidationError) as ctx:
            validate_llm_output("[]")

        assert ctx.value.stage == "schema"

    def test_missing_field_is_reported_with_index(self) -> None:
        broken = {key: value for key, value in _USE_CASE.items() if key != "businessImpact"}

        with pytest.raises(LLMOutputValidationError) as ctx:
            validate_llm_output(json.dumps([_USE_CASE, broken]))

        assert ctx.value.stage == "schema"
        assert any(error.startswith("1.businessImpact") for error in ctx.value.errors)

    def test_non_object_item_fails_schema(self) -> None:
        with pytest.raises(LLMOutputValidationError) as ctx:
            validate_llm_output('["just a string"]')

        assert ctx.value.errors == ["0: use case must be an object"]


# ---------------------------------------------------------------------------
# generate_with_retry
# ---------------------------------------------------------------------------


class TestGenerateWithRetry:
    def test_first_attempt_success(self) -> None:
        adapter = _ScriptedAdapter(_VALID)

        result = generate_with_retry(adapter, "prompt")

        assert len(result) == 1
        assert adapter.calls == 1

    def test_retries_after_formatting_error(self) -> None:
        adapter = _ScriptedAdapter("not json", "[]", _VALID)

        result = generate_with_retry(adapter, "prompt", max_retries=2)

        assert result[0].title == "Fraud Alerts"
        assert adapter.calls == 3

    def test_exhaustion_raises_with_history(self) -> None:
        adapter = _ScriptedAdapter("not json", "still not json")

        with pytest.raises(LLMRetryExhaustedError) as ctx:
            generate_with_retry(adapter, "prompt", max_retries=1)

        assert ctx.value.attempts == 2
        assert len(ctx.value.history) == 2
        assert ctx.value.last_error.stage == "json_parse"

    def test_zero_retries_means_single_attempt(self) -> None:
        adapter = _ScriptedAdapter("not json")

        with pytest.raises(LLMRetryExhaustedError):
            generate_with_retry(adapter, "prompt", max_retries=0)

        assert adapter.calls == 1

    def test_transport_errors_are_not_retried(self) -> None:
        adapter = _FailingAdapter()

        with pytest.raises(LLMRequestError):
            generate_with_retry(adapter, "prompt", max_retries=3)

        assert adapter.calls == 1

    def test_retry_prompt_carries_correction(self) -> None:
        adapter = _ScriptedAdapter("[]", _VALID)

        generate_with_retry(adapter, "prompt", max_retries=1)

        assert adapter.prompts[0] == "prompt"
        assert adapter.prompts[1].startswith("prompt\n\n# CORRECTION")
        assert "top-level JSON must be a non-empty array of use cases" in adapter.prompts[1]
