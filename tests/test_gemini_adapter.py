"""
tests/test_gemini_adapter.py

Pytest unit tests for GeminiLLMAdapter with a fake requests session.
"""

from __future__ import annotations

from typing import Any

import pytest
import requests

from llm_synthesis import adapter as adapter_module
from llm_synthesis.adapter import GeminiLLMAdapter, LLMConfigurationError, LLMRequestError


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "", reason: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    def __init__(self, *outcomes: Any) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _candidate(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(adapter_module.time, "sleep", lambda _seconds: None)


def _adapter(session: _FakeSession, **overrides: Any) -> GeminiLLMAdapter:
    options: dict[str, Any] = {"api_key": "test-key", "max_retries": 2, "session": session}
    options.update(overrides)
    return GeminiLLMAdapter(**options)


class TestGeminiLLMAdapter:
    def test_returns_first_candidate_text(self) -> None:
        session = _FakeSession(_FakeResponse(200, _candidate("[]")))

        assert _adapter(session).generate("hello") == "[]"

        call = session.calls[0]
        assert call["url"] == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"
        )
        assert call["headers"]["x-goog-api-key"] == "test-key"
        assert call["json"]["contents"] == [{"parts": [{"text": "hello"}]}]
        assert call["json"]["generationConfig"] == {
            "temperature": 0.7,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 8192,
        }

    def test_api_key_is_not_sent_in_url(self) -> None:
        session = _FakeSession(_FakeResponse(200, _candidate("x")))

        _adapter(session).generate("hello")

        assert "test-key" not in session.calls[0]["url"]

    def test_missing_api_key_raises_before_request(self) -> None:
        session = _FakeSession()

        with pytest.raises(LLMConfigurationError, match="GEMINI_API_KEY"):
            _adapter(session, api_key=None).generate("hello")

        assert session.calls == []

    def test_missing_candidates_gives_empty_text(self) -> None:
        session = _FakeSession(_FakeResponse(200, {"promptFeedback": {}}))

        assert _adapter(session).generate("hello") == ""

    def test_client_error_is_not_retried(self) -> None:
        session = _FakeSession(_FakeResponse(400, text="bad request", reason="Bad Request"))

        with pytest.raises(LLMRequestError) as ctx:
            _adapter(session).generate("hello")

        assert ctx.value.status_code == 400
        assert "400 Bad Request - bad request" in str(ctx.value)
        assert len(session.calls) == 1

    def test_server_error_is_retried(self) -> None:
        session = _FakeSession(
            _FakeResponse(503, text="overloaded", reason="Service Unavailable"),
            _FakeResponse(200, _candidate("ok")),
        )

        assert _adapter(session).generate("hello") == "ok"
        assert len(session.calls) == 2

    def test_retries_exhausted_raises_last_error(self) -> None:
        session = _FakeSession(
            _FakeResponse(429, reason="Too Many Requests"),
            _FakeResponse(429, reason="Too Many Requests"),
        )

        with pytest.raises(LLMRequestError) as ctx:
            _adapter(session, max_retries=1).generate("hello")

        assert ctx.value.status_code == 429
        assert len(session.calls) == 2

    def test_connection_errors_are_wrapped(self) -> None:
        session = _FakeSession(requests.ConnectionError("down"), requests.Timeout("slow"))

        with pytest.raises(LLMRequestError, match="failed after retries"):
            _adapter(session, max_retries=1).generate("hello")

    def test_invalid_json_body(self) -> None:
        session = _FakeSession(_FakeResponse(200, None))

        with pytest.raises(LLMRequestError, match="not valid JSON"):
            _adapter(session).generate("hello")
