from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest

from fakes import SCENARIO_ENTRIES, make_context

from pizzaworld_ai.core.config import Settings
from pizzaworld_ai.services.generative_backend import OpenAiTextBackend
from pizzaworld_ai.services.numeric_guard import validate

URL = "https://api.openai.com/v1/chat/completions"


def _backend(**overrides: Any) -> OpenAiTextBackend:
    values: Dict[str, Any] = {"OPENAI_API_KEY": "sk-secret", "_env_file": None}
    values.update(overrides)
    return OpenAiTextBackend(settings=Settings(**values))


def _completion(content: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"content": content}}]},
        request=httpx.Request("POST", URL),
    )


def test_generate_returns_cleaned_text(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: List[Dict[str, Any]] = []

    def fake_post(url: str, **kwargs: Any) -> httpx.Response:
        captured.append({"url": url, **kwargs})
        return _completion("Response:  Revenue is $1,200.00.")

    monkeypatch.setattr(httpx, "post", fake_post)
    result = _backend().generate("prompt", timeout=5)

    assert result == "Revenue is $1,200.00."
    assert captured[0]["url"] == URL
    assert captured[0]["timeout"] == 5
    assert captured[0]["json"]["messages"][-1] == {"role": "user", "content": "prompt"}


def test_generate_clips_long_replies(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(httpx, "post", lambda url, **kwargs: _completion("a" * 500))
    result = _backend(ASSISTANT_MAX_RESPONSE_CHARS=50).generate("prompt")
    assert result == "a" * 47 + "..."


def test_missing_key_is_unavailable_without_calling_out(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_post(*_: Any, **__: Any) -> httpx.Response:
        raise AssertionError("should not be called")

    monkeypatch.setattr(httpx, "post", fail_post)
    backend = _backend(OPENAI_API_KEY=None)
    result = backend.generate("prompt")

    assert result.kind == "unavailable"
    assert backend.is_available() is False


def test_timeout_maps_to_timeout_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def slow_post(*_: Any, **__: Any) -> httpx.Response:
        raise httpx.ReadTimeout("too slow")

    monkeypatch.setattr(httpx, "post", slow_post)
    assert _backend().generate("prompt").kind == "timeout"


def test_http_error_maps_to_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(httpx, "post", lambda url, **kwargs: _completion("x", status_code=503))
    result = _backend().generate("prompt")
    assert result.kind == "unavailable"
    assert result.detail == "HTTP 503"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"not json", request=httpx.Request("POST", URL)),
        httpx.Response(200, json={"choices": []}, request=httpx.Request("POST", URL)),
        _completion(None),
        _completion("   "),
    ],
)
def test_bad_payloads_are_malformed(monkeypatch: pytest.MonkeyPatch, response: httpx.Response) -> None:
    monkeypatch.setattr(httpx, "post", lambda url, **kwargs: response)
    assert _backend().generate("prompt").kind == "malformed_response"


def test_config_info_never_exposes_key() -> None:
    info = _backend().config_info()
    assert info["apiKeyConfigured"] is True
    assert "sk-secret" not in str(info)


def test_clipping_stops_at_a_word_boundary(monkeypatch: pytest.MonkeyPatch) -> None:
    reply = "Total revenue is exactly $50,211,527.85 overall"
    monkeypatch.setattr(httpx, "post", lambda url, **kwargs: _completion(reply))
    result = _backend(ASSISTANT_MAX_RESPONSE_CHARS=36).generate("prompt")

    assert result == "Total revenue is exactly..."
    assert validate(result, make_context(SCENARIO_ENTRIES)).accepted
