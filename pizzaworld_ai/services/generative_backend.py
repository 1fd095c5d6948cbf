from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Union

import httpx

from pizzaworld_ai.core.config import Settings, get_settings
from pizzaworld_ai.models.assistant import BackendFailure

logger = logging.getLogger(__name__)

BOILERPLATE_PREFIXES = ("YOUR RESPONSE:", "RESPONSE:", "Response:", "Answer:", "ANSWER:")
SYSTEM_PROMPT = "You answer business questions using only the data supplied in the prompt."


class OpenAiTextBackend:
    """Single-shot chat completion call. Failures come back as values, not exceptions."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def is_available(self) -> bool:
        return bool(self.settings.openai_api_key and self.settings.openai_api_key.strip())

    def config_info(self) -> Dict[str, Any]:
        return {
            "apiKeyConfigured": self.is_available(),
            "model": self.settings.openai_model,
            "timeoutSeconds": self.settings.openai_timeout_seconds,
        }

    def generate(self, prompt: str, timeout: Optional[float] = None) -> Union[str, BackendFailure]:
        if not self.is_available():
            return BackendFailure(kind="unavailable", detail="OPENAI_API_KEY is not configured")

        timeout_seconds = timeout if timeout is not None else self.settings.openai_timeout_seconds
        started = time.perf_counter()
        try:
            response = httpx.post(
                f"{self.settings.openai_base_url.rstrip('/')}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.settings.openai_api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.settings.openai_model,
                    "temperature": self.settings.openai_temperature,
                    "max_completion_tokens": self.settings.openai_max_output_tokens,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                },
                timeout=timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("Generative backend timed out after %.1fs", timeout_seconds)
            return BackendFailure(kind="timeout", detail=str(exc))
        except httpx.HTTPStatusError as exc:
            logger.warning("Generative backend returned HTTP %s", exc.response.status_code)
            return BackendFailure(kind="unavailable", detail=f"HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.warning("Generative backend transport error: %s", exc.__class__.__name__)
            return BackendFailure(kind="unavailable", detail=str(exc))
        except ValueError as exc:
            logger.warning("Generative backend returned a non-JSON body")
            return BackendFailure(kind="malformed_response", detail=str(exc))

        try:
            content = self._extract_content(payload)
        except ValueError as exc:
            logger.warning("Generative backend response malformed: %s", exc)
            return BackendFailure(kind="malformed_response", detail=str(exc))

        text = self._clean(content)
        if not text:
            return BackendFailure(kind="malformed_response", detail="Empty completion")
        logger.info(
            "Generative backend answered in %d ms",
            int((time.perf_counter() - started) * 1000),
        )
        return text

    def _clean(self, content: str) -> str:
        text = content.strip()
        stripped = True
        while stripped:
            stripped = False
            for prefix in BOILERPLATE_PREFIXES:
                if text.startswith(prefix):
                    text = text[len(prefix):].strip()
                    stripped = True
        max_chars = self.settings.assistant_max_response_chars
        if max_chars > 3 and len(text) > max_chars:
            cut = max_chars - 3
            clipped = text[:cut]
            # Never split a word or number; a half number would fail validation.
            if not text[cut].isspace() and not clipped[-1].isspace():
                head = clipped.rsplit(None, 1)
                if len(head) > 1:
                    clipped = head[0]
            text = clipped.rstrip() + "..."
        return text

    @staticmethod
    def _extract_content(response_payload: Any) -> str:
        if not isinstance(response_payload, dict):
            raise ValueError("Model response must be a JSON object")
        choices = response_payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ValueError("Model response choices missing")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise ValueError("Model response message missing")
        content = message.get("content")
        if not isinstance(content, str):
            raise ValueError("Model response content missing")
        return content
