"""HTTP client for an OpenRouter-compatible chat-completions API."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.core.config import Settings
from app.core.errors import EmptyResponse, ProviderError

logger = logging.getLogger(__name__)

# Offered to the web client when the provider's model list cannot be fetched.
FALLBACK_MODELS: list[dict[str, str]] = [
    {"id": "google/gemini-2.5-flash", "name": "Gemini 2.5 Flash"},
    {"id": "google/gemini-2.5-pro", "name": "Gemini 2.5 Pro"},
    {"id": "openai/gpt-5", "name": "GPT-5"},
    {"id": "openai/gpt-5-mini", "name": "GPT-5 Mini"},
]


def first_choice_content(data: Any) -> Optional[str]:
    """Text of ``choices[0].message.content``, or None when the payload has none."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


class CompletionClient:
    """Synchronous provider client. One instance per request; no retries."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str,
        referer: str = "",
        timeout: float = 60.0,
        http_client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.referer = referer
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.Client | None = None) -> "CompletionClient":
        return cls(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            referer=settings.APP_URL,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        return headers

    def complete(
        self,
        messages: list[dict],
        *,
        model: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Send one chat-completions request and return the first choice's text.

        Raises ``ProviderError`` on any non-2xx status and ``EmptyResponse``
        when the body carries no usable content.
        """
        body: dict[str, Any] = {"model": model, "messages": messages}
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if temperature is not None:
            body["temperature"] = temperature

        response = self._client.post(
            f"{self.base_url}/chat/completions",
            headers=self._headers(),
            json=body,
        )
        if not response.is_success:
            logger.error("Provider API error: status=%s body=%.500s", response.status_code, response.text)
            raise ProviderError(response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise EmptyResponse()

        content = first_choice_content(data)
        if not content:
            raise EmptyResponse()
        return content

    def list_models(self) -> list[dict[str, str]]:
        """Provider models as ``{id, name}``; entries without a string id are skipped."""
        response = self._client.get(f"{self.base_url}/models", headers=self._headers())
        response.raise_for_status()
        data = response.json()
        entries = data.get("data") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return []

        models = []
        for m in entries:
            if not isinstance(m, dict):
                continue
            model_id = m.get("id")
            if not isinstance(model_id, str) or not model_id:
                continue
            name = m.get("name")
            models.append({"id": model_id, "name": name if isinstance(name, str) and name else model_id})
        return models

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
