"""
HTTP client for the xAI (Grok) chat completions API.
"""

from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from reliatrack.config.settings import settings


class AIClientError(Exception):
    """Raised when the AI provider is unreachable or misconfigured."""


class XAIClient:
    """
    Thin async wrapper around ``POST {base_url}/chat/completions``.

    Transport failures and 5xx responses are retried with exponential
    backoff; 4xx responses surface immediately.
    """

    def __init__(self):
        self.api_key = settings.ai.api_key
        self.base_url = settings.ai.base_url.rstrip("/")
        self.default_model = settings.ai.default_model
        self.max_tokens = settings.ai.max_tokens
        self.temperature = settings.ai.temperature
        self.timeout = settings.ai.timeout_seconds

    @property
    def configured(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type((httpx.TransportError, httpx.HTTPStatusError)),
        reraise=True,
    )
    async def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key.get_secret_value()}",
                    "Content-Type": "application/json",
                },
                json=body,
                timeout=self.timeout,
            )
            if response.status_code < 500:
                # Client errors are not worth retrying
                if response.is_error:
                    raise AIClientError(
                        f"AI provider rejected request ({response.status_code})"
                    )
            else:
                response.raise_for_status()
            try:
                return response.json()
            except ValueError as exc:
                raise AIClientError("AI provider returned a non-JSON response") from exc

    async def chat(
        self,
        system_prompt: str,
        prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> dict[str, Any]:
        """
        Run a single-turn chat completion.

        Returns:
            Dict with ``content``, ``model`` and ``usage`` keys
        """
        if not self.configured:
            raise AIClientError("XAI_API_KEY is not configured")

        body = {
            "model": model or self.default_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": self.temperature if temperature is None else temperature,
        }
        try:
            result = await self._post(body)
        except httpx.HTTPError as exc:
            raise AIClientError(f"AI provider unavailable: {exc}") from exc

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AIClientError("AI provider returned an unexpected response") from exc

        return {
            "content": content,
            "model": result.get("model", body["model"]),
            "usage": result.get("usage") or {},
        }
