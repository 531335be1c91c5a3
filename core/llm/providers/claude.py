import json
import os

import httpx

from config.models import ModelConfig
from core.contracts.provider import LLMProvider
from core.registry import provider_registry
from utils.errors import ProviderError, ReviewTimeout


@provider_registry.register("claude")
class ClaudeProvider(LLMProvider):
    """
    A provider for the Anthropic Messages API.
    """

    def __init__(self, config: ModelConfig):
        self.config = config
        self._api_key = config.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ProviderError("Anthropic API key not found. Please set it in the config or as an environment variable ANTHROPIC_API_KEY.")

        self._client = httpx.AsyncClient(
            base_url=config.base_url or "https://api.anthropic.com/v1",
            headers={
                "x-api-key": self._api_key,
                "anthropic-version": "2023-06-01",
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout_sec,
        )

    async def _request(self, payload: dict) -> httpx.Response:
        try:
            response = await self._client.post("/messages", json=payload)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            raise ReviewTimeout(f"Request to Anthropic timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            try:
                error_details = e.response.json()
                error_message = error_details.get("error", {}).get("message", e.response.text)
            except json.JSONDecodeError:
                error_message = e.response.text
            raise ProviderError(f"Anthropic API error ({e.response.status_code}): {error_message}") from e
        except httpx.RequestError as e:
            raise ProviderError(f"An unexpected network error occurred: {e}") from e

    def _build_payload(self, prompt: str) -> dict:
        payload = {
            "model": self.config.name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.config.max_tokens,
        }
        payload.update(self.config.parameters)
        return payload

    async def generate(self, prompt: str) -> str:
        """
        Sends the review prompt and returns the concatenated text blocks of the reply.
        """
        response = await self._request(self._build_payload(prompt))
        data = response.json()
        texts = [block.get("text", "") for block in data.get("content", []) if block.get("type") == "text"]
        if not texts:
            raise ProviderError("Anthropic API returned no text content.")
        return "".join(texts)
