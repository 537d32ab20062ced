"""Claude API client answering relevance prompts."""

from __future__ import annotations

import logging
from typing import Any

from anthropic import APIError, AsyncAnthropic

from focustube.ai.gemini_client import RemoteClassifierError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5"


class ClaudeClient:
    """Async Claude client with the same complete() contract as GeminiClient."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 16,
        timeout_seconds: float = 15.0,
    ):
        """Initialize the Claude client.

        Args:
            model: Model to use.
            max_tokens: Maximum tokens in response; one word is expected.
            timeout_seconds: Request timeout.
        """
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

        # One SDK client per credential, created on first use
        self._clients: dict[str, AsyncAnthropic] = {}

        # Track usage
        self._total_input_tokens = 0
        self._total_output_tokens = 0
        self._request_count = 0

    @property
    def request_count(self) -> int:
        """Total API requests made."""
        return self._request_count

    def _client_for(self, api_key: str) -> AsyncAnthropic:
        client = self._clients.get(api_key)
        if client is None:
            # SDK retries are disabled: one request per uncached title
            client = AsyncAnthropic(api_key=api_key, max_retries=0, timeout=self.timeout_seconds)
            self._clients[api_key] = client
        return client

    async def complete(self, prompt: str, api_key: str) -> str:
        """Send a prompt and return the concatenated text blocks.

        The prompt already carries the relevance instructions, so no system
        prompt is sent.

        Raises:
            RemoteClassifierError: If the API call fails.
        """
        self._request_count += 1
        try:
            response = await self._client_for(api_key).messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as e:
            raise RemoteClassifierError(f"Claude request failed: {e}") from e

        self._total_input_tokens += response.usage.input_tokens
        self._total_output_tokens += response.usage.output_tokens

        text_content = ""
        for block in response.content:
            if hasattr(block, "text"):
                text_content += block.text

        logger.debug(
            f"API call successful: {response.usage.input_tokens} in, "
            f"{response.usage.output_tokens} out"
        )
        return text_content

    def get_usage_stats(self) -> dict[str, Any]:
        """Get usage statistics."""
        return {
            "total_input_tokens": self._total_input_tokens,
            "total_output_tokens": self._total_output_tokens,
            "request_count": self._request_count,
        }
