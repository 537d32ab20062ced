"""Gemini generateContent client used for relevance decisions."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiohttp
from dotenv import load_dotenv

from focustube.ai.schemas import GenerateContentRequest, decode_generate_content

# Load .env so FOCUSTUBE_GEMINI_API_KEY can live next to the project
_env_path = Path(__file__).parent.parent.parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash-latest"


class RemoteClassifierError(Exception):
    """Transport failure, non-2xx status, or unusable payload from a remote model."""


class GeminiClient:
    """Async client issuing one generateContent request per prompt."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 15.0,
        session: aiohttp.ClientSession | None = None,
    ):
        """Initialize the Gemini client.

        Args:
            model: Model name in the generateContent path.
            base_url: API root, overridable for proxies and tests.
            timeout_seconds: Total timeout for a single request.
            session: Optional shared session. One is created per request otherwise.
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._request_count = 0

    @property
    def request_count(self) -> int:
        """Total API requests made."""
        return self._request_count

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def complete(self, prompt: str, api_key: str) -> str:
        """Send a prompt and return the model's answer text.

        Raises:
            RemoteClassifierError: On any transport, status or payload failure.
        """
        payload = GenerateContentRequest.for_prompt(prompt).to_payload()
        self._request_count += 1

        try:
            if self._session is not None:
                data = await self._post(self._session, payload, api_key)
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    data = await self._post(session, payload, api_key)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RemoteClassifierError(f"Gemini request failed: {e}") from e

        answer = decode_generate_content(data)
        if answer is None:
            raise RemoteClassifierError("Gemini response did not match the expected schema")

        logger.debug(f"Gemini answered: {answer[:80]!r}")
        return answer

    async def _post(self, session: aiohttp.ClientSession, payload: dict, api_key: str) -> object:
        async with session.post(
            self.endpoint,
            params={"key": api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
        ) as resp:
            if resp.status < 200 or resp.status >= 300:
                raise RemoteClassifierError(f"Gemini request failed with status {resp.status}")
            return await resp.json()
