"""Tests for the Claude relevance client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import pytest

from focustube.ai.claude_client import ClaudeClient
from focustube.ai.gemini_client import RemoteClassifierError
from focustube.ai.prompts import RELEVANCE_INSTRUCTIONS, format_relevance_prompt


def _response(text):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=120, output_tokens=3),
    )


@pytest.mark.asyncio
async def test_complete_returns_text_and_tracks_usage():
    sdk = MagicMock()
    sdk.messages.create = AsyncMock(return_value=_response("on-topic"))

    with patch("focustube.ai.claude_client.AsyncAnthropic", return_value=sdk) as factory:
        client = ClaudeClient(model="claude-test")
        answer = await client.complete("prompt", "sk-1")
        await client.complete("prompt 2", "sk-1")

    assert answer == "on-topic"
    factory.assert_called_once_with(api_key="sk-1", max_retries=0, timeout=15.0)
    kwargs = sdk.messages.create.await_args.kwargs
    assert kwargs["model"] == "claude-test"
    assert kwargs["temperature"] == 0
    assert client.get_usage_stats() == {
        "total_input_tokens": 240,
        "total_output_tokens": 6,
        "request_count": 2,
    }


@pytest.mark.asyncio
async def test_api_error_becomes_remote_error():
    sdk = MagicMock()
    sdk.messages.create = AsyncMock(side_effect=anthropic.APIConnectionError(request=MagicMock()))

    with patch("focustube.ai.claude_client.AsyncAnthropic", return_value=sdk):
        client = ClaudeClient()
        with pytest.raises(RemoteClassifierError):
            await client.complete("prompt", "sk-1")


@pytest.mark.asyncio
async def test_relevance_instructions_sent_once(rust_profile):
    sdk = MagicMock()
    sdk.messages.create = AsyncMock(return_value=_response("off-topic"))
    prompt = format_relevance_prompt(rust_profile, "Funny Cat Compilation 2024")

    with patch("focustube.ai.claude_client.AsyncAnthropic", return_value=sdk):
        await ClaudeClient().complete(prompt, "sk-1")

    kwargs = sdk.messages.create.await_args.kwargs
    assert "system" not in kwargs
    sent = "".join(message["content"] for message in kwargs["messages"])
    assert sent.count(RELEVANCE_INSTRUCTIONS) == 1
