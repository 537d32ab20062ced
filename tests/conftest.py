from datetime import datetime, timezone

import pytest

from focustube.ai.gemini_client import RemoteClassifierError
from focustube.focus.profile import FocusState, build_profile


class FakeCompletionClient:
    """Stands in for a remote model; records every prompt it receives."""

    def __init__(self, answer="on-topic", error=None):
        self.answer = answer
        self.error = error
        self.prompts = []

    @property
    def request_count(self):
        return len(self.prompts)

    async def complete(self, prompt, api_key):
        self.prompts.append((prompt, api_key))
        if self.error:
            raise RemoteClassifierError(self.error)
        return self.answer


@pytest.fixture
def t0():
    return datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def rust_state():
    return FocusState(task="learn rust ownership", role="programmer", strictness="medium")


@pytest.fixture
def rust_profile(rust_state):
    return build_profile(rust_state)


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def make_client():
    return FakeCompletionClient
