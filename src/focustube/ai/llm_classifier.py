"""Remote-model relevance classifier with a decision cache."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from focustube.ai.cache import DecisionCache, Verdict, build_policy
from focustube.ai.claude_client import DEFAULT_MODEL as CLAUDE_DEFAULT_MODEL
from focustube.ai.claude_client import ClaudeClient
from focustube.ai.gemini_client import DEFAULT_MODEL as GEMINI_DEFAULT_MODEL
from focustube.ai.gemini_client import GeminiClient, RemoteClassifierError
from focustube.ai.prompts import format_relevance_prompt
from focustube.ai.schemas import ClassifierProvider, parse_decision
from focustube.focus.profile import UserFocusProfile

if TYPE_CHECKING:
    from focustube.core.config import Config

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Anything that turns a prompt into answer text, raising RemoteClassifierError."""

    async def complete(self, prompt: str, api_key: str) -> str: ...


class LLMClassifier:
    """Ask a remote model whether a title is on-topic for the user's task.

    Returns True or False for a decision and None for an abstention. Both are
    cached under task|title; a cached abstention is never retried.
    """

    def __init__(self, client: CompletionClient, cache: DecisionCache | None = None):
        self.client = client
        self.cache = cache if cache is not None else DecisionCache()

    async def decide(self, profile: UserFocusProfile, text: str, api_key: str) -> Verdict:
        """Classify one title, consulting the cache first."""
        found, cached = self.cache.lookup(profile.task, text)
        if found:
            return cached

        prompt = format_relevance_prompt(profile, text)
        try:
            answer = await self.client.complete(prompt, api_key)
        except RemoteClassifierError as e:
            logger.warning(f"Remote classification failed, falling back to keywords: {e}")
            self.cache.store(profile.task, text, None)
            return None

        decision = parse_decision(answer)
        self.cache.store(profile.task, text, decision)
        return decision


def create_llm_classifier(config: Config | None = None) -> LLMClassifier:
    """Build a classifier for the configured provider with its own cache."""
    if config is None:
        from focustube.core.config import get_config

        config = get_config()

    settings = config.classifier
    client: CompletionClient
    if settings.provider is ClassifierProvider.CLAUDE:
        client = ClaudeClient(
            model=settings.model or CLAUDE_DEFAULT_MODEL,
            timeout_seconds=settings.timeout_seconds,
        )
    else:
        client = GeminiClient(
            model=settings.model or GEMINI_DEFAULT_MODEL,
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
        )

    cache = DecisionCache(build_policy(settings.cache_policy, settings.cache_max_entries))
    logger.info(f"Remote classifier: {settings.provider.value} ({settings.cache_policy} cache)")
    return LLMClassifier(client, cache)
