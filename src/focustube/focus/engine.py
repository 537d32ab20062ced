"""Classification engine combining the remote classifier and keyword scoring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from focustube.focus.profile import UserFocusProfile
from focustube.focus.relevance import is_relevant

if TYPE_CHECKING:
    from focustube.ai.llm_classifier import LLMClassifier

logger = logging.getLogger(__name__)


class EngineMode(Enum):
    """How titles are classified."""
    KEYWORDS = "keywords"
    LLM = "llm"


@dataclass(frozen=True)
class EngineConfig:
    """Per-cycle engine settings."""
    mode: EngineMode
    profile: UserFocusProfile
    credential: str = ""

    @classmethod
    def for_profile(cls, profile: UserFocusProfile, credential: str | None) -> EngineConfig:
        """LLM mode exactly when a credential is configured."""
        credential = credential or ""
        mode = EngineMode.LLM if credential else EngineMode.KEYWORDS
        return cls(mode=mode, profile=profile, credential=credential)


class ClassificationEngine:
    """Produce a concrete relevance verdict for a title.

    The remote classifier is tried first in LLM mode; an abstention falls
    back to keyword scoring so classify() always returns a bool.
    """

    def __init__(self, llm_classifier: LLMClassifier | None = None):
        self.llm_classifier = llm_classifier

    async def classify(self, config: EngineConfig, text: str) -> bool:
        if config.mode is EngineMode.LLM and config.credential and self.llm_classifier:
            decision = await self.llm_classifier.decide(config.profile, text, config.credential)
            if decision is not None:
                return decision
            logger.debug(f"Keyword fallback for {text!r}")

        return is_relevant(config.profile, text)
