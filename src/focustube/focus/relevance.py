"""Keyword scorer deciding whether a title matches the user's focus profile."""

from __future__ import annotations

import logging

from focustube.focus.profile import Strictness, UserFocusProfile, parse_strictness

logger = logging.getLogger(__name__)

# Minimum keyword hits per strictness level
THRESHOLDS: dict[Strictness, float] = {
    Strictness.LOW: 0.5,
    Strictness.MEDIUM: 1,
    Strictness.HIGH: 2,
}


def threshold_for(strictness: Strictness | str | None) -> float:
    """Score a title needs to be relevant; unknown levels use medium."""
    return THRESHOLDS[parse_strictness(strictness)]


def relevance_score(profile: UserFocusProfile | None, text: str | None) -> int:
    """Count profile keywords that appear as substrings of the lower-cased text."""
    if not profile or not text:
        return 0
    target = text.lower()
    return sum(1 for keyword in profile.keywords if keyword and keyword in target)


def is_relevant(profile: UserFocusProfile, text: str | None) -> bool:
    """Keyword verdict for a single title."""
    return relevance_score(profile, text) >= threshold_for(profile.strictness)

