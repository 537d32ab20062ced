"""Prompt templates for the remote relevance classifier."""

from __future__ import annotations

from focustube.focus.profile import UserFocusProfile

# Instructions the model sees for every title
RELEVANCE_INSTRUCTIONS = """You are a strict focus assistant.
Given a user's current task and role, decide if a YouTube video will genuinely help with that task right now.
Respond with exactly one word: 'on-topic' or 'off-topic'."""

RELEVANCE_PROMPT = """{instructions}

User role: {role}.
Current task: {task}.
YouTube video title: {title}.

Is watching this video on-topic for their current task?"""


def format_relevance_prompt(profile: UserFocusProfile, title: str) -> str:
    """Build the relevance prompt for one title."""
    return RELEVANCE_PROMPT.format(
        instructions=RELEVANCE_INSTRUCTIONS,
        role=profile.role.value if profile.role else "unspecified",
        task=profile.task,
        title=title,
    )
