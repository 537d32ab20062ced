"""Focus state records and keyword profiles derived from the user's task."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from focustube.focus.timer import TimerRecord, from_epoch_ms, to_epoch_ms

logger = logging.getLogger(__name__)

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_BREAK_MINUTES = 10


class Role(str, Enum):
    """Who the user is while working on the task."""
    STUDENT = "student"
    PROGRAMMER = "programmer"
    TEACHER = "teacher"
    RESEARCHER = "researcher"
    OTHER = "other"


class Strictness(str, Enum):
    """How many keyword hits a title needs before it counts as relevant."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Extra terms appended to the task keywords for each role
ROLE_KEYWORDS: dict[Role, tuple[str, ...]] = {
    Role.STUDENT: ("lecture", "tutorial", "study", "exam", "practice"),
    Role.PROGRAMMER: ("tutorial", "course", "walkthrough", "coding", "programming"),
    Role.TEACHER: ("lesson", "classroom", "explained"),
    Role.RESEARCHER: ("talk", "conference", "seminar", "paper"),
}


def parse_role(value: str | Role | None) -> Role | None:
    """Map a stored role string onto Role, None when absent or unknown."""
    if value is None or isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def parse_strictness(value: str | Strictness | None) -> Strictness:
    """Map a stored strictness string onto Strictness, defaulting to medium."""
    if isinstance(value, Strictness):
        return value
    try:
        return Strictness(value)
    except ValueError:
        return Strictness.MEDIUM


@dataclass
class FocusState:
    """Persisted focus configuration, written wholesale by the config surface.

    Serialized with the camelCase keys the extension storage uses, with
    timestamps as epoch milliseconds.
    """
    task: str = ""
    role: str | None = None
    strictness: str | None = None
    timer_enabled: bool = False
    focus_duration: int = DEFAULT_FOCUS_MINUTES
    break_duration: int = DEFAULT_BREAK_MINUTES
    timer_state: TimerRecord | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FocusState:
        """Create from the stored JSON object."""
        timer_data = data.get("timerState")
        updated_at = data.get("updatedAt")
        return cls(
            task=data.get("task") or "",
            role=data.get("role"),
            strictness=data.get("strictness"),
            timer_enabled=bool(data.get("timerEnabled", False)),
            focus_duration=int(data.get("focusDuration") or DEFAULT_FOCUS_MINUTES),
            break_duration=int(data.get("breakDuration") or DEFAULT_BREAK_MINUTES),
            timer_state=TimerRecord.from_dict(timer_data) if timer_data else None,
            updated_at=from_epoch_ms(updated_at) if updated_at is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored JSON object."""
        return {
            "task": self.task,
            "role": self.role,
            "strictness": self.strictness,
            "timerEnabled": self.timer_enabled,
            "focusDuration": self.focus_duration,
            "breakDuration": self.break_duration,
            "timerState": self.timer_state.to_dict() if self.timer_state else None,
            "updatedAt": to_epoch_ms(self.updated_at) if self.updated_at else None,
        }

    def with_timer(self, record: TimerRecord | None) -> FocusState:
        """Copy of this state carrying a different timer record."""
        return replace(self, timer_state=record)


@dataclass(frozen=True)
class UserFocusProfile:
    """Keyword profile rebuilt from FocusState on every evaluation."""
    task: str
    role: Role | None = None
    strictness: Strictness = Strictness.MEDIUM
    keywords: tuple[str, ...] = field(default_factory=tuple)


def tokenize_task(task: str) -> list[str]:
    """Split a task into lower-cased, deduplicated words longer than two chars."""
    words: list[str] = []
    for token in task.split():
        word = token.lower()
        if len(word) > 2 and word not in words:
            words.append(word)
    return words


def build_profile(state: FocusState | None) -> UserFocusProfile | None:
    """Build the keyword profile for a focus state.

    Returns None when no task is configured, which callers treat as
    "filtering disabled".
    """
    if state is None or not state.task:
        return None

    role = parse_role(state.role)
    keywords = tokenize_task(state.task)
    for extra in ROLE_KEYWORDS.get(role, ()):
        if extra not in keywords:
            keywords.append(extra)

    profile = UserFocusProfile(
        task=state.task,
        role=role,
        strictness=parse_strictness(state.strictness),
        keywords=tuple(keywords),
    )
    logger.debug(f"Built profile with {len(profile.keywords)} keywords for task {state.task!r}")
    return profile
