"""Focus profiles, keyword relevance scoring, classification and the focus/break timer."""

from focustube.focus.engine import ClassificationEngine, EngineConfig, EngineMode
from focustube.focus.profile import FocusState, Role, Strictness, UserFocusProfile, build_profile
from focustube.focus.relevance import is_relevant, relevance_score, threshold_for
from focustube.focus.timer import TimerPhase, TimerRecord, advance, format_time_remaining, start_timer

__all__ = [
    "ClassificationEngine",
    "EngineConfig",
    "EngineMode",
    "FocusState",
    "Role",
    "Strictness",
    "UserFocusProfile",
    "build_profile",
    "is_relevant",
    "relevance_score",
    "threshold_for",
    "TimerPhase",
    "TimerRecord",
    "advance",
    "format_time_remaining",
    "start_timer",
]
