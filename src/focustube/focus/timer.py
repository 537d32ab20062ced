"""Focus/break timer state machine driven by wall-clock time.

The timer is never ticked in memory. Each caller reads the persisted
TimerRecord and runs advance() against the current time, so any number of
independent readers agree on the phase without coordinating.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class TimerPhase(Enum):
    """Current phase of the focus timer."""
    FOCUS = "focus"
    BREAK = "break"

    @property
    def display_name(self) -> str:
        return "Focus" if self is TimerPhase.FOCUS else "Break"

    def next(self) -> TimerPhase:
        return TimerPhase.BREAK if self is TimerPhase.FOCUS else TimerPhase.FOCUS


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(moment.timestamp() * 1000)


def from_epoch_ms(value: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TimerRecord:
    """Persisted timer state.

    end_time is in the future when the record is produced. Once
    now >= end_time the record is stale and must go through advance().
    """
    phase: TimerPhase
    end_time: datetime
    focus_duration: int
    break_duration: int

    def duration_for(self, phase: TimerPhase) -> timedelta:
        """Length of the given phase."""
        minutes = self.focus_duration if phase is TimerPhase.FOCUS else self.break_duration
        return timedelta(minutes=minutes)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.end_time

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimerRecord:
        """Create from the stored JSON object."""
        return cls(
            phase=TimerPhase(data["phase"]),
            end_time=from_epoch_ms(data["endTime"]),
            focus_duration=int(data["focusDuration"]),
            break_duration=int(data["breakDuration"]),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored JSON object."""
        return {
            "phase": self.phase.value,
            "endTime": to_epoch_ms(self.end_time),
            "focusDuration": self.focus_duration,
            "breakDuration": self.break_duration,
        }


def start_timer(focus_duration: int, break_duration: int, now: datetime | None = None) -> TimerRecord:
    """Create a fresh record that starts in the focus phase."""
    now = now or utcnow()
    record = TimerRecord(
        phase=TimerPhase.FOCUS,
        end_time=now + timedelta(minutes=focus_duration),
        focus_duration=focus_duration,
        break_duration=break_duration,
    )
    logger.info(f"Timer started: {focus_duration}m focus / {break_duration}m break")
    return record


def advance(record: TimerRecord, now: datetime) -> TimerRecord:
    """Return the record that is current at ``now``.

    An unexpired record is returned as is (same object). An expired one flips
    phase exactly once and gets a new end time measured from ``now``; no
    catch-up over several missed phases happens in a single call.
    """
    if not record.is_expired(now):
        return record

    next_phase = record.phase.next()
    advanced = replace(
        record,
        phase=next_phase,
        end_time=now + record.duration_for(next_phase),
    )
    logger.debug(f"Timer phase {record.phase.value} -> {next_phase.value}")
    return advanced


def current_phase(record: TimerRecord | None) -> TimerPhase | None:
    """Phase of a record, None meaning the timer is disabled."""
    return record.phase if record else None


def format_time_remaining(end_time: datetime, now: datetime | None = None) -> str:
    """Format time left until ``end_time`` as M:SS, floored at zero."""
    now = now or utcnow()
    remaining = max(0, int((end_time - now).total_seconds()))
    minutes, seconds = divmod(remaining, 60)
    return f"{minutes}:{seconds:02d}"
