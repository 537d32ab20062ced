"""Persisted focus state and credential storage."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from focustube.focus.profile import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_FOCUS_MINUTES,
    FocusState,
    parse_role,
    parse_strictness,
)
from focustube.focus.timer import TimerRecord, start_timer, utcnow
from focustube.storage.database import Database

logger = logging.getLogger(__name__)

STATE_KEY = "focustubes_state"
CREDENTIAL_KEY = "focustubes_gemini_key"

ChangeListener = Callable[[FocusState], None]


class StateStore(ABC):
    """Async store for the FocusState and the classifier credential.

    Writes are whole-object and last-write-wins. Listeners registered with
    on_change() are called after every save_state().
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    @abstractmethod
    async def _read_state(self) -> dict | None: ...

    @abstractmethod
    async def _write_state(self, data: dict) -> None: ...

    @abstractmethod
    async def get_credential(self) -> str: ...

    @abstractmethod
    async def set_credential(self, value: str) -> None: ...

    def on_change(self, listener: ChangeListener) -> None:
        """Register a callback fired with the new state after each save."""
        self._listeners.append(listener)

    async def load_state(self) -> FocusState | None:
        data = await self._read_state()
        return FocusState.from_dict(data) if data else None

    async def save_state(self, state: FocusState) -> None:
        await self._write_state(state.to_dict())
        for listener in self._listeners:
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Error in state change listener: {e}")

    async def save_focus(
        self,
        task: str,
        role: str | None = None,
        strictness: str | None = None,
        timer_enabled: bool = False,
        focus_duration: int | None = None,
        break_duration: int | None = None,
        now: datetime | None = None,
    ) -> FocusState:
        """Replace the focus configuration, keeping any running timer.

        Raises:
            ValueError: If the task is empty or the role/strictness is unknown.
        """
        task = task.strip()
        if not task:
            raise ValueError("Please describe what you're working on.")
        if role is not None and parse_role(role) is None:
            raise ValueError(f"Unknown role: {role}")
        if strictness is not None and parse_strictness(strictness).value != strictness:
            raise ValueError(f"Unknown strictness: {strictness}")

        current = await self.load_state()
        state = FocusState(
            task=task,
            role=role,
            strictness=strictness,
            timer_enabled=timer_enabled,
            focus_duration=focus_duration or DEFAULT_FOCUS_MINUTES,
            break_duration=break_duration or DEFAULT_BREAK_MINUTES,
            timer_state=current.timer_state if current else None,
            updated_at=now or utcnow(),
        )
        await self.save_state(state)
        logger.info(f"Focus saved: {task!r}")
        return state

    async def toggle_timer(
        self,
        focus_duration: int | None = None,
        break_duration: int | None = None,
        now: datetime | None = None,
    ) -> TimerRecord | None:
        """Stop a running timer, or start a new one. Returns the new record."""
        current = await self.load_state()
        if current and current.timer_state:
            await self.save_state(current.with_timer(None))
            logger.info("Timer stopped")
            return None

        focus = focus_duration or DEFAULT_FOCUS_MINUTES
        brk = break_duration or DEFAULT_BREAK_MINUTES
        record = start_timer(focus, brk, now or utcnow())
        base = current or FocusState()
        base.timer_state = record
        base.timer_enabled = True
        base.focus_duration = focus
        base.break_duration = brk
        await self.save_state(base)
        return record


class SQLiteStateStore(StateStore):
    """StateStore backed by the kv_store table."""

    def __init__(self, db: Database):
        super().__init__()
        self.db = db

    async def _read_state(self) -> dict | None:
        return await self.db.get_value(STATE_KEY)

    async def _write_state(self, data: dict) -> None:
        await self.db.set_value(STATE_KEY, data)

    async def get_credential(self) -> str:
        return await self.db.get_value(CREDENTIAL_KEY) or ""

    async def set_credential(self, value: str) -> None:
        if not value:
            await self.db.delete_value(CREDENTIAL_KEY)
            return
        await self.db.set_value(CREDENTIAL_KEY, value)


class MemoryStateStore(StateStore):
    """In-process StateStore, used by tests and one-shot evaluations."""

    def __init__(self, state: FocusState | None = None, credential: str = ""):
        super().__init__()
        self._data: dict | None = state.to_dict() if state else None
        self._credential = credential
        self.write_count = 0

    async def _read_state(self) -> dict | None:
        return dict(self._data) if self._data else None

    async def _write_state(self, data: dict) -> None:
        self._data = dict(data)
        self.write_count += 1

    async def get_credential(self) -> str:
        return self._credential

    async def set_credential(self, value: str) -> None:
        self._credential = value
