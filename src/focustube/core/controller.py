"""Session controller running one focus evaluation cycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from focustube.focus.engine import ClassificationEngine, EngineConfig
from focustube.focus.profile import FocusState, build_profile
from focustube.focus.timer import TimerPhase, TimerRecord, advance, utcnow
from focustube.storage.state_store import StateStore

logger = logging.getLogger(__name__)


class FilterAction(Enum):
    """What the presentation layer should do with the page."""
    FILTER = "filter"        # Apply per-item verdicts
    SUSPEND = "suspend"      # Break phase: remove filtering, show the timer only
    DISABLED = "disabled"    # No task configured


@dataclass
class EvaluationResult:
    """Output of one cycle, handed to the presentation layer."""
    action: FilterAction
    timer: TimerRecord | None = None
    verdicts: dict[str, bool] = field(default_factory=dict)
    current_item: str | None = None
    intervene: bool = False
    timer_persisted: bool = False

    @property
    def on_break(self) -> bool:
        return self.timer is not None and self.timer.phase is TimerPhase.BREAK


class SessionController:
    """Evaluate the persisted focus state against a batch of titles.

    Every call re-reads the store, so repeated or overlapping calls from
    different triggers converge on the same result.
    """

    def __init__(
        self,
        store: StateStore,
        engine: ClassificationEngine,
        fallback_credential: str | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.engine = engine
        self.fallback_credential = fallback_credential or ""
        self._clock = clock

    async def evaluate(
        self,
        candidates: Sequence[str] = (),
        current_item: str | None = None,
    ) -> EvaluationResult:
        """Run one cycle: timer first, then classification unless on break."""
        state, credential = await asyncio.gather(
            self.store.load_state(),
            self.store.get_credential(),
        )
        credential = credential or self.fallback_credential

        timer: TimerRecord | None = None
        persisted = False
        if state and state.timer_enabled and state.timer_state:
            timer = advance(state.timer_state, self._clock())
            if timer is not state.timer_state:
                persisted = await self._persist_timer(state.with_timer(timer))

            if timer.phase is TimerPhase.BREAK:
                logger.debug("Break phase, filtering suspended")
                return EvaluationResult(
                    action=FilterAction.SUSPEND,
                    timer=timer,
                    timer_persisted=persisted,
                )

        profile = build_profile(state)
        if profile is None or not profile.keywords:
            return EvaluationResult(
                action=FilterAction.DISABLED,
                timer=timer,
                timer_persisted=persisted,
            )

        config = EngineConfig.for_profile(profile, credential)
        unique = list(dict.fromkeys(c for c in candidates if c))
        decisions = await asyncio.gather(*(self.engine.classify(config, text) for text in unique))
        verdicts = dict(zip(unique, decisions))

        intervene = False
        if current_item:
            if current_item in verdicts:
                relevant = verdicts[current_item]
            else:
                relevant = await self.engine.classify(config, current_item)
            intervene = not relevant
            if intervene:
                logger.info(f"Off-topic item in focus: {current_item!r}")

        return EvaluationResult(
            action=FilterAction.FILTER,
            timer=timer,
            verdicts=verdicts,
            current_item=current_item,
            intervene=intervene,
            timer_persisted=persisted,
        )

    async def _persist_timer(self, state: FocusState) -> bool:
        """Write back an advanced timer; failures are logged, not raised."""
        try:
            await self.store.save_state(state)
        except Exception as e:
            logger.error(f"Failed to persist advanced timer: {e}")
            return False
        logger.info(f"Timer advanced to {state.timer_state.phase.value}")
        return True
