"""Debounced scheduling of evaluation cycles from independent triggers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from focustube.core.controller import EvaluationResult, SessionController
from focustube.storage.state_store import StateStore

logger = logging.getLogger(__name__)

# Supplies (candidate titles, current item) for the next cycle
ItemSource = Callable[[], Awaitable[tuple[Sequence[str], str | None]]]
ResultCallback = Callable[[EvaluationResult], Awaitable[None] | None]


async def _no_items() -> tuple[Sequence[str], str | None]:
    return (), None


class EvaluationDispatcher:
    """Collapse bursts of triggers into single controller evaluations.

    Triggers (storage changes, ticks, content changes) call request(), which
    only enqueues. One worker drains the queue: after the first request it
    waits out the debounce window, discards everything queued meanwhile, and
    runs one evaluation.

    Usage:
        dispatcher = EvaluationDispatcher(controller, items=page.snapshot)
        dispatcher.on_result = render
        dispatcher.attach_store(store)
        await dispatcher.start(tick_seconds=1.0)
        dispatcher.request("content")
        ...
        await dispatcher.stop()
    """

    def __init__(
        self,
        controller: SessionController,
        items: ItemSource | None = None,
        debounce_seconds: float = 0.25,
    ):
        self.controller = controller
        self.items = items or _no_items
        self.debounce_seconds = debounce_seconds
        self.on_result: ResultCallback | None = None

        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._ticker: asyncio.Task | None = None
        self._running = False

        self.evaluation_count = 0
        self.collapsed_count = 0
        self.last_result: EvaluationResult | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    def request(self, reason: str = "manual") -> None:
        """Ask for a re-evaluation. Safe to call from any trigger, any number of times."""
        self._queue.put_nowait(reason)

    def attach_store(self, store: StateStore) -> None:
        """Re-evaluate whenever the persisted state changes."""
        store.on_change(lambda _state: self.request("storage"))

    async def start(self, tick_seconds: float | None = None) -> None:
        """Start the worker and, optionally, a periodic tick trigger."""
        if self._running:
            return
        self._running = True
        self._worker = asyncio.create_task(self._work_loop())
        if tick_seconds:
            self._ticker = asyncio.create_task(self._tick_loop(tick_seconds))
        logger.info("Evaluation dispatcher started")

    async def stop(self) -> None:
        """Stop the worker and ticker; queued requests are dropped."""
        self._running = False
        for task in (self._ticker, self._worker):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._ticker = None
        self._worker = None
        logger.info("Evaluation dispatcher stopped")

    async def _tick_loop(self, interval: float) -> None:
        while self._running:
            await asyncio.sleep(interval)
            self.request("tick")

    async def _work_loop(self) -> None:
        while self._running:
            reason = await self._queue.get()

            if self.debounce_seconds > 0:
                await asyncio.sleep(self.debounce_seconds)

            reasons = [reason]
            while not self._queue.empty():
                reasons.append(self._queue.get_nowait())
            self.collapsed_count += len(reasons) - 1

            await self._run_once(reasons)

    async def _run_once(self, reasons: list[str]) -> None:
        try:
            candidates, current_item = await self.items()
            result = await self.controller.evaluate(candidates, current_item)
        except Exception as e:
            logger.error(f"Evaluation failed ({', '.join(sorted(set(reasons)))}): {e}")
            return

        self.evaluation_count += 1
        self.last_result = result

        if self.on_result:
            try:
                outcome = self.on_result(result)
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"Error in on_result callback: {e}")
