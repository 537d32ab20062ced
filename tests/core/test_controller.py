"""Tests for the session controller evaluation cycle."""

import asyncio
from dataclasses import replace
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from focustube.ai.llm_classifier import LLMClassifier
from focustube.core.controller import FilterAction, SessionController
from focustube.focus.engine import ClassificationEngine
from focustube.focus.profile import FocusState
from focustube.focus.timer import TimerPhase, start_timer
from focustube.storage.state_store import MemoryStateStore

RUST_TITLE = "Rust Ownership Tutorial for Beginners"
CAT_TITLE = "Funny Cat Compilation 2024"


def _controller(store, now, client=None, fallback=None):
    engine = ClassificationEngine(LLMClassifier(client) if client else None)
    return SessionController(store, engine, fallback_credential=fallback, clock=lambda: now)


@pytest.mark.asyncio
async def test_no_state_disables_filtering(t0):
    result = await _controller(MemoryStateStore(), t0).evaluate([RUST_TITLE])

    assert result.action is FilterAction.DISABLED
    assert result.verdicts == {}


@pytest.mark.asyncio
async def test_keyword_verdicts_end_to_end(rust_state, t0):
    store = MemoryStateStore(rust_state)

    result = await _controller(store, t0).evaluate([RUST_TITLE, CAT_TITLE, RUST_TITLE])

    assert result.action is FilterAction.FILTER
    assert result.verdicts == {RUST_TITLE: True, CAT_TITLE: False}
    assert result.timer is None
    assert store.write_count == 0


@pytest.mark.asyncio
async def test_off_topic_current_item_triggers_intervention(rust_state, t0):
    controller = _controller(MemoryStateStore(rust_state), t0)

    off = await controller.evaluate([RUST_TITLE], current_item=CAT_TITLE)
    on = await controller.evaluate([], current_item=RUST_TITLE)

    assert off.intervene is True
    assert on.intervene is False


@pytest.mark.asyncio
async def test_break_phase_suspends_classification(rust_state, t0, fake_client):
    record = start_timer(25, 10, t0)
    state = replace(rust_state, timer_enabled=True, timer_state=record)
    store = MemoryStateStore(state, credential="key")
    now = t0 + timedelta(minutes=26)

    result = await _controller(store, now, client=fake_client).evaluate([RUST_TITLE], CAT_TITLE)

    assert result.action is FilterAction.SUSPEND
    assert result.timer.phase is TimerPhase.BREAK
    assert result.timer.end_time == now + timedelta(minutes=10)
    assert result.verdicts == {}
    assert result.intervene is False
    assert fake_client.request_count == 0

    persisted = await store.load_state()
    assert persisted.timer_state == result.timer
    assert result.timer_persisted is True


@pytest.mark.asyncio
async def test_unexpired_timer_is_not_rewritten(rust_state, t0):
    state = replace(rust_state, timer_enabled=True, timer_state=start_timer(25, 10, t0))
    store = MemoryStateStore(state)

    result = await _controller(store, t0 + timedelta(minutes=5)).evaluate([RUST_TITLE])

    assert result.action is FilterAction.FILTER
    assert result.timer.phase is TimerPhase.FOCUS
    assert store.write_count == 0


@pytest.mark.asyncio
async def test_disabled_timer_record_is_ignored(rust_state, t0):
    state = replace(rust_state, timer_enabled=False, timer_state=start_timer(25, 10, t0))
    store = MemoryStateStore(state)

    result = await _controller(store, t0 + timedelta(hours=1)).evaluate([RUST_TITLE])

    assert result.action is FilterAction.FILTER
    assert result.timer is None
    assert store.write_count == 0


@pytest.mark.asyncio
async def test_repeated_evaluation_is_idempotent(rust_state, t0):
    state = replace(rust_state, timer_enabled=True, timer_state=start_timer(25, 10, t0))
    store = MemoryStateStore(state)
    controller = _controller(store, t0 + timedelta(minutes=30))

    first = await controller.evaluate([RUST_TITLE])
    second = await controller.evaluate([RUST_TITLE])

    assert first.timer == second.timer
    assert store.write_count == 1


@pytest.mark.asyncio
async def test_overlapping_evaluations_agree_on_advanced_timer(rust_state, t0):
    state = replace(rust_state, timer_enabled=True, timer_state=start_timer(25, 10, t0))
    store = MemoryStateStore(state)
    now = t0 + timedelta(minutes=26)
    controller = _controller(store, now)

    first, second = await asyncio.gather(
        controller.evaluate([RUST_TITLE]),
        controller.evaluate([RUST_TITLE]),
    )

    assert first.timer == second.timer
    assert first.timer.phase is TimerPhase.BREAK
    assert first.timer.end_time == now + timedelta(minutes=10)
    assert first.action is second.action is FilterAction.SUSPEND
    assert (await store.load_state()).timer_state == first.timer
    assert 1 <= store.write_count <= 2


@pytest.mark.asyncio
async def test_persist_failure_does_not_abort_cycle(rust_state, t0):
    record = start_timer(25, 10, t0)
    store = MemoryStateStore(replace(rust_state, timer_enabled=True, timer_state=record))
    store.save_state = AsyncMock(side_effect=OSError("disk full"))

    result = await _controller(store, t0 + timedelta(minutes=26)).evaluate([RUST_TITLE])

    assert result.action is FilterAction.SUSPEND
    assert result.timer_persisted is False


@pytest.mark.asyncio
async def test_credential_selects_llm_mode(rust_state, t0, make_client):
    client = make_client(answer="off-topic")
    store = MemoryStateStore(rust_state, credential="stored-key")

    result = await _controller(store, t0, client=client).evaluate([RUST_TITLE])

    assert result.verdicts == {RUST_TITLE: False}
    assert client.prompts[0][1] == "stored-key"


@pytest.mark.asyncio
async def test_fallback_credential_used_when_store_is_empty(rust_state, t0, make_client):
    client = make_client(answer="on-topic")
    store = MemoryStateStore(rust_state)

    result = await _controller(store, t0, client=client, fallback="env-key").evaluate([CAT_TITLE])

    assert result.verdicts == {CAT_TITLE: True}
    assert client.prompts[0][1] == "env-key"


@pytest.mark.asyncio
async def test_current_item_reuses_candidate_verdict(rust_state, t0, fake_client):
    store = MemoryStateStore(rust_state, credential="key")

    await _controller(store, t0, client=fake_client).evaluate([RUST_TITLE], current_item=RUST_TITLE)

    assert fake_client.request_count == 1
