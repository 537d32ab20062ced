"""Tests for the watch command's file polling and change-only rendering."""

import asyncio
import contextlib
import os
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from focustube.cli.main import ChangedResultPrinter, poll_titles_file
from focustube.core.controller import EvaluationResult, FilterAction
from focustube.focus.timer import advance, start_timer


class TestChangedResultPrinter:
    def test_identical_results_render_once(self):
        rendered = []
        printer = ChangedResultPrinter(render=rendered.append)
        result = EvaluationResult(action=FilterAction.FILTER, verdicts={"Rust traits": True})

        assert printer(result) is True
        assert printer(EvaluationResult(action=FilterAction.FILTER, verdicts={"Rust traits": True})) is False
        assert rendered == [result]

    def test_changed_result_renders_again(self, t0):
        rendered = []
        printer = ChangedResultPrinter(render=rendered.append)
        focus = start_timer(25, 10, t0)

        printer(EvaluationResult(action=FilterAction.FILTER, timer=focus, verdicts={"Cats": False}))
        printer(EvaluationResult(action=FilterAction.FILTER, timer=focus, verdicts={"Cats": False}, intervene=True))
        printer(EvaluationResult(action=FilterAction.SUSPEND, timer=advance(focus, t0 + timedelta(minutes=26))))

        assert len(rendered) == 3

    def test_only_last_signature_is_remembered(self):
        rendered = []
        printer = ChangedResultPrinter(render=rendered.append)
        disabled = EvaluationResult(action=FilterAction.DISABLED)
        filtering = EvaluationResult(action=FilterAction.FILTER, verdicts={"Cats": False})

        for result in (disabled, filtering, disabled):
            printer(result)

        assert rendered == [disabled, filtering, disabled]


@pytest.mark.asyncio
async def test_file_changes_request_evaluations(tmp_path):
    titles = tmp_path / "titles.txt"
    dispatcher = MagicMock()
    poller = asyncio.create_task(poll_titles_file(titles, dispatcher, 0.01))
    try:
        await asyncio.sleep(0.05)
        assert dispatcher.request.call_count == 0

        titles.write_text("Rust traits\n")
        await asyncio.sleep(0.05)
        assert dispatcher.request.call_count == 1

        stat = titles.stat()
        os.utime(titles, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
        await asyncio.sleep(0.05)
        assert dispatcher.request.call_count == 2

        await asyncio.sleep(0.05)
        assert dispatcher.request.call_count == 2
    finally:
        poller.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await poller

    dispatcher.request.assert_called_with("content")
