"""Tests for CLI commands: focus, key, timer, status, check."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from focustube.cli.main import app
from focustube.core.config import Config

runner = CliRunner()


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.delenv("FOCUSTUBE_GEMINI_API_KEY", raising=False)
    cfg = Config(
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        config_dir=tmp_path / "config",
    )
    with patch("focustube.cli.main.get_config", return_value=cfg):
        yield cfg


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("focus", "key", "timer", "status", "check", "watch"):
        assert command in result.stdout


def test_focus_then_check(config):
    result = runner.invoke(app, ["focus", "learn rust ownership", "--role", "programmer"])
    assert result.exit_code == 0
    assert "Focus saved" in result.stdout

    result = runner.invoke(
        app,
        ["check", "Rust Ownership Tutorial", "Funny Cat Compilation", "--current", "Funny Cat Compilation"],
    )
    assert result.exit_code == 0
    assert "on-topic" in result.stdout
    assert "hidden" in result.stdout
    assert "Stay on your focus goal?" in result.stdout


def test_focus_rejects_blank_task(config):
    result = runner.invoke(app, ["focus", "   "])
    assert result.exit_code == 1
    assert "describe what you're working on" in result.stdout


def test_focus_rejects_unknown_role(config):
    result = runner.invoke(app, ["focus", "calculus", "--role", "wizard"])
    assert result.exit_code != 0


def test_check_without_task_reports_disabled(config):
    result = runner.invoke(app, ["check", "Anything at all"])
    assert result.exit_code == 0
    assert "filtering disabled" in result.stdout


def test_timer_toggle_and_status(config):
    runner.invoke(app, ["focus", "learn rust ownership", "--timer"])

    started = runner.invoke(app, ["timer", "--focus-minutes", "30"])
    assert started.exit_code == 0
    assert "Timer started" in started.stdout

    status = runner.invoke(app, ["status"])
    assert status.exit_code == 0
    assert "learn rust ownership" in status.stdout
    assert "Focus: 29:" in status.stdout or "Focus: 30:00" in status.stdout

    stopped = runner.invoke(app, ["timer"])
    assert "Timer stopped" in stopped.stdout


def test_key_set_and_clear(config):
    result = runner.invoke(app, ["key", "AIza-test"])
    assert "API key saved" in result.stdout

    result = runner.invoke(app, ["key"])
    assert "API key cleared" in result.stdout
