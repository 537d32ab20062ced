"""CLI commands for FocusTube using Typer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from focustube.ai.llm_classifier import create_llm_classifier
from focustube.core.config import Config, get_config
from focustube.core.controller import EvaluationResult, FilterAction, SessionController
from focustube.core.dispatcher import EvaluationDispatcher
from focustube.focus.engine import ClassificationEngine
from focustube.focus.profile import Role, Strictness
from focustube.focus.timer import format_time_remaining, utcnow
from focustube.storage.database import init_database
from focustube.storage.state_store import SQLiteStateStore

app = typer.Typer(
    name="focustube",
    help="Keep your video feed aligned with what you're working on.",
    add_completion=False,
)

console = Console()


def setup_logging(log_level: str, log_file: Path | None = None) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    # Reduce noise from external libraries
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _open_store(config: Config) -> SQLiteStateStore:
    config.ensure_directories()
    db = await init_database(config.db_path)
    return SQLiteStateStore(db)


def _build_controller(config: Config, store: SQLiteStateStore) -> SessionController:
    engine = ClassificationEngine(create_llm_classifier(config))
    return SessionController(store, engine, fallback_credential=config.gemini_api_key)


def _render_result(result: EvaluationResult) -> None:
    """Print one evaluation result."""
    if result.timer:
        remaining = format_time_remaining(result.timer.end_time)
        color = "green" if not result.on_break else "yellow"
        console.print(f"[{color}]{result.timer.phase.display_name}: {remaining}[/{color}]")

    if result.action is FilterAction.SUSPEND:
        console.print("[yellow]On break - filtering paused[/yellow]")
        return
    if result.action is FilterAction.DISABLED:
        console.print("[dim]No focus task set - filtering disabled[/dim]")
        return

    if result.verdicts:
        table = Table(title="Relevance")
        table.add_column("Title")
        table.add_column("Verdict")
        for title, relevant in result.verdicts.items():
            verdict = "[green]on-topic[/green]" if relevant else "[red]hidden[/red]"
            table.add_row(title, verdict)
        console.print(table)

    if result.intervene:
        console.print(
            f"[bold red]Stay on your focus goal?[/bold red] "
            f"{result.current_item!r} looks unrelated to your task."
        )


@app.command()
def focus(
    task: str = typer.Argument(..., help="What you're working on"),
    role: Role = typer.Option(Role.OTHER, "--role", "-r", help="Your role"),
    strictness: Strictness = typer.Option(Strictness.MEDIUM, "--strictness", "-s", help="Filter strictness"),
    timer: bool = typer.Option(False, "--timer/--no-timer", help="Enable focus/break timer"),
    focus_minutes: int = typer.Option(None, "--focus-minutes", help="Focus phase length"),
    break_minutes: int = typer.Option(None, "--break-minutes", help="Break phase length"),
) -> None:
    """Set the task your feed should stay focused on."""
    config = get_config()

    async def _save():
        store = await _open_store(config)
        try:
            return await store.save_focus(
                task,
                role=role.value,
                strictness=strictness.value,
                timer_enabled=timer,
                focus_duration=focus_minutes or config.timer.focus_minutes,
                break_duration=break_minutes or config.timer.break_minutes,
            )
        finally:
            await store.db.close()

    try:
        state = asyncio.run(_save())
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Focus saved:[/green] {state.task} ({state.role}, {state.strictness})")


@app.command()
def key(
    value: str = typer.Argument("", help="API key for the remote classifier; empty clears it"),
) -> None:
    """Store or clear the remote classifier API key."""
    config = get_config()

    async def _set():
        store = await _open_store(config)
        try:
            await store.set_credential(value.strip())
        finally:
            await store.db.close()

    asyncio.run(_set())
    if value.strip():
        console.print("[green]API key saved - titles will be classified by the remote model[/green]")
    else:
        console.print("[yellow]API key cleared - using keyword matching[/yellow]")


@app.command()
def timer(
    focus_minutes: int = typer.Option(None, "--focus-minutes", help="Focus phase length"),
    break_minutes: int = typer.Option(None, "--break-minutes", help="Break phase length"),
) -> None:
    """Start the focus timer, or stop it if it is running."""
    config = get_config()

    async def _toggle():
        store = await _open_store(config)
        try:
            return await store.toggle_timer(
                focus_minutes or config.timer.focus_minutes,
                break_minutes or config.timer.break_minutes,
            )
        finally:
            await store.db.close()

    record = asyncio.run(_toggle())
    if record is None:
        console.print("[yellow]Timer stopped[/yellow]")
    else:
        console.print(f"[green]Timer started:[/green] Focus: {format_time_remaining(record.end_time)}")


@app.command()
def status() -> None:
    """Show the current focus task and timer phase."""
    config = get_config()

    async def _evaluate():
        store = await _open_store(config)
        try:
            state = await store.load_state()
            result = await _build_controller(config, store).evaluate()
            return state, result
        finally:
            await store.db.close()

    state, result = asyncio.run(_evaluate())
    if state and state.task:
        console.print(f"Task: [bold]{state.task}[/bold] ({state.role or 'unspecified'}, {state.strictness or 'medium'})")
    _render_result(result)


@app.command()
def check(
    titles: list[str] = typer.Argument(..., help="Video titles to classify"),
    current: str = typer.Option(None, "--current", "-c", help="Title currently being watched"),
) -> None:
    """Classify titles against the current focus task."""
    config = get_config()
    setup_logging(config.log_level)

    async def _evaluate():
        store = await _open_store(config)
        try:
            return await _build_controller(config, store).evaluate(titles, current)
        finally:
            await store.db.close()

    _render_result(asyncio.run(_evaluate()))


class ChangedResultPrinter:
    """Render evaluation results, skipping one identical to the last shown."""

    def __init__(self, render=_render_result):
        self._render = render
        self._last_signature: tuple | None = None

    @staticmethod
    def signature(result: EvaluationResult) -> tuple:
        return (
            result.action,
            result.timer.phase if result.timer else None,
            tuple(result.verdicts.items()),
            result.intervene,
        )

    def __call__(self, result: EvaluationResult) -> bool:
        # Ticks mostly repeat the previous result
        signature = self.signature(result)
        if signature == self._last_signature:
            return False
        self._last_signature = signature
        self._render(result)
        return True


async def poll_titles_file(path: Path, dispatcher: EvaluationDispatcher, interval: float) -> None:
    """Request an evaluation whenever the titles file appears, changes or disappears."""
    last_mtime = None
    while True:
        mtime = path.stat().st_mtime_ns if path.exists() else None
        if mtime != last_mtime:
            last_mtime = mtime
            dispatcher.request("content")
        await asyncio.sleep(interval)


@app.command()
def watch(
    titles_file: Path = typer.Argument(..., help="File with one title per line; the first line is the current item"),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """Re-evaluate a title list on every tick, storage change and file change."""
    config = get_config()
    setup_logging(log_level, config.log_dir / "focustube.log")

    async def _items():
        lines = [line.strip() for line in titles_file.read_text().splitlines() if line.strip()]
        return lines, (lines[0] if lines else None)

    async def _run():
        store = await _open_store(config)
        dispatcher = EvaluationDispatcher(
            _build_controller(config, store),
            items=_items,
            debounce_seconds=config.dispatcher.debounce_ms / 1000,
        )
        dispatcher.on_result = ChangedResultPrinter()
        dispatcher.attach_store(store)
        await dispatcher.start(tick_seconds=config.timer.tick_seconds)
        dispatcher.request("startup")

        try:
            await poll_titles_file(titles_file, dispatcher, config.timer.tick_seconds)
        finally:
            await dispatcher.stop()
            await store.db.close()

    console.print("[green]Watching - press Ctrl+C to stop[/green]")
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")


if __name__ == "__main__":
    app()
