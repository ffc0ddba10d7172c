"""Console and logging configuration module for telnet sessions.

Log records are rendered by Rich on a shared console. While a batch run is
in progress a Live display keeps its progress bars pinned to the bottom of
the terminal and log lines are printed above them.

All progress state is guarded by a re-entrant lock because session tasks
update their bars concurrently.
"""

from __future__ import annotations

import logging
import threading
import time
from logging import INFO, getLogger
from typing import Any

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

# Log output goes to stderr so command output on stdout stays clean
console = Console(stderr=True)

progress_lock = threading.RLock()
progress = Progress(
    SpinnerColumn(),
    TextColumn("[bold blue]{task.description}"),
    BarColumn(),
    MofNCompleteColumn(),
    TimeElapsedColumn(),
    console=console,
    expand=True,
)
live_display = Live(
    progress,
    console=console,
    refresh_per_second=10,
    transient=False,
    auto_refresh=False,
)

# Caller task names mapped to Rich task IDs
_active_tasks: dict[str, TaskID] = {}


class LiveDisplayHandler(RichHandler):
    """Rich log handler that prints above the live progress bars."""

    def emit(self, record: logging.LogRecord) -> None:
        """Render a record, refreshing the live display around it if active."""
        with progress_lock:
            rendered = self.render(record)
            if live_display.is_started:
                live_display.refresh()
                console.print(rendered)
                live_display.refresh()
            else:
                console.print(rendered)


logging.basicConfig(
    level=INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[LiveDisplayHandler(console=console, rich_tracebacks=True, show_time=True)],
    force=True,
)

log = getLogger("telnet_session")


def start_live_display() -> None:
    """Start the live display unless it is already running."""
    with progress_lock:
        if not live_display.is_started:
            live_display.start()


def stop_live_display() -> None:
    """Stop the live display once no progress task is left."""
    with progress_lock:
        if live_display.is_started and not _active_tasks:
            live_display.stop()


def create_progress(description: str, total: int = 100, task_id: str | None = None) -> str:
    """Add a progress bar, starting the live display if needed.

    Args:
        description: Text shown next to the bar
        total: Number of steps to completion
        task_id: Name for the task, generated from the clock if omitted

    Returns:
        The task name to pass to update_progress and complete_progress
    """
    with progress_lock:
        start_live_display()
        if task_id is None:
            task_id = f"task_{time.time()}"
        _active_tasks[task_id] = progress.add_task(description, total=total)
        live_display.refresh()
        return task_id


def update_progress(
    task_id: str,
    advance: float | None = None,
    completed: float | None = None,
    description: str | None = None,
    **kwargs: Any,
) -> None:
    """Advance or relabel a progress bar.

    Args:
        task_id: Task name returned by create_progress
        advance: Steps to add
        completed: Absolute number of completed steps
        description: New text for the bar
        **kwargs: Passed through to Progress.update
    """
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to update non-existent progress task: %s", task_id)
            return

        changes = {
            key: value
            for key, value in (("advance", advance), ("completed", completed), ("description", description))
            if value is not None
        }
        progress.update(_active_tasks[task_id], **changes, **kwargs)
        if live_display.is_started:
            live_display.refresh()


def complete_progress(task_id: str, description: str | None = None) -> None:
    """Fill a progress bar and forget it, stopping the display after the last one.

    Args:
        task_id: Task name returned by create_progress
        description: Final text for the bar
    """
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to complete non-existent progress task: %s", task_id)
            return

        rich_task = _active_tasks.pop(task_id)
        if description is not None:
            progress.update(rich_task, description=description)
        total = next((task.total for task in progress.tasks if task.id == rich_task), None)
        progress.update(rich_task, completed=total)

        if live_display.is_started:
            live_display.refresh()
        if not _active_tasks:
            stop_live_display()
