"""Projection of client state into rich renderables."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence
from rich.table import Table
from rich.text import Text
from .api import ApiError, TaskApiClient

logger = logging.getLogger(__name__)

PRIORITY_STYLE = {"high": "bold red", "medium": "yellow", "low": "green"}

EMPTY_STATE = {
    "completed": "No completed tasks yet",
    "active": "No active tasks",
    "all": "No tasks yet, add one to get started!",
}


@dataclass(frozen=True)
class Summary:
    total: int
    completed: int
    source: str  # "server" or "local"


def filter_tasks(tasks: Sequence[Dict[str, Any]], task_filter: str) -> List[Dict[str, Any]]:
    if task_filter == "active":
        return [task for task in tasks if not task["completed"]]
    if task_filter == "completed":
        return [task for task in tasks if task["completed"]]
    return list(tasks)


def empty_state_message(task_filter: str) -> str:
    return EMPTY_STATE.get(task_filter, EMPTY_STATE["all"])


def render_task_list(tasks: Sequence[Dict[str, Any]], task_filter: str):
    """Numbered table of the visible tasks, or the empty-state message"""
    visible = filter_tasks(tasks, task_filter)
    if not visible:
        icon = "🎉" if task_filter == "completed" else "📋"
        return Text(f"{icon} {empty_state_message(task_filter)}", style="dim")

    table = Table(show_header=True, header_style="bold cyan", expand=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("", width=3)
    table.add_column("Priority")
    table.add_column("Task")

    for number, task in enumerate(visible, 1):
        done = task["completed"]
        table.add_row(
            str(number),
            "[green]✔[/green]" if done else "☐",
            Text(task["priority"], style=PRIORITY_STYLE.get(task["priority"], "")),
            Text(task["text"], style="strike dim" if done else ""),
        )
    return table


async def summarize(api: TaskApiClient, tasks: Sequence[Dict[str, Any]]) -> Summary:
    """Ask the server for stats, falling back to counting the local list"""
    try:
        stats = await api.get_stats()
        return Summary(total=stats["total"], completed=stats["completed"], source="server")
    except ApiError as e:
        logger.info("Stats unavailable, counting locally: %s", e)
        completed = sum(1 for task in tasks if task["completed"])
        return Summary(total=len(tasks), completed=completed, source="local")


def render_summary(summary: Summary) -> Text:
    return Text(f"{summary.total} total · {summary.completed} completed", style="bold")
