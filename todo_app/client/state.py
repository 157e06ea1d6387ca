"""Client-side task list state.

``TaskListState`` owns everything the client knows: the tasks last received
from the API, the priority new tasks are created with and the active filter.
Every mutation goes to the API first and is followed by a full reload of the
filtered list; nothing is patched locally. A failed request is reported via
``alert`` and leaves ``tasks`` exactly as it was.
"""
import logging
from typing import Any, Callable, Dict, List, Optional
from .api import ApiError, TaskApiClient

logger = logging.getLogger(__name__)

PRIORITIES = ("low", "medium", "high")
FILTERS = ("all", "active", "completed")

Alert = Callable[[str], None]
Confirm = Callable[[str], bool]


def _log_alert(message: str) -> None:
    logger.error(message)


def _always_confirm(question: str) -> bool:
    return True


class TaskListState:
    def __init__(
        self,
        api: TaskApiClient,
        alert: Alert = _log_alert,
        confirm: Confirm = _always_confirm,
    ):
        self.api = api
        self.alert = alert
        self.confirm = confirm
        self.tasks: List[Dict[str, Any]] = []
        self.current_priority = "medium"
        self.current_filter = "all"

    def find(self, task_id: str) -> Optional[Dict[str, Any]]:
        return next((task for task in self.tasks if task["id"] == task_id), None)

    async def _run(self, failure: str, action) -> bool:
        """Await ``action`` then reload; on ApiError alert and keep the old list"""
        try:
            await action
        except ApiError as e:
            logger.warning("%s: %s", failure, e)
            self.alert(f"{failure}: {e.message}")
            return False
        return await self.load_tasks()

    async def load_tasks(self) -> bool:
        try:
            self.tasks = await self.api.list_tasks(self.current_filter)
        except ApiError as e:
            logger.warning("Loading tasks failed: %s", e)
            self.alert(f"Could not load tasks, check the connection: {e.message}")
            return False
        return True

    async def add_task(self, text: str) -> bool:
        text = text.strip()
        if not text:
            self.alert("Please enter a task")
            return False
        return await self._run("Adding task failed", self.api.create_task(text, self.current_priority))

    def set_priority(self, priority: str) -> None:
        if priority not in PRIORITIES:
            raise ValueError(f"Priority must be one of: {', '.join(PRIORITIES)}")
        self.current_priority = priority

    async def set_filter(self, task_filter: str) -> bool:
        if task_filter not in FILTERS:
            raise ValueError(f"Filter must be one of: {', '.join(FILTERS)}")
        self.current_filter = task_filter
        return await self.load_tasks()

    async def toggle_task(self, task_id: str) -> bool:
        task = self.find(task_id)
        if task is None:
            return False
        return await self._run(
            "Updating task failed",
            self.api.update_task(task_id, completed=not task["completed"]),
        )

    async def edit_task(self, task_id: str, new_text: Optional[str]) -> bool:
        """Replace a task's text; None or blank text means the edit was cancelled"""
        if self.find(task_id) is None:
            return False
        if new_text is None or not new_text.strip():
            return False
        return await self._run("Updating task failed", self.api.update_task(task_id, text=new_text.strip()))

    async def delete_task(self, task_id: str) -> bool:
        if not self.confirm("Delete this task?"):
            return False
        return await self._run("Deleting task failed", self.api.delete_task(task_id))

    async def clear_completed(self) -> bool:
        if not self.confirm("Clear all completed tasks?"):
            return False
        return await self._run("Clearing tasks failed", self.api.clear_completed())
