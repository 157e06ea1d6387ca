import argparse
import asyncio
import logging
import shlex
from typing import Any, Dict, List, Optional
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.text import Text
from ..logging_setup import setup_logging
from .api import TaskApiClient, default_api_url
from .render import filter_tasks, render_summary, render_task_list, summarize
from .state import FILTERS, PRIORITIES, TaskListState

logger = logging.getLogger(__name__)

HELP = """\
[bold]Commands[/bold]
  add <text>                     add a task with the current priority
  toggle <n>                     mark task n done / not done
  edit <n> \\[text]                change the text of task n
  delete <n>                     delete task n
  clear                          delete all completed tasks
  filter all|active|completed    change the list view
  priority low|medium|high       priority for new tasks
  refresh                        reload from the server
  help                           show this help
  quit                           leave
"""


class TodoShell:
    """Interactive prompt loop: one command, one API round trip, one redraw."""

    def __init__(self, api: TaskApiClient, console: Optional[Console] = None):
        self.console = console or Console()
        self.api = api
        self.state = TaskListState(api, alert=self.alert, confirm=self.confirm)
        self.should_exit = False

    def alert(self, message: str) -> None:
        # Messages carry user input and server text, never markup
        self.console.print(Text(f"⚠ {message}", style="bold red"))

    def confirm(self, question: str) -> bool:
        return Confirm.ask(question, console=self.console, default=False)

    def visible_tasks(self) -> List[Dict[str, Any]]:
        return filter_tasks(self.state.tasks, self.state.current_filter)

    def task_at(self, number: str) -> Optional[Dict[str, Any]]:
        """Task shown at 1-based row ``number`` in the current view"""
        visible = self.visible_tasks()
        if not number.isdigit() or not 1 <= int(number) <= len(visible):
            self.alert(f"No task number {number}")
            return None
        return visible[int(number) - 1]

    async def redraw(self) -> None:
        self.console.print()
        self.console.print(
            f"[cyan]View:[/cyan] {self.state.current_filter}   "
            f"[cyan]New task priority:[/cyan] {self.state.current_priority}"
        )
        self.console.print(render_task_list(self.state.tasks, self.state.current_filter))
        self.console.print(render_summary(await summarize(self.api, self.state.tasks)))

    async def handle(self, line: str) -> bool:
        """Run one command line; returns True when the view should be redrawn"""
        try:
            parts = shlex.split(line)
        except ValueError:
            parts = line.split()
        if not parts:
            return False
        command, args = parts[0].lower(), parts[1:]

        if command in ("quit", "exit", "q"):
            self.should_exit = True
            return False
        if command == "help":
            self.console.print(HELP)
            return False
        if command == "add":
            await self.state.add_task(" ".join(args))
            return True
        if command == "refresh":
            await self.state.load_tasks()
            return True
        if command == "clear":
            await self.state.clear_completed()
            return True
        if command == "filter" and len(args) == 1 and args[0] in FILTERS:
            await self.state.set_filter(args[0])
            return True
        if command == "priority" and len(args) == 1 and args[0] in PRIORITIES:
            self.state.set_priority(args[0])
            return True
        if command in ("toggle", "edit", "delete") and args:
            task = self.task_at(args[0])
            if task is None:
                return False
            if command == "toggle":
                await self.state.toggle_task(task["id"])
            elif command == "delete":
                await self.state.delete_task(task["id"])
            else:
                new_text = " ".join(args[1:]) or Prompt.ask(
                    "Edit task", console=self.console, default=task["text"]
                )
                await self.state.edit_task(task["id"], new_text)
            return True

        self.alert(f"Unknown command: {line.strip()} (type 'help')")
        return False

    async def run(self) -> None:
        self.console.print("[bold cyan]Todo[/bold cyan]  type 'help' for commands")
        await self.state.load_tasks()
        await self.redraw()
        while not self.should_exit:
            try:
                line = Prompt.ask("[bold]>[/bold]", console=self.console)
            except (EOFError, KeyboardInterrupt):
                break
            if await self.handle(line):
                await self.redraw()


async def _main(api_url: str) -> None:
    async with TaskApiClient(api_url) as api:
        await TodoShell(api).run()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="todo-client", description="Terminal client for the Todo API.")
    parser.add_argument("--api-url", default=default_api_url(), help="Base URL of the API (default: %(default)s)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: %(default)s)")
    ns = parser.parse_args(argv)

    setup_logging(ns.log_level.upper())
    asyncio.run(_main(ns.api_url))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
