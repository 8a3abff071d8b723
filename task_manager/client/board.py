"""
Client state controller for the task board.

TaskBoard keeps the signed-in user's tasks in memory, sends every change to
the API and patches the local list with the row the server returns. The three
status columns are filters over that one list. Task operations log their
failures and leave local state untouched; the login and register forms keep
the failure text for display instead.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from task_manager.models import STATUS_ORDER, TaskStatus

from .api import ApiError, TaskApiClient
from .session import UserSession

logger = logging.getLogger(__name__)

# Where the controller sends the user next
LOGIN = "login"
BOARD = "board"

EMPTY_CAPTIONS = {
    TaskStatus.TODO: "No tasks to do",
    TaskStatus.IN_PROGRESS: "No tasks in progress",
    TaskStatus.DONE: "No completed tasks",
}

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def format_due(value: Any) -> str:
    if not value:
        return "No due date"
    try:
        d = date.fromisoformat(str(value)[:10])
    except ValueError:
        return str(value)
    return f"{d:%b} {d.day}, {d.year}"


_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
_env.filters["due"] = format_due


class LoginForm:
    def __init__(self, api: TaskApiClient, session: UserSession) -> None:
        self.api = api
        self.session = session
        self.error = ""

    def submit(self, username: str, password: str) -> bool:
        """Start the session on success; otherwise keep the error for display."""
        self.error = ""
        try:
            identity = self.api.login(username, password)
        except ApiError as e:
            self.error = e.message if e.status_code else "Login failed. Please try again."
            return False
        self.session.start(identity)
        return True


class RegisterForm:
    def __init__(self, api: TaskApiClient) -> None:
        self.api = api
        self.error = ""

    def submit(self, username: str, password: str, confirm_password: str) -> bool:
        """True when the account exists and the user should go on to log in."""
        self.error = ""
        if password != confirm_password:
            self.error = "Passwords don't match"
            return False
        try:
            self.api.register(username, password)
        except ApiError as e:
            self.error = e.message if e.status_code else "Registration failed. Please try again."
            return False
        return True


class TaskBoard:
    def __init__(self, api: TaskApiClient, session: UserSession) -> None:
        self.api = api
        self.session = session
        self.tasks: list[dict[str, Any]] = []
        self.is_loading = True
        self.is_form_open = False
        self.editing_task: dict[str, Any] | None = None

    # ---- lifecycle ----

    def mount(self) -> str:
        if not self.session.is_authenticated:
            return LOGIN
        self.load()
        return BOARD

    def load(self) -> None:
        self.is_loading = True
        try:
            self.tasks = self.api.list_tasks(self.session.user_id)
        except ApiError:
            logger.exception("Error fetching tasks")
        finally:
            self.is_loading = False

    def logout(self) -> str:
        self.session.end()
        self.tasks = []
        self.is_loading = True
        self.close_form()
        return LOGIN

    # ---- form ----

    def open_create_form(self) -> None:
        self.editing_task = None
        self.is_form_open = True

    def open_edit_form(self, task: dict[str, Any]) -> None:
        self.editing_task = task
        self.is_form_open = True

    def close_form(self) -> None:
        self.is_form_open = False
        self.editing_task = None

    def submit_form(self, data: dict[str, Any]) -> bool:
        """Create when no task is being edited, otherwise fully update it."""
        if self.editing_task is None:
            return self._create(data)
        return self._update(self.editing_task["id"], data)

    def _create(self, data: dict[str, Any]) -> bool:
        try:
            created = self.api.create_task({**data, "user_id": self.session.user_id})
        except ApiError:
            logger.exception("Error creating task")
            return False
        self.tasks = [*self.tasks, created]
        self.close_form()
        return True

    def _update(self, task_id: int, data: dict[str, Any]) -> bool:
        try:
            updated = self.api.update_task(task_id, {**data, "user_id": self.session.user_id})
        except ApiError:
            logger.exception("Error updating task")
            return False
        self._replace(updated)
        self.close_form()
        return True

    # ---- task actions ----

    def delete_task(self, task_id: int, confirm: bool = True) -> bool:
        if not confirm:
            return False
        try:
            self.api.delete_task(task_id)
        except ApiError:
            logger.exception("Error deleting task")
            return False
        self.tasks = [t for t in self.tasks if t["id"] != task_id]
        return True

    def set_status(self, task_id: int, status: TaskStatus | str) -> bool:
        """Re-send the locally held row whole, with only its status changed."""
        task = next((t for t in self.tasks if t["id"] == task_id), None)
        if task is None:
            return False
        payload = {**task, "status": TaskStatus(status).value, "user_id": self.session.user_id}
        try:
            updated = self.api.update_task(task_id, payload)
        except ApiError:
            logger.exception("Error updating task status")
            return False
        self._replace(updated)
        return True

    def _replace(self, row: dict[str, Any]) -> None:
        self.tasks = [row if t["id"] == row["id"] else t for t in self.tasks]

    # ---- view ----

    def column(self, status: TaskStatus | str) -> list[dict[str, Any]]:
        wanted = TaskStatus(status).value
        return [t for t in self.tasks if t.get("status") == wanted]

    def columns(self) -> list[tuple[TaskStatus, list[dict[str, Any]]]]:
        return [(status, self.column(status)) for status in STATUS_ORDER]

    def render(self) -> str:
        template = _env.get_template("board.txt")
        return template.render(
            username=self.session.username,
            is_loading=self.is_loading,
            columns=[
                (status.value, EMPTY_CAPTIONS[status], items)
                for status, items in self.columns()
            ],
        )
