"""
Task service: CRUD over the tasks table, scoped by owning user.

Every function takes the request's Session first and performs exactly one
row operation. Failures are raised as task_manager.errors exceptions.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlmodel import Session, select

from .database import storage_errors
from .errors import NotFound, ValidationError
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


def _require_title(title: Optional[str]) -> None:
    if title is None or not str(title).strip():
        raise ValidationError("Title is required")


def _coerce_status(status) -> TaskStatus:
    if status is None:
        return TaskStatus.TODO
    try:
        return TaskStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"Status must be one of: {allowed}")


def list_tasks(session: Session, owner_id: Optional[int]) -> List[Task]:
    """Tasks of one owner by due date; undated tasks come first, ties by id."""
    if owner_id is None:
        raise ValidationError("user_id is required")

    with storage_errors(session):
        statement = (
            select(Task)
            .where(Task.user_id == owner_id)
            .order_by(Task.due_date.asc().nulls_first(), Task.id)
        )
        return list(session.exec(statement).all())


def get_task(session: Session, task_id: int) -> Task:
    with storage_errors(session):
        task = session.get(Task, task_id)
    if task is None:
        raise NotFound("Task not found")
    return task


def create_task(
    session: Session,
    owner_id: Optional[int],
    title: Optional[str],
    description: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    due_date: Optional[date] = None,
) -> Task:
    _require_title(title)
    if owner_id is None:
        raise ValidationError("user_id is required")

    task = Task(
        title=title,
        description=description,
        status=_coerce_status(status),
        due_date=due_date,
        user_id=owner_id,
    )
    with storage_errors(session):
        session.add(task)
        session.commit()
        session.refresh(task)

    logger.info("Task %s created for user %s", task.id, owner_id)
    return task


def update_task(
    session: Session,
    task_id: int,
    title: Optional[str],
    description: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    due_date: Optional[date] = None,
) -> Task:
    """Replace all four mutable fields; omitted ones fall back to their defaults."""
    _require_title(title)
    new_status = _coerce_status(status)

    with storage_errors(session):
        task = session.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")

        task.title = title
        task.description = description
        task.status = new_status
        task.due_date = due_date
        session.add(task)
        session.commit()
        session.refresh(task)

    logger.info("Task %s updated (status=%s)", task.id, task.status.value)
    return task


def delete_task(session: Session, task_id: int) -> dict:
    with storage_errors(session):
        task = session.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        session.delete(task)
        session.commit()

    logger.info("Task %s deleted", task_id)
    return {"message": "Task deleted successfully"}
