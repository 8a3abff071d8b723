from datetime import datetime, date, timezone
from typing import Optional
from enum import Enum

from pydantic import field_validator
from sqlalchemy import Column, Enum as SAEnum
from sqlmodel import SQLModel, Field


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


# Board column order
STATUS_ORDER = (TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=_utcnow)


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    # Stored by value ("To Do"), not by member name
    status: TaskStatus = Field(
        default=TaskStatus.TODO,
        sa_column=Column(
            SAEnum(
                TaskStatus,
                name="task_status",
                native_enum=False,
                values_callable=_enum_values,
                length=20,
            ),
            nullable=False,
        ),
    )
    due_date: Optional[date] = None
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow)


# --- Request / response bodies ---

def _blank_to_none(value):
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


class TaskPayload(SQLModel):
    """
    Body of PUT /api/tasks/{id}.

    Everything is optional at the schema level so that a missing title reaches
    the service and is reported as a validation error with a readable message.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None

    @field_validator("description", "status", "due_date", mode="before")
    @classmethod
    def blank_is_missing(cls, value):
        return _blank_to_none(value)


class TaskCreate(TaskPayload):
    """Body of POST /api/tasks."""
    user_id: Optional[int] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def blank_user_is_missing(cls, value):
        return _blank_to_none(value)


class TaskRead(SQLModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    due_date: Optional[date] = None
    user_id: int
    created_at: datetime


class Credentials(SQLModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserRead(SQLModel):
    id: int
    username: str
