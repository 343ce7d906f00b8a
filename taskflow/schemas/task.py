# taskflow/schemas/task.py
import math
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from taskflow.core.clock import as_utc, utcnow
from taskflow.models.task import Task
from taskflow.schemas.common import CamelModel


class TaskCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[int] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None


class TaskUpdate(TaskCreate):
    """Partial update; only fields present in the body are applied."""

    completed: Optional[bool] = None


class TaskRead(CamelModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str
    category: str
    priority: int
    due_date: Optional[datetime]
    completed: bool
    completed_at: Optional[datetime]
    tags: List[str]
    created_at: datetime
    updated_at: datetime
    days_left: Optional[int] = None

    @classmethod
    def from_model(cls, task: Task) -> "TaskRead":
        return cls(
            id=task.task_id,
            owner_id=task.user_id,
            title=task.title,
            description=task.description or "",
            category=task.category,
            priority=task.priority,
            due_date=as_utc(task.due_date) if task.due_date else None,
            completed=task.completed,
            completed_at=as_utc(task.completed_at) if task.completed_at else None,
            tags=list(task.tags or []),
            created_at=as_utc(task.created_at),
            updated_at=as_utc(task.updated_at),
            days_left=_days_left(task),
        )


def _days_left(task: Task) -> Optional[int]:
    if task.due_date is None or task.completed:
        return None
    seconds = (task.due_date - utcnow()).total_seconds()
    return math.ceil(seconds / 86400)


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class TaskStats(CamelModel):
    total: int
    completed: int
    pending: int
    completion_rate: int
