"""
Task repository.

Every read and write is scoped to ``owner_id``. A task that belongs to
somebody else is indistinguishable from a missing one (``NotFound``), so the
API never leaks whether an id exists.

The bookkeeping the old schema hooks used to do (defaults, ``completed_at``,
``updated_at``) happens here, explicitly, right before each commit.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, List, Optional
from uuid import UUID

from sqlmodel import Session, col, func, select

from taskflow.core.clock import to_naive_utc, utcnow
from taskflow.core.errors import NotFound, ValidationError
from taskflow.models.task import (
    DEFAULT_PRIORITY,
    DESCRIPTION_MAX,
    PRIORITY_MAX,
    PRIORITY_MIN,
    TAG_MAX,
    TITLE_MAX,
    Category,
    Task,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
UPCOMING_DAYS = 3
MAX_QUERY_INT = 2**31 - 1

# 정렬 가능한 컬럼 (camelCase/snake_case 모두 허용). tags(JSON)는 제외
_SORTABLE = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "description": "description",
    "category": "category",
    "priority": "priority",
    "dueDate": "due_date",
    "completed": "completed",
    "completedAt": "completed_at",
}
_SORTABLE.update({v: v for v in list(_SORTABLE.values())})


def parse_task_id(raw: Any) -> UUID:
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except (TypeError, ValueError):
        raise ValidationError("invalid task id")


def _parse_int(raw: Any) -> Optional[int]:
    """Parse a query integer; values outside the DB's 32-bit range count as malformed."""
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    if abs(value) > MAX_QUERY_INT:
        return None
    return value


# ──────────────────────────────────────────────────────────────────────────────
# 조회 조건 / 페이지 요청
# ──────────────────────────────────────────────────────────────────────────────
@dataclass
class TaskFilter:
    completed: Optional[bool] = None
    category: Optional[str] = None
    priority: Optional[int] = None
    due_date: Optional[date] = None

    @classmethod
    def from_query(
        cls,
        completed: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> "TaskFilter":
        """Build a filter from raw query strings; unparseable values are ignored."""
        flt = cls()
        if completed is not None and completed.strip().lower() in ("true", "false"):
            flt.completed = completed.strip().lower() == "true"
        if category:
            flt.category = category.strip()
        if priority:
            flt.priority = _parse_int(priority)
        if due_date:
            try:
                flt.due_date = date.fromisoformat(due_date.strip()[:10])
            except ValueError:
                flt.due_date = None
        return flt

    def conditions(self, owner_id: UUID) -> list:
        """The single translation of this filter into SQL conditions."""
        conds = [col(Task.user_id) == owner_id]
        if self.completed is not None:
            conds.append(col(Task.completed).is_(self.completed))
        if self.category:
            conds.append(col(Task.category) == self.category)
        if self.priority is not None:
            conds.append(col(Task.priority) == self.priority)
        if self.due_date is not None:
            start = datetime.combine(self.due_date, datetime.min.time())
            conds.append(col(Task.due_date) >= start)
            conds.append(col(Task.due_date) < start + timedelta(days=1))
        return conds


@dataclass
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = "created_at"
    descending: bool = True

    @classmethod
    def from_query(
        cls,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> "PageRequest":
        page_num = _parse_int(page) if page is not None else None
        limit_num = _parse_int(limit) if limit is not None else None
        if not page_num or page_num < 1:
            page_num = DEFAULT_PAGE
        if not limit_num or limit_num < 1:
            limit_num = DEFAULT_LIMIT
        # OFFSET 도 정수 범위를 넘으면 잘못된 요청으로 보고 기본값
        if (page_num - 1) * limit_num > MAX_QUERY_INT:
            page_num, limit_num = DEFAULT_PAGE, DEFAULT_LIMIT
        return cls(
            page=page_num,
            limit=limit_num,
            sort_by=_SORTABLE.get((sort_by or "").strip(), "created_at"),
            descending=(sort_order or "desc").strip().lower() != "asc",
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class TaskPage:
    items: List[Task] = field(default_factory=list)
    total_items: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.limit) if self.limit else 0


# ──────────────────────────────────────────────────────────────────────────────
# 입력 검증
# ──────────────────────────────────────────────────────────────────────────────
def _clean_fields(fields: dict[str, Any], *, creating: bool) -> dict[str, Any]:
    """
    Validate and normalize task fields.

    On create every field gets its default; on update only keys present in
    ``fields`` are returned. All violations are reported together.
    """
    errors: list[str] = []
    out: dict[str, Any] = {}

    if creating or "title" in fields:
        title = (fields.get("title") or "").strip()
        if not title:
            errors.append("title is required")
        elif len(title) > TITLE_MAX:
            errors.append(f"title must be at most {TITLE_MAX} characters")
        else:
            out["title"] = title

    if creating or "description" in fields:
        description = (fields.get("description") or "").strip()
        if len(description) > DESCRIPTION_MAX:
            errors.append(f"description must be at most {DESCRIPTION_MAX} characters")
        else:
            out["description"] = description

    category = fields.get("category")
    if category is not None:
        values = [c.value for c in Category]
        if category not in values:
            errors.append(f"category must be one of {', '.join(values)}")
        else:
            out["category"] = category
    elif creating:
        out["category"] = Category.PERSONAL.value

    priority = fields.get("priority")
    if priority is not None:
        if isinstance(priority, bool) or not PRIORITY_MIN <= priority <= PRIORITY_MAX:
            errors.append(f"priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}")
        else:
            out["priority"] = priority
    elif creating:
        out["priority"] = DEFAULT_PRIORITY

    if creating or "due_date" in fields:
        due = fields.get("due_date")
        if due is None:
            out["due_date"] = None
        else:
            due = to_naive_utc(due)
            # 날짜 단위 비교: 오늘 마감은 허용
            if due.date() < utcnow().date():
                errors.append("due date must not be in the past")
            else:
                out["due_date"] = due

    if creating or "tags" in fields:
        tags = [t.strip() for t in (fields.get("tags") or []) if t and t.strip()]
        if any(len(t) > TAG_MAX for t in tags):
            errors.append(f"tags must be at most {TAG_MAX} characters each")
        else:
            out["tags"] = tags

    if not creating and fields.get("completed") is not None:
        out["completed"] = bool(fields["completed"])

    if errors:
        raise ValidationError.from_messages(errors)
    return out


def _apply_completion(task: Task, completed: bool, now: datetime) -> None:
    """Keep ``completed_at`` set iff ``completed`` is true."""
    if completed:
        if not task.completed or task.completed_at is None:
            task.completed_at = now
    else:
        task.completed_at = None
    task.completed = completed


# ──────────────────────────────────────────────────────────────────────────────
# Repository
# ──────────────────────────────────────────────────────────────────────────────
class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, owner_id: UUID, task_id: Any) -> Task:
        tid = parse_task_id(task_id)
        stmt = select(Task).where(col(Task.task_id) == tid, col(Task.user_id) == owner_id)
        task = self.db.exec(stmt).first()
        if task is None:
            raise NotFound("task not found")
        return task

    def create(self, owner_id: UUID, fields: dict[str, Any]) -> Task:
        values = _clean_fields(fields, creating=True)
        now = utcnow()
        task = Task(user_id=owner_id, created_at=now, updated_at=now, **values)
        _apply_completion(task, False, now)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def list(self, owner_id: UUID, flt: TaskFilter, page: PageRequest) -> TaskPage:
        conds = flt.conditions(owner_id)

        column = col(getattr(Task, page.sort_by))
        tiebreak = col(Task.task_id)
        order = (column.desc(), tiebreak.desc()) if page.descending else (column.asc(), tiebreak.asc())

        stmt = select(Task).where(*conds).order_by(*order).offset(page.offset).limit(page.limit)
        count_stmt = select(func.count()).select_from(Task).where(*conds)

        items = list(self.db.exec(stmt).all())
        total = self.db.exec(count_stmt).one()
        return TaskPage(items=items, total_items=total, page=page.page, limit=page.limit)

    def get(self, owner_id: UUID, task_id: Any) -> Task:
        return self._find(owner_id, task_id)

    def update(self, owner_id: UUID, task_id: Any, fields: dict[str, Any]) -> Task:
        task = self._find(owner_id, task_id)
        values = _clean_fields(fields, creating=False)
        now = utcnow()

        completed = values.pop("completed", None)
        for key, value in values.items():
            setattr(task, key, value)
        if completed is not None:
            _apply_completion(task, completed, now)
        task.updated_at = now

        # completed / completed_at 은 한 번의 커밋으로 같이 기록
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, owner_id: UUID, task_id: Any) -> Task:
        task = self._find(owner_id, task_id)
        snapshot = Task(**task.model_dump())
        self.db.delete(task)
        self.db.commit()
        return snapshot

    def delete_completed(self, owner_id: UUID) -> int:
        stmt = select(Task).where(col(Task.user_id) == owner_id, col(Task.completed).is_(True))
        rows = self.db.exec(stmt).all()
        for row in rows:
            self.db.delete(row)
        self.db.commit()
        logger.info("deleted %d completed tasks for user %s", len(rows), owner_id)
        return len(rows)

    def stats(self, owner_id: UUID) -> dict[str, int]:
        stmt = (
            select(Task.completed, func.count())
            .where(col(Task.user_id) == owner_id)
            .group_by(Task.completed)
        )
        total = completed = 0
        for is_done, count in self.db.exec(stmt).all():
            total += count
            if is_done:
                completed += count

        # half-up 반올림 (파이썬 round는 banker's rounding)
        rate = math.floor(completed * 100 / total + 0.5) if total else 0
        return {
            "total": total,
            "completed": completed,
            "pending": total - completed,
            "completion_rate": rate,
        }

    def upcoming(self, owner_id: UUID, days: int = UPCOMING_DAYS) -> List[Task]:
        """Open tasks due within ``[now, now + days]``, soonest first."""
        now = utcnow()
        stmt = (
            select(Task)
            .where(
                col(Task.user_id) == owner_id,
                col(Task.completed).is_(False),
                col(Task.due_date) >= now,
                col(Task.due_date) <= now + timedelta(days=days),
            )
            .order_by(col(Task.due_date).asc())
        )
        return list(self.db.exec(stmt).all())
