# taskflow/routers/task.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from taskflow.db.session import get_session
from taskflow.dependencies.auth import get_current_user
from taskflow.models.task import Task
from taskflow.models.user import User
from taskflow.schemas.common import envelope
from taskflow.schemas.task import Pagination, TaskCreate, TaskRead, TaskStats, TaskUpdate
from taskflow.services.task_repository import PageRequest, TaskFilter, TaskRepository

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])

# 통계 화면에 노출하는 마감 임박 개수 (조회 기간 3일과는 별개)
UPCOMING_DISPLAY_LIMIT = 5


def get_repository(db: Session = Depends(get_session)) -> TaskRepository:
    return TaskRepository(db)


def _task_out(task: Task) -> dict:
    return TaskRead.from_model(task).to_json()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreate,
    repo: TaskRepository = Depends(get_repository),
    user: User = Depends(get_current_user),
):
    task = repo.create(user.user_id, body.model_dump(exclude_unset=True))
    return envelope("task created", {"task": _task_out(task)})


@router.get("")
def list_tasks(
    completed: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    due_date: Optional[str] = Query(None, alias="dueDate"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    repo: TaskRepository = Depends(get_repository),
    user: User = Depends(get_current_user),
):
    flt = TaskFilter.from_query(
        completed=completed, category=category, priority=priority, due_date=due_date
    )
    page_req = PageRequest.from_query(
        page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )
    result = repo.list(user.user_id, flt, page_req)
    pagination = Pagination(
        current_page=result.page,
        total_pages=result.total_pages,
        total_items=result.total_items,
        items_per_page=result.limit,
    )
    return envelope(
        "tasks loaded",
        {"tasks": [_task_out(t) for t in result.items], "pagination": pagination.to_json()},
    )


# 리터럴 경로(/stats, /completed)는 /{task_id} 보다 먼저 등록해야 함
@router.get("/stats")
def task_stats(
    repo: TaskRepository = Depends(get_repository),
    user: User = Depends(get_current_user),
):
    stats = TaskStats(**repo.stats(user.user_id))
    upcoming = repo.upcoming(user.user_id)[:UPCOMING_DISPLAY_LIMIT]
    return envelope(
        "task stats loaded",
        {"stats": stats.to_json(), "upcomingTasks": [_task_out(t) for t in upcoming]},
    )


@router.delete("/completed")
def delete_completed_tasks(
    repo: TaskRepository = Depends(get_repository),
    user: User = Depends(get_current_user),
):
    deleted = repo.delete_completed(user.user_id)
    return envelope("completed tasks deleted", {"deletedCount": deleted})


@router.get("/{task_id}")
def get_task(
    task_id: str,
    repo: TaskRepository = Depends(get_repository),
    user: User = Depends(get_current_user),
):
    task = repo.get(user.user_id, task_id)
    return envelope("task loaded", {"task": _task_out(task)})


@router.put("/{task_id}")
def update_task(
    task_id: str,
    body: TaskUpdate,
    repo: TaskRepository = Depends(get_repository),
    user: User = Depends(get_current_user),
):
    task = repo.update(user.user_id, task_id, body.model_dump(exclude_unset=True))
    return envelope("task updated", {"task": _task_out(task)})


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    repo: TaskRepository = Depends(get_repository),
    user: User = Depends(get_current_user),
):
    task = repo.delete(user.user_id, task_id)
    return envelope("task deleted", {"task": _task_out(task)})
