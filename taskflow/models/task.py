from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from taskflow.core.clock import utcnow


class Category(str, Enum):
    WORK = "work"
    STUDY = "study"
    PERSONAL = "personal"
    HEALTH = "health"
    SHOPPING = "shopping"
    OTHER = "other"


TITLE_MAX = 100
DESCRIPTION_MAX = 500
TAG_MAX = 20
PRIORITY_MIN, PRIORITY_MAX = 1, 5
DEFAULT_PRIORITY = 3


class Task(SQLModel, table=True):
    __tablename__ = "task"
    __table_args__ = (
        Index("ix_task_user_created", "user_id", "created_at"),
        Index("ix_task_user_completed", "user_id", "completed"),
    )

    task_id: UUID = Field(default_factory=uuid4, primary_key=True)
    # 모든 조회/수정은 이 컬럼으로 소유자 필터링
    user_id: UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("user.user_id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    title: str = Field(max_length=TITLE_MAX)
    description: str = Field(default="", max_length=DESCRIPTION_MAX)
    category: str = Field(default=Category.PERSONAL.value, index=True, max_length=16)
    priority: int = Field(default=DEFAULT_PRIORITY)
    # 시각 컬럼은 모두 naive UTC (clock.utcnow) 로 저장
    due_date: Optional[datetime] = Field(default=None, index=True, sa_type=DateTime())
    completed: bool = Field(default=False)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    tags: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    )
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())
