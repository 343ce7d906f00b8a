from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from taskflow.core.clock import utcnow


class Subscription(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


class User(SQLModel, table=True):
    __tablename__ = "user"

    user_id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=50)
    email: str = Field(index=True, unique=True, max_length=254)  # 항상 소문자로 저장
    password_hash: str
    subscription: str = Field(default=Subscription.FREE.value, max_length=16)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())
