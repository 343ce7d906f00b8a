# taskflow/schemas/auth.py
from datetime import datetime
from typing import Optional
from uuid import UUID

from taskflow.core.clock import as_utc
from taskflow.models.user import User
from taskflow.schemas.common import CamelModel


# 필수 여부는 auth_service에서 검사 (누락 시 422 대신 400 + 고정 메시지)
class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserRead(CamelModel):
    id: UUID
    name: str
    email: str
    subscription: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserRead":
        # password_hash는 절대 내보내지 않는다
        return cls(
            id=user.user_id,
            name=user.name,
            email=user.email,
            subscription=user.subscription,
            is_active=user.is_active,
            created_at=as_utc(user.created_at),
            updated_at=as_utc(user.updated_at),
        )
