from __future__ import annotations

import logging
import re
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from taskflow.core.clock import utcnow
from taskflow.core.errors import (
    AccountDeactivated,
    DuplicateEmail,
    InvalidCredentials,
    InvalidToken,
    NotFound,
    ValidationError,
)
from taskflow.core.security import hash_password, verify_password
from taskflow.core.tokens import create_access_token
from taskflow.models.user import Subscription, User

logger = logging.getLogger(__name__)

# 구분자 없는 중첩 반복 금지 (ReDoS), ASCII 단어 문자만
EMAIL_RE = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*(?:\.\w{2,3})+$", re.ASCII)
EMAIL_MAX = 254
NAME_MAX = 50
PASSWORD_MIN = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _find_by_email(db: Session, email: str) -> Optional[User]:
    return db.exec(select(User).where(col(User.email) == normalize_email(email))).first()


def register(db: Session, *, name: Optional[str], email: Optional[str], password: Optional[str]) -> tuple[User, str]:
    """
    Create an active free-tier user and issue a token for it.
    Returns ``(user, token)``.
    """
    name = (name or "").strip()
    email = normalize_email(email or "")
    if not name or not email or not password:
        raise ValidationError("name, email and password are required")

    errors: list[str] = []
    if len(name) > NAME_MAX:
        errors.append(f"name must be at most {NAME_MAX} characters")
    if len(email) > EMAIL_MAX or not EMAIL_RE.match(email):
        errors.append("please enter a valid email address")
    if len(password) < PASSWORD_MIN:
        errors.append(f"password must be at least {PASSWORD_MIN} characters")
    if errors:
        raise ValidationError.from_messages(errors)

    if _find_by_email(db, email) is not None:
        raise DuplicateEmail()

    now = utcnow()
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        subscription=Subscription.FREE.value,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # 동시에 같은 이메일로 가입한 경우 unique 제약이 걸림
        db.rollback()
        raise DuplicateEmail()
    db.refresh(user)

    logger.info("user registered: %s", user.user_id)
    return user, create_access_token(user.user_id, user.email)


def login(db: Session, *, email: Optional[str], password: Optional[str]) -> tuple[User, str]:
    if not email or not password:
        raise ValidationError("email and password are required")

    user = _find_by_email(db, email)
    # 이메일 없음/비밀번호 불일치는 같은 메시지로 응답 (계정 존재 여부 노출 방지)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("failed login attempt")
        raise InvalidCredentials()
    if not user.is_active:
        raise AccountDeactivated()

    user.updated_at = utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, create_access_token(user.user_id, user.email)


def load_active_user(db: Session, user_id: UUID) -> User:
    """Re-fetch the token's user; gone → InvalidToken, inactive → AccountDeactivated."""
    user = db.get(User, user_id)
    if user is None:
        raise InvalidToken()
    if not user.is_active:
        raise AccountDeactivated()
    return user


def deactivate_user(db: Session, user_id: UUID) -> User:
    """Active → Deactivated. There is no way back in the current scope."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("user not found")
    if user.is_active:
        user.is_active = False
        user.updated_at = utcnow()
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("user deactivated: %s", user.user_id)
    return user
