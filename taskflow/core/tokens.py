from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from taskflow.core.config import settings
from taskflow.core.errors import ExpiredToken, InvalidToken

# ← python-jose 사용. 폐기 목록(revocation)은 없음: 로그아웃은 클라이언트가 토큰을 버리는 것으로 끝난다.

TOKEN_TYPE = "access"


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    email: str


# ---- 공통 ----
def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _make_jwt(payload: Dict[str, Any], exp: datetime) -> str:
    to_encode = payload.copy()
    to_encode["iat"] = int(_utcnow().timestamp())
    to_encode["exp"] = int(exp.timestamp())
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode(token: str) -> Dict[str, Any]:
    # jose.jwt.decode는 검증 실패 시 JWTError, 만료 시 ExpiredSignatureError(JWTError 하위)를 던짐
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise ExpiredToken()
    except JWTError:
        raise InvalidToken()


# ---- Access Token ----
def create_access_token(
    user_id: UUID | str,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    user_id/email로 서명된 Access Token을 발급한다.
    기본 유효기간은 ACCESS_TOKEN_EXPIRE_DAYS(7일).
    """
    exp = _utcnow() + (expires_delta or timedelta(days=settings.access_token_expire_days))
    payload = {"sub": str(user_id), "email": email, "typ": TOKEN_TYPE}
    return _make_jwt(payload, exp)


def verify_access_token(token: str) -> TokenClaims:
    """
    유효한 토큰이면 TokenClaims를 반환.
    서명/구조 오류·typ 불일치·claim 누락은 InvalidToken, 만료는 ExpiredToken.
    """
    payload = _decode(token)
    if payload.get("typ") != TOKEN_TYPE:
        raise InvalidToken()

    sub = payload.get("sub")
    email = payload.get("email")
    if not sub or not email:
        raise InvalidToken()
    try:
        user_id = UUID(str(sub))
    except ValueError:
        raise InvalidToken()
    return TokenClaims(user_id=user_id, email=email)
