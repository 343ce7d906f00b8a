from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from taskflow.core.errors import MissingCredentials
from taskflow.core.tokens import TokenClaims, verify_access_token
from taskflow.db.session import get_session
from taskflow.models.user import User
from taskflow.services.auth_service import load_active_user

# Authorization: Bearer <token> 만 허용 (쿠키 fallback 없음)
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenClaims:
    """Claims-only auth; trusts the signed token without a DB round-trip."""
    if credentials is None or not credentials.credentials:
        raise MissingCredentials()
    return verify_access_token(credentials.credentials)


def get_current_user(
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_session),
) -> User:
    """Strict auth dependency; the user must still exist and be active."""
    return load_active_user(db, claims.user_id)
