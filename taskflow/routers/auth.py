# taskflow/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from taskflow.db.session import get_session
from taskflow.dependencies.auth import get_current_user
from taskflow.models.user import User
from taskflow.schemas.auth import LoginRequest, RegisterRequest, UserRead
from taskflow.schemas.common import envelope
from taskflow.services import auth_service

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_payload(user: User, token: str) -> dict:
    return {"user": UserRead.from_model(user).to_json(), "token": token}


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_session)):
    user, token = auth_service.register(
        db, name=body.name, email=body.email, password=body.password
    )
    return envelope("registration completed", _auth_payload(user, token))


@auth_router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_session)):
    user, token = auth_service.login(db, email=body.email, password=body.password)
    return envelope("login successful", _auth_payload(user, token))


@auth_router.post("/logout")
def logout():
    """
    서버에 세션/폐기 목록이 없으므로 no-op.
    클라이언트가 보관 중인 토큰을 지우는 것으로 로그아웃이 끝난다.
    """
    return envelope("logged out")


@auth_router.get("/me")
def me(user: User = Depends(get_current_user)):
    return envelope("user loaded", {"user": UserRead.from_model(user).to_json()})
