"""
TaskFlow 에러 계층.

Routers and services raise these; the handlers registered in
``taskflow.main`` turn them into the ``{error, message}`` envelope.
"""

from __future__ import annotations

from typing import Any, Optional


class TaskflowError(Exception):
    """Base class for every error that maps to a client-facing status."""

    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"error": True, "message": self.message}


class ValidationError(TaskflowError):
    status_code = 400
    default_message = "invalid input"

    @classmethod
    def from_messages(cls, messages: list[str]) -> "ValidationError":
        return cls(", ".join(messages))


class AuthenticationError(TaskflowError):
    status_code = 401
    default_message = "authentication failed"

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class MissingCredentials(AuthenticationError):
    default_message = "authentication token is required"


class InvalidToken(AuthenticationError):
    default_message = "invalid token"


class ExpiredToken(AuthenticationError):
    default_message = "expired token"


class InvalidCredentials(AuthenticationError):
    default_message = "invalid email or password"


class AccountDeactivated(AuthenticationError):
    default_message = "account deactivated"


class NotFound(TaskflowError):
    status_code = 404
    default_message = "not found"


class DuplicateEmail(TaskflowError):
    status_code = 409
    default_message = "email is already registered"
