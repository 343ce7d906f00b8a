"""Centralized SQLModel imports to ensure metadata is populated."""

from taskflow.models import user as _user  # noqa: F401
from taskflow.models import task as _task  # noqa: F401
