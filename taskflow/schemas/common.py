# taskflow/schemas/common.py
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON은 camelCase, 파이썬 쪽은 snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def envelope(message: str, data: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Every endpoint answers with {error, message, data?}."""
    body: dict[str, Any] = {"error": False, "message": message}
    if data is not None:
        body["data"] = data
    return body


def error_envelope(message: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"error": True, "message": message}
    body.update(extra)
    return body
