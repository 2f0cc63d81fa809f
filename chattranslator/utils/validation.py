"""Explicit schema checks for untrusted upstream payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(slots=True)
class SchemaCheck(Generic[ModelT]):
    """Outcome of validating a payload: either ``value`` or ``error`` is set."""

    value: Optional[ModelT] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def check_schema(model: Type[ModelT], payload: Any) -> SchemaCheck[ModelT]:
    """Validate ``payload`` against ``model`` without raising."""
    if payload is None:
        return SchemaCheck(error="payload is empty")
    try:
        return SchemaCheck(value=model.model_validate(payload))
    except ValidationError as exc:
        return SchemaCheck(error=str(exc))


__all__ = ["SchemaCheck", "check_schema"]
