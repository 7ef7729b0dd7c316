from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldErrorResponse(BaseModel):
    field: str
    message: str
    category: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: list[FieldErrorResponse] | None = None


class DataResponse(BaseModel):
    success: bool = True
    data: Any
