from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class TaskOut(BaseModel):
    """Wire shape of a stored task; timestamps are emitted in camelCase."""

    id: str
    title: str
    description: str
    status: str
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")


class FieldErrorOut(BaseModel):
    field: str
    message: str
    location: str
    value: Any = None


class ValidationErrorResponse(BaseModel):
    errors: list[FieldErrorOut]


class ServerErrorResponse(BaseModel):
    error: str
