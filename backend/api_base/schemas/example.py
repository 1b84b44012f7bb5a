"""
API Base — Example Request/Response Schemas
============================================

What:  Pydantic models defining the API contract for the Example resource.
Why:   Strict input validation, camelCase serialization and OpenAPI docs.

Design Decision:
    Schemas are separate from the SQLAlchemy model so the API can rename
    fields (created_at → createdAt) and reject unknown input fields without
    touching the table definition.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_.]+$")
NAME_PATTERN_MESSAGE = (
    "Name can only contain letters, numbers, spaces, hyphens, underscores, and dots"
)

MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000


def _check_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not 1 <= len(value) <= MAX_NAME_LENGTH:
        raise ValueError("Name must be between 1 and 255 characters")
    if not NAME_PATTERN.match(value):
        raise ValueError(NAME_PATTERN_MESSAGE)
    return value


def _check_description(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValueError("Description must not exceed 1000 characters")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateExampleRequest(BaseModel):
    """Body of POST /examples. Unknown fields are rejected."""

    name: str = Field(
        description="Name of the example",
        examples=["My Example"],
        json_schema_extra={"minLength": 1, "maxLength": MAX_NAME_LENGTH},
    )
    description: Optional[str] = Field(
        default=None,
        description="Description of the example",
        examples=["A detailed description of the example"],
        json_schema_extra={"maxLength": MAX_DESCRIPTION_LENGTH},
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_description(v)


class UpdateExampleRequest(BaseModel):
    """Body of PUT /examples/{id}. Only provided fields are changed."""

    name: Optional[str] = Field(default=None, description="New name of the example")
    description: Optional[str] = Field(default=None, description="New description")

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_name(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_description(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ExampleResponse(BaseModel):
    """Serialized Example; timestamps as camelCase ISO 8601 strings."""

    id: str = Field(description="Unique identifier of the example (UUID)")
    name: str = Field(description="Name of the example")
    description: Optional[str] = Field(default=None, description="Description of the example")
    created_at: datetime = Field(alias="createdAt", description="Creation timestamp")
    updated_at: datetime = Field(alias="updatedAt", description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ExamplePage(BaseModel):
    """One page of Examples, newest first."""

    data: List[ExampleResponse]
    total: int = Field(description="Total number of examples")
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)


class DeletedExample(BaseModel):
    id: str


class ExampleCount(BaseModel):
    count: int = Field(description="Total number of examples")


class ExampleExists(BaseModel):
    exists: bool
