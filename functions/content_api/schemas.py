"""
Pydantic schemas for content payloads.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from shared.constants import ORDER_MAX, ORDER_MIN
from shared.types import DEFAULT_LANGUAGE, Language, Section

REQUIRED_FIELDS = ("title", "body", "section")


def _strip_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def describe_errors(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into one caller-facing sentence."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


class ContentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    section: Section
    image_url: str = Field(default="", alias="imageUrl")
    order: int = Field(default=0, ge=ORDER_MIN, le=ORDER_MAX)
    language: Language = DEFAULT_LANGUAGE
    is_active: bool = Field(default=True, alias="isActive")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _nulls_mean_default(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if value is not None or key in REQUIRED_FIELDS
            }
        return data

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _strip_title(value)


class ContentUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1)
    body: Optional[str] = Field(default=None, min_length=1)
    section: Optional[Section] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    order: Optional[int] = Field(default=None, ge=ORDER_MIN, le=ORDER_MAX)
    language: Optional[Language] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    metadata: Optional[dict[str, Any]] = None

    @field_validator("title")
    @classmethod
    def _title(cls, value: Optional[str]) -> Optional[str]:
        return _strip_title(value)

    @model_validator(mode="after")
    def _required_not_null(self) -> "ContentUpdate":
        for name in REQUIRED_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ListQuery(BaseModel):
    """Listing filters taken from the query string."""

    section: Optional[Section] = None
    language: Optional[Language] = None
