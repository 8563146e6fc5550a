"""
Content record model shared by every storage backend.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from shared.types import DEFAULT_LANGUAGE, Language, Section

# Fields a caller may change after creation.
MUTABLE_FIELDS = (
    "title",
    "body",
    "image_url",
    "section",
    "order",
    "language",
    "is_active",
    "metadata",
)

CONTENT_DEFAULTS: dict[str, Any] = {
    "image_url": "",
    "order": 0,
    "language": DEFAULT_LANGUAGE,
    "is_active": True,
    "metadata": {},
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def apply_defaults(data: dict) -> dict:
    """Return a copy of ``data`` with omitted optional fields filled in."""
    filled = {name: data[name] for name in MUTABLE_FIELDS if name in data}
    for name, default in CONTENT_DEFAULTS.items():
        if filled.get(name) is None:
            filled[name] = copy.deepcopy(default)
    filled["section"] = Section(filled["section"])
    filled["language"] = Language(filled["language"])
    return filled


@dataclass
class ContentRecord:
    id: str
    title: str
    body: str
    section: Section
    image_url: str = ""
    order: int = 0
    language: Language = DEFAULT_LANGUAGE
    is_active: bool = True
    metadata: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def sort_key(self) -> tuple[int, datetime]:
        return (self.order, self.created_at)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "imageUrl": self.image_url,
            "section": self.section.value,
            "order": self.order,
            "language": self.language.value,
            "isActive": self.is_active,
            "metadata": self.metadata,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class ContentFilter:
    """Exact-match listing filter; ``None`` leaves a field unconstrained."""

    section: Optional[Section] = None
    language: Optional[Language] = None
    is_active: Optional[bool] = None

    def matches(self, record: ContentRecord) -> bool:
        if self.section is not None and record.section != self.section:
            return False
        if self.language is not None and record.language != self.language:
            return False
        if self.is_active is not None and record.is_active != self.is_active:
            return False
        return True
