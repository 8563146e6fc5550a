"""
Content repository: validation and visibility rules on top of a store.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from content_api.db import ContentStore
from content_api.errors import NotFoundError, ValidationError
from content_api.records import CONTENT_DEFAULTS, ContentFilter, ContentRecord
from content_api.schemas import (
    REQUIRED_FIELDS,
    ContentCreate,
    ContentUpdate,
    ListQuery,
    describe_errors,
)
from shared.constants import (
    MESSAGE_CONTENT_NOT_FOUND,
    MESSAGE_INVALID_BODY,
    MESSAGE_REQUIRED_FIELDS,
)
from shared.types import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


def _validated(schema, payload: Any):
    if not isinstance(payload, Mapping):
        raise ValidationError(MESSAGE_INVALID_BODY)
    try:
        return schema.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(describe_errors(exc)) from exc


class ContentRepository:
    """
    Single call surface for content operations.

    Authorization is not checked here; the router applies the access policy
    before any admin operation reaches the repository.
    """

    def __init__(self, store: ContentStore):
        self.store = store

    def _filters(
        self,
        section: Optional[str],
        language: Optional[str],
        is_active: Optional[bool],
    ) -> ContentFilter:
        query = _validated(ListQuery, {"section": section, "language": language})
        return ContentFilter(
            section=query.section, language=query.language, is_active=is_active
        )

    def create(self, payload: Any) -> ContentRecord:
        if isinstance(payload, Mapping) and not all(
            payload.get(name) for name in REQUIRED_FIELDS
        ):
            raise ValidationError(MESSAGE_REQUIRED_FIELDS)
        content = _validated(ContentCreate, payload)
        record = self.store.create(content.model_dump())
        logger.info(
            "Created content %s in %s/%s", record.id, record.section, record.language
        )
        return record

    def list_public(
        self, section: Optional[str] = None, language: Optional[str] = None
    ) -> list[ContentRecord]:
        """Active records only; language falls back to English."""
        filters = self._filters(section, language or DEFAULT_LANGUAGE, is_active=True)
        return self.store.find(filters)

    def list_admin(
        self, section: Optional[str] = None, language: Optional[str] = None
    ) -> list[ContentRecord]:
        return self.store.find(self._filters(section, language, is_active=None))

    def get_by_id(self, content_id: str) -> ContentRecord:
        record = self.store.find_by_id(content_id) if content_id else None
        if record is None:
            raise NotFoundError(MESSAGE_CONTENT_NOT_FOUND)
        return record

    def update(self, content_id: str, payload: Any) -> ContentRecord:
        content = _validated(ContentUpdate, payload)
        changes = content.model_dump(exclude_unset=True)
        for name, value in changes.items():
            # An explicit null resets an optional field to its default.
            if value is None:
                changes[name] = copy.deepcopy(CONTENT_DEFAULTS[name])
        record = self.store.update(content_id, changes) if content_id else None
        if record is None:
            raise NotFoundError(MESSAGE_CONTENT_NOT_FOUND)
        logger.info("Updated content %s (%s)", record.id, ", ".join(sorted(changes)))
        return record

    def delete(self, content_id: str) -> ContentRecord:
        record = self.store.delete(content_id) if content_id else None
        if record is None:
            raise NotFoundError(MESSAGE_CONTENT_NOT_FOUND)
        logger.info("Deleted content %s", record.id)
        return record
