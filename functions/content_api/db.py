"""
Content storage abstraction: a SQL database and an in-memory fallback.
"""

from __future__ import annotations

import itertools
import json
import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterator, Optional, Protocol

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    create_engine,
    select,
)
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from content_api.errors import BackendError
from content_api.records import (
    MUTABLE_FIELDS,
    ContentFilter,
    ContentRecord,
    apply_defaults,
    as_utc,
    utcnow,
)
from shared.constants import CONTENT_TABLE
from shared.types import Language, Section

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ContentStore(Protocol):
    """Interface every content backend implements.

    Lookups by an unknown id return ``None`` instead of raising.
    """

    def create(self, data: dict) -> ContentRecord:
        ...

    def find(self, filters: Optional[ContentFilter] = None) -> list[ContentRecord]:
        ...

    def find_by_id(self, content_id: str) -> Optional[ContentRecord]:
        ...

    def update(self, content_id: str, changes: dict) -> Optional[ContentRecord]:
        ...

    def delete(self, content_id: str) -> Optional[ContentRecord]:
        ...


def _mutable_changes(changes: dict) -> dict:
    picked = {name: changes[name] for name in MUTABLE_FIELDS if name in changes}
    if "section" in picked:
        picked["section"] = Section(picked["section"])
    if "language" in picked:
        picked["language"] = Language(picked["language"])
    return picked


def _json_copy(value: dict) -> dict:
    # Same normalization a JSON column applies on the way in and out.
    return json.loads(json.dumps(value, default=str))


class InMemoryContentStore:
    """Process-local store used when no database is configured.

    Records are keyed by id in insertion order, so a stable sort on
    ``(order, created_at)`` breaks remaining ties by creation sequence. Ids
    come from a counter that is never rewound. One lock serializes every
    read and write, since both adapters serve requests from several threads.
    """

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock
        self._records: dict[str, ContentRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @staticmethod
    def _copy(record: ContentRecord) -> ContentRecord:
        return replace(record, metadata=_json_copy(record.metadata))

    def create(self, data: dict) -> ContentRecord:
        fields = apply_defaults(data)
        fields["metadata"] = _json_copy(fields["metadata"])
        with self._lock:
            now = as_utc(self._clock())
            record = ContentRecord(
                id=str(next(self._ids)), created_at=now, updated_at=now, **fields
            )
            self._records[record.id] = record
            return self._copy(record)

    def find(self, filters: Optional[ContentFilter] = None) -> list[ContentRecord]:
        filters = filters or ContentFilter()
        with self._lock:
            matched = [r for r in self._records.values() if filters.matches(r)]
            return [self._copy(r) for r in sorted(matched, key=ContentRecord.sort_key)]

    def find_by_id(self, content_id: str) -> Optional[ContentRecord]:
        with self._lock:
            record = self._records.get(str(content_id))
            return self._copy(record) if record else None

    def update(self, content_id: str, changes: dict) -> Optional[ContentRecord]:
        picked = _mutable_changes(changes)
        if "metadata" in picked:
            picked["metadata"] = _json_copy(picked["metadata"] or {})
        with self._lock:
            current = self._records.get(str(content_id))
            if current is None:
                return None
            updated_at = max(as_utc(self._clock()), current.created_at)
            updated = replace(current, **picked, updated_at=updated_at)
            # Reassigning an existing key keeps its insertion position.
            self._records[current.id] = updated
            return self._copy(updated)

    def delete(self, content_id: str) -> Optional[ContentRecord]:
        with self._lock:
            return self._records.pop(str(content_id), None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self._records.clear()


Base = declarative_base()


class ContentRow(Base):
    __tablename__ = CONTENT_TABLE

    # Insertion sequence; last tie-breaker when listing.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), nullable=False, unique=True, index=True)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    image_url = Column(String, nullable=False, default="")
    section = Column(String(32), nullable=False, index=True)
    order = Column("order", Integer, nullable=False, default=0)
    language = Column(String(8), nullable=False, default="en", index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    data = Column("metadata", JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


def _engine_options(url: URL) -> dict:
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # One shared connection, otherwise every thread sees an empty database.
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {"pool_pre_ping": True, "pool_recycle": 1800}


class SqlContentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(
        self,
        database_url: str,
        database_name: Optional[str] = None,
        clock: Clock = utcnow,
    ):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlContentStore")
        url = make_url(database_url)
        if database_name:
            url = url.set(database=database_name)
        self._clock = clock
        self.engine = create_engine(url, future=True, **_engine_options(url))
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise BackendError("Content database is unreachable") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.Session()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Content database operation failed")
            raise BackendError("Content database operation failed") from exc
        finally:
            session.close()

    @staticmethod
    def _to_record(row: ContentRow) -> ContentRecord:
        return ContentRecord(
            id=row.id,
            title=row.title,
            body=row.body,
            image_url=row.image_url,
            section=Section(row.section),
            order=row.order,
            language=Language(row.language),
            is_active=row.is_active,
            metadata=row.data or {},
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )

    @staticmethod
    def _by_id(content_id: str, for_update: bool = False):
        stmt = select(ContentRow).where(ContentRow.id == str(content_id))
        if for_update:
            stmt = stmt.with_for_update()
        return stmt

    def create(self, data: dict) -> ContentRecord:
        fields = apply_defaults(data)
        now = as_utc(self._clock())
        with self._session() as session:
            row = ContentRow(
                id=uuid.uuid4().hex,
                title=fields["title"],
                body=fields["body"],
                image_url=fields["image_url"],
                section=fields["section"].value,
                order=fields["order"],
                language=fields["language"].value,
                is_active=fields["is_active"],
                data=fields["metadata"],
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def find(self, filters: Optional[ContentFilter] = None) -> list[ContentRecord]:
        filters = filters or ContentFilter()
        stmt = select(ContentRow)
        if filters.section is not None:
            stmt = stmt.where(ContentRow.section == filters.section.value)
        if filters.language is not None:
            stmt = stmt.where(ContentRow.language == filters.language.value)
        if filters.is_active is not None:
            stmt = stmt.where(ContentRow.is_active == filters.is_active)
        stmt = stmt.order_by(
            ContentRow.order.asc(), ContentRow.created_at.asc(), ContentRow.seq.asc()
        )
        with self._session() as session:
            rows = session.execute(stmt).scalars().all()
            return [self._to_record(row) for row in rows]

    def find_by_id(self, content_id: str) -> Optional[ContentRecord]:
        with self._session() as session:
            row = session.execute(self._by_id(content_id)).scalar_one_or_none()
            if not row:
                return None
            return self._to_record(row)

    def update(self, content_id: str, changes: dict) -> Optional[ContentRecord]:
        picked = _mutable_changes(changes)
        with self._session() as session:
            row = session.execute(
                self._by_id(content_id, for_update=True)
            ).scalar_one_or_none()
            if not row:
                return None
            for name, value in picked.items():
                if name == "metadata":
                    row.data = value or {}
                elif name in ("section", "language"):
                    setattr(row, name, value.value)
                else:
                    setattr(row, name, value)
            row.updated_at = max(as_utc(self._clock()), as_utc(row.created_at))
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def delete(self, content_id: str) -> Optional[ContentRecord]:
        with self._session() as session:
            row = session.execute(
                self._by_id(content_id, for_update=True)
            ).scalar_one_or_none()
            if not row:
                return None
            record = self._to_record(row)
            session.delete(row)
            session.commit()
            return record
