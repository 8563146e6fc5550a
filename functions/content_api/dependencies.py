"""
Dependency wiring shared by the FastAPI app and the Firebase function.

Every object here is created at most once per process and then reused, so
a warm function instance keeps its database connection pool.
"""

from __future__ import annotations

import logging
import threading

from content_api.access import AccessPolicy, JwtAdminVerifier
from content_api.config import DEVELOPMENT_JWT_SECRET, get_settings
from content_api.db import ContentStore, InMemoryContentStore, SqlContentStore
from content_api.errors import BackendError
from content_api.repository import ContentRepository
from content_api.router import ContentRouter
from shared.sample_content import SAMPLE_CONTENT

logger = logging.getLogger(__name__)

_content_store: ContentStore | None = None
_content_repository: ContentRepository | None = None
_access_policy: AccessPolicy | None = None
_content_router: ContentRouter | None = None

# Reentrant: get_content_router builds the repository and policy under it.
_lock = threading.RLock()


def _in_memory_store(seed: bool) -> InMemoryContentStore:
    store = InMemoryContentStore()
    if seed:
        for data in SAMPLE_CONTENT:
            store.create(data)
        logger.info("Seeded in-memory store with %d sample records", len(SAMPLE_CONTENT))
    return store


def _select_content_store() -> ContentStore:
    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory content storage (DATABASE_URL not provided)")
        return _in_memory_store(settings.seed_sample_content)

    try:
        store = SqlContentStore(
            settings.database_url, database_name=settings.database_name
        )
        logger.info("Connected to content database")
        return store
    except BackendError as exc:
        logger.warning("%s; falling back to in-memory content storage", exc)
        return _in_memory_store(settings.seed_sample_content)


def get_content_store() -> ContentStore:
    """
    Return the process-wide store. The mode is decided on first use and
    never changes afterwards.
    """
    global _content_store
    if _content_store is None:
        with _lock:
            if _content_store is None:
                _content_store = _select_content_store()
    return _content_store


def get_content_repository() -> ContentRepository:
    global _content_repository
    if _content_repository is None:
        with _lock:
            if _content_repository is None:
                _content_repository = ContentRepository(get_content_store())
    return _content_repository


def get_access_policy() -> AccessPolicy:
    global _access_policy
    if _access_policy is not None:
        return _access_policy

    with _lock:
        if _access_policy is None:
            settings = get_settings()
            if settings.is_production and settings.jwt_secret == DEVELOPMENT_JWT_SECRET:
                logger.warning("JWT_SECRET is not set; using the development secret")
            _access_policy = AccessPolicy(
                JwtAdminVerifier(settings.jwt_secret, algorithms=[settings.jwt_algorithm])
            )
    return _access_policy


def get_content_router() -> ContentRouter:
    global _content_router
    if _content_router is None:
        with _lock:
            if _content_router is None:
                _content_router = ContentRouter(
                    get_content_repository(),
                    get_access_policy(),
                    expose_errors=not get_settings().is_production,
                )
    return _content_router


def reset_dependencies() -> None:
    """Forget cached singletons (tests only)."""
    global _content_store, _content_repository, _access_policy, _content_router
    with _lock:
        _content_store = None
        _content_repository = None
        _access_policy = None
        _content_router = None
    get_settings.cache_clear()
