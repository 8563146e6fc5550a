"""
Request routing shared by the FastAPI server and the Firebase function.

Adapters turn their native request into an ``ApiRequest`` and send the
returned ``ApiResponse`` back as JSON. Nothing here keeps state between
requests; only the store does.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from content_api.access import Access, AccessPolicy, AdminPrincipal
from content_api.errors import BackendError, ContentApiError, ValidationError
from content_api.repository import ContentRepository
from shared.constants import (
    MESSAGE_CONTENT_DELETED,
    MESSAGE_INTERNAL_ERROR,
    MESSAGE_INVALID_BODY,
    MESSAGE_ROUTE_NOT_FOUND,
)

logger = logging.getLogger(__name__)

_NO_BODY = object()


@dataclass
class ApiRequest:
    method: str
    # Relative to the API root, e.g. "content/admin/all".
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def param(self, name: str) -> Optional[str]:
        value = self.query.get(name)
        return value or None

    def json(self) -> Any:
        if not self.body:
            return _NO_BODY
        try:
            return json.loads(self.body)
        except (ValueError, UnicodeDecodeError):
            return _NO_BODY


@dataclass
class ApiResponse:
    status_code: int
    payload: Any


@dataclass(frozen=True)
class Route:
    method: str
    pattern: re.Pattern
    access: Access
    handler: str


def _route(method: str, pattern: str, access: Access, handler: str) -> Route:
    return Route(method, re.compile(rf"^{pattern}$"), access, handler)


# Order matters: "content/admin/all" must win over "content/{id}".
ROUTES = (
    _route("GET", r"content", Access.PUBLIC, "list_public"),
    _route("GET", r"content/admin/all", Access.ADMIN, "list_admin"),
    _route("GET", r"content/(?P<content_id>[^/]+)", Access.PUBLIC, "get_content"),
    _route("POST", r"content", Access.ADMIN, "create_content"),
    _route("PUT", r"content/(?P<content_id>[^/]+)", Access.ADMIN, "update_content"),
    _route("DELETE", r"content/(?P<content_id>[^/]+)", Access.ADMIN, "delete_content"),
    _route("GET", r"auth/verify", Access.ADMIN, "verify_token"),
    _route("POST", r"auth/logout", Access.PUBLIC, "logout"),
)


def relative_path(path: str, prefix: str = "") -> str:
    """Strip the API prefix and surrounding slashes from a request path."""
    path = (path or "").strip("/")
    prefix = (prefix or "").strip("/")
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        path = path[len(prefix):].lstrip("/")
    return path


class ContentRouter:
    def __init__(
        self,
        repository: ContentRepository,
        policy: AccessPolicy,
        *,
        expose_errors: bool = False,
    ):
        self.repository = repository
        self.policy = policy
        # Diagnostic detail on 500s; never enabled in production.
        self.expose_errors = expose_errors

    def match(self, method: str, path: str) -> Optional[tuple[Route, dict]]:
        path = relative_path(path)
        for route in ROUTES:
            if route.method != method.upper():
                continue
            found = route.pattern.match(path)
            if found:
                return route, found.groupdict()
        return None

    def dispatch(self, request: ApiRequest) -> ApiResponse:
        matched = self.match(request.method, request.path)
        if matched is None:
            return ApiResponse(404, {"message": MESSAGE_ROUTE_NOT_FOUND})
        route, params = matched
        try:
            principal = self.policy.authorize(route.access, request.headers)
            handler: Callable[..., ApiResponse] = getattr(self, route.handler)
            return handler(request, principal, **params)
        except BackendError as exc:
            logger.error("Backend failure on %s %s: %s", route.method, request.path, exc)
            return self._internal_error(exc)
        except ContentApiError as exc:
            return ApiResponse(exc.status_code, {"message": exc.message})
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", route.method, request.path)
            return self._internal_error(exc)

    def _internal_error(self, exc: Exception) -> ApiResponse:
        payload = {"message": MESSAGE_INTERNAL_ERROR}
        if self.expose_errors:
            payload["error"] = str(exc)
        return ApiResponse(500, payload)

    @staticmethod
    def _body(request: ApiRequest) -> dict:
        body = request.json()
        if body is _NO_BODY or not isinstance(body, dict):
            raise ValidationError(MESSAGE_INVALID_BODY)
        return body

    def list_public(self, request: ApiRequest, principal) -> ApiResponse:
        records = self.repository.list_public(
            section=request.param("section"), language=request.param("language")
        )
        return ApiResponse(200, [r.as_dict() for r in records])

    def list_admin(self, request: ApiRequest, principal) -> ApiResponse:
        records = self.repository.list_admin(
            section=request.param("section"), language=request.param("language")
        )
        return ApiResponse(200, [r.as_dict() for r in records])

    def get_content(self, request: ApiRequest, principal, content_id: str) -> ApiResponse:
        return ApiResponse(200, self.repository.get_by_id(content_id).as_dict())

    def create_content(self, request: ApiRequest, principal) -> ApiResponse:
        record = self.repository.create(self._body(request))
        return ApiResponse(201, record.as_dict())

    def update_content(
        self, request: ApiRequest, principal, content_id: str
    ) -> ApiResponse:
        record = self.repository.update(content_id, self._body(request))
        return ApiResponse(200, record.as_dict())

    def delete_content(
        self, request: ApiRequest, principal, content_id: str
    ) -> ApiResponse:
        self.repository.delete(content_id)
        return ApiResponse(200, {"message": MESSAGE_CONTENT_DELETED})

    def verify_token(self, request: ApiRequest, principal: AdminPrincipal) -> ApiResponse:
        return ApiResponse(
            200, {"message": "Token is valid", "user": principal.as_dict()}
        )

    def logout(self, request: ApiRequest, principal) -> ApiResponse:
        # Tokens are stateless; the client discards its copy.
        return ApiResponse(200, {"message": "Logout successful"})
