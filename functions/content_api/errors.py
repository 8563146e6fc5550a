"""
Error taxonomy for the content API.

Each error carries the HTTP status the router answers with; the message is
returned to the caller verbatim as ``{"message": ...}``.
"""

from __future__ import annotations


class ContentApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ContentApiError):
    """Missing or invalid field, or an unknown enum value."""

    status_code = 400


class AuthenticationError(ContentApiError):
    """Missing, malformed, invalid or expired token."""

    status_code = 401


class AuthorizationError(ContentApiError):
    """Valid token without the admin claim."""

    status_code = 403


class NotFoundError(ContentApiError):
    status_code = 404


class BackendError(ContentApiError):
    """The storage backend failed; details stay in the logs."""

    status_code = 500
