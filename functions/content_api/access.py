"""
Access policy for content routes.

Public routes run without credentials. Admin routes need a bearer token
whose claims carry ``isAdmin``; tokens are minted by the login service and
only verified here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Protocol, Sequence

import jwt

from content_api.errors import AuthenticationError, AuthorizationError
from shared.constants import (
    MESSAGE_ADMIN_REQUIRED,
    MESSAGE_AUTH_REQUIRED,
    MESSAGE_INVALID_TOKEN,
    MESSAGE_TOKEN_EXPIRED,
)

logger = logging.getLogger(__name__)


class Access(Enum):
    PUBLIC = "public"
    ADMIN = "admin"


@dataclass(frozen=True)
class AdminPrincipal:
    username: str
    is_admin: bool

    def as_dict(self) -> dict:
        return {"username": self.username, "isAdmin": self.is_admin}


class AdminVerifier(Protocol):
    """Raises AuthenticationError/AuthorizationError, or returns the admin."""

    def __call__(self, headers: Mapping[str, str]) -> AdminPrincipal:
        ...


def bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    for name, value in headers.items():
        if name.lower() == "authorization":
            scheme, _, token = (value or "").partition(" ")
            if scheme.lower() == "bearer" and token.strip():
                return token.strip()
            return None
    return None


class JwtAdminVerifier:
    """Verifies HMAC-signed JWTs issued by the admin login."""

    def __init__(self, secret: str, algorithms: Sequence[str] = ("HS256",)):
        self.secret = secret
        self.algorithms = list(algorithms)

    def __call__(self, headers: Mapping[str, str]) -> AdminPrincipal:
        token = bearer_token(headers)
        if not token:
            raise AuthenticationError(MESSAGE_AUTH_REQUIRED)
        try:
            claims = jwt.decode(token, self.secret, algorithms=self.algorithms)
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError(MESSAGE_TOKEN_EXPIRED) from exc
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected token: %s", exc)
            raise AuthenticationError(MESSAGE_INVALID_TOKEN) from exc
        if claims.get("isAdmin") is not True:
            raise AuthorizationError(MESSAGE_ADMIN_REQUIRED)
        return AdminPrincipal(username=str(claims.get("username", "")), is_admin=True)


class AccessPolicy:
    """Single gate applied before admin operations reach the repository."""

    def __init__(self, verify_admin: AdminVerifier):
        self.verify_admin = verify_admin

    def authorize(
        self, access: Access, headers: Mapping[str, str]
    ) -> Optional[AdminPrincipal]:
        if access is Access.PUBLIC:
            return None
        return self.verify_admin(headers)
