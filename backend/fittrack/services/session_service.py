# Overview: Turns a request's bearer token into a Principal and enforces role membership.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from ..errors import AuthenticationError, AuthorizationError
from . import token_service


@dataclass(frozen=True)
class Principal:
    """Authenticated identity derived from a verified token. Never read from the request body."""
    id: int
    email: str
    role: str

    def to_dict(self) -> dict:
        return {"userId": self.id, "email": self.email, "role": self.role}


def principal_from_claims(claims: dict) -> Principal:
    try:
        return Principal(id=int(claims["userId"]), email=claims["email"], role=claims["role"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid or expired token")


def require_auth(request) -> Principal:
    """
    Authenticate a request.

    Raises AuthenticationError (401) when the Authorization header is missing,
    is not of the form 'Bearer <token>', or the token fails verification.
    Does not touch the database.
    """
    token = token_service.extract_token(request.headers.get("Authorization"))
    if not token:
        raise AuthenticationError("Authentication required")
    return principal_from_claims(token_service.verify_token(token))


def require_role(allowed: Iterable[str]) -> Callable:
    """Build a check that authenticates and then requires role membership (403 otherwise)."""
    allowed = frozenset(allowed)

    def check(request) -> Principal:
        principal = require_auth(request)
        if principal.role not in allowed:
            raise AuthorizationError("Insufficient permissions")
        return principal

    return check
