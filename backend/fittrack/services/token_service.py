# Overview: Issues and verifies signed bearer tokens carrying {userId, email, role}.

"""
Tokens are HS256 JWTs signed with JWT_SECRET and valid for JWT_EXPIRES_DAYS
(7 by default). Nothing is stored server-side; a token is valid until it
expires.

SECURITY: in production the development default secret is refused for both
signing and verification.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

import jwt
from flask import current_app

from ..config import DEFAULT_JWT_SECRET
from ..errors import AuthenticationError
from ..time_utils import utcnow

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "


def _secret() -> str:
    secret = current_app.config.get("JWT_SECRET") or DEFAULT_JWT_SECRET
    if current_app.config.get("APP_ENV") == "production" and secret == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set in production")
    return secret


def generate_token(payload: dict) -> str:
    """Sign {userId, email, role} with an iat/exp window."""
    now = utcnow()
    days = current_app.config.get("JWT_EXPIRES_DAYS", 7)
    claims = {
        "userId": payload["userId"],
        "email": payload["email"],
        "role": payload["role"],
        "iat": now,
        "exp": now + timedelta(days=days),
    }
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    try:
        return jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Invalid or expired token")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid or expired token")


def extract_token(auth_header: Optional[str]) -> Optional[str]:
    """Return the token from 'Bearer <token>', or None for anything else."""
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    token = auth_header[len(BEARER_PREFIX):].strip()
    return token or None
