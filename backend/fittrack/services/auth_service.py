# Overview: Password hashing, credential checks and user creation.

"""
Passwords are hashed with bcrypt. Login compares emails case-insensitively
and answers the same error for an unknown email and a wrong password.
"""

from __future__ import annotations

import bcrypt
from flask import current_app
from sqlalchemy import func

from ..errors import AuthenticationError, ConflictError, ValidationError
from ..extensions import db
from ..models import User, ROLES
from ..validation import ensure_text, is_blank, validate_email
from . import token_service

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def authenticate(email: str, password: str) -> dict:
    """Check credentials and return {token, user}."""
    email = ensure_text(email, "email")
    password = ensure_text(password, "password")
    if is_blank(email) or is_blank(password):
        raise ValidationError("Email and password are required")

    user = get_user_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")

    token = token_service.generate_token({"userId": user.id, "email": user.email, "role": user.role})
    return {
        "token": token,
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "branch": user.branch,
        },
    }


def create_user(name: str, email: str, password: str, role: str = "tailor", branch: str | None = None) -> User:
    name = ensure_text(name, "name")
    password = ensure_text(password, "password")
    branch = ensure_text(branch, "branch")
    if is_blank(name):
        raise ValidationError("Name is required")
    if not validate_email(email):
        raise ValidationError("A valid email is required")
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if get_user_by_email(email):
        raise ConflictError("A user with this email already exists")

    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role=role,
        branch=branch or None,
    )
    db.session.add(user)
    db.session.commit()
    return user


def get_user(user_id: int) -> User | None:
    return db.session.get(User, user_id)


def list_users(role: str | None = None) -> list[User]:
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role).order_by(User.name)
    else:
        query = query.order_by(User.role, User.name)
    return query.all()
