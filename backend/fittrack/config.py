# backend/fittrack/config.py
from __future__ import annotations
import os

DEFAULT_JWT_SECRET = "dev-jwt-secret-change-me"


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the backend by default; DATABASE_URL points at Postgres in deployments
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///fittrack.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Seconds the driver waits for a connection before giving up
    DB_CONNECT_TIMEOUT = _int_env("DB_CONNECT_TIMEOUT", 10)

    APP_ENV = os.environ.get("APP_ENV", os.environ.get("NODE_ENV", "development"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Bearer tokens
    JWT_SECRET = os.environ.get("JWT_SECRET", DEFAULT_JWT_SECRET)
    JWT_EXPIRES_DAYS = _int_env("JWT_EXPIRES_DAYS", 7)

    BCRYPT_ROUNDS = _int_env("BCRYPT_ROUNDS", 12)

    # Comma separated; empty means any origin is echoed back
    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "")

    DEFAULT_PAGE_LIMIT = 20
    MAX_PAGE_LIMIT = 100


def engine_options_for(uri: str, connect_timeout: int) -> dict:
    """Driver-level connection timeout; everything else is left to SQLAlchemy defaults."""
    if uri.startswith("sqlite"):
        return {"connect_args": {"timeout": connect_timeout}}
    return {"pool_pre_ping": True, "connect_args": {"connect_timeout": connect_timeout}}
