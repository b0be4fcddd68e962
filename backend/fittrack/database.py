# Overview: Transaction scope and schema capability checks on top of the db extension.

from __future__ import annotations

from contextlib import contextmanager
from functools import wraps

from flask import jsonify
from sqlalchemy import inspect as sa_inspect

from .errors import SchemaNotReadyError
from .extensions import db

# Tables added by the schema-enhancements migration. Deployments may run
# without them; features backed by them degrade instead of failing.
OPTIONAL_TABLES = frozenset({
    "measurement_profiles",
    "measurement_expiry_rules",
    "validation_rules",
    "garment_feedback",
    "measurement_reminders",
    "task_assignments",
    "notifications",
    "permissions",
    "backup_logs",
})


@contextmanager
def transaction():
    """
    Run a block of writes as one unit.

    Commits when the block exits normally; rolls back and re-raises otherwise.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def has_table(name: str) -> bool:
    return sa_inspect(db.engine).has_table(name)


def require_tables(*tables: str) -> None:
    """Raise SchemaNotReadyError for the first table that is not present."""
    for table in tables:
        if not has_table(table):
            raise SchemaNotReadyError(table)


def optional_feature(*tables: str, empty: dict):
    """
    Route decorator: answer 200 with `empty` when a backing table is missing.

    Checks the schema before the view runs and also catches a
    SchemaNotReadyError raised from deeper service calls.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                require_tables(*tables)
                return f(*args, **kwargs)
            except SchemaNotReadyError:
                db.session.rollback()
                return jsonify(empty)
        return decorated_function
    return decorator
