# Overview: Health check route.

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..extensions import db

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except Exception:
        current_app.logger.exception("Health check database probe failed")
        db.session.rollback()
        database = "error"
    return jsonify({"status": "ok", "database": database})
