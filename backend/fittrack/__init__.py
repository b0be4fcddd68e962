# backend/fittrack/__init__.py
import logging

from flask import Flask, request

from .config import Config, engine_options_for
from .errors import register_error_handlers
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    if "SQLALCHEMY_ENGINE_OPTIONS" not in app.config:
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options_for(
            app.config["SQLALCHEMY_DATABASE_URI"], app.config["DB_CONNECT_TIMEOUT"]
        )

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.customers import customers_bp
    from .routes.measurements import measurements_bp
    from .routes.profiles import profiles_bp
    from .routes.feedback import feedback_bp
    from .routes.templates import templates_bp
    from .routes.orders import orders_bp
    from .routes.fittings import fittings_bp
    from .routes.reminders import reminders_bp
    from .routes.tasks import tasks_bp
    from .routes.notifications import notifications_bp
    from .routes.permissions import permissions_bp
    from .routes.users import users_bp
    from .routes.reports import reports_bp
    from .routes.backup import backup_bp
    from .routes.expiry import expiry_bp
    from .routes.rules import rules_bp
    from .routes.activity import activity_bp
    from .routes.settings import settings_bp
    from .routes.search import search_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(measurements_bp)
    app.register_blueprint(profiles_bp)
    app.register_blueprint(feedback_bp)
    app.register_blueprint(templates_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(fittings_bp)
    app.register_blueprint(reminders_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(permissions_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(backup_bp)
    app.register_blueprint(expiry_bp)
    app.register_blueprint(rules_bp)
    app.register_blueprint(activity_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(search_bp)

    register_error_handlers(app)

    allowed_origins = {
        origin.strip()
        for origin in app.config.get("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    }

    # OPTIONS preflight is answered by Flask's automatic handler before any
    # view (and so before any auth check); this only decorates the response.
    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if allowed_origins:
            if origin in allowed_origins:
                response.headers["Access-Control-Allow-Origin"] = origin
                response.headers["Vary"] = "Origin"
        else:
            response.headers["Access-Control-Allow-Origin"] = origin or "*"
            if origin:
                response.headers["Vary"] = "Origin"
        response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        response.headers["Access-Control-Max-Age"] = "86400"

        if request.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
            response.headers["X-Content-Type-Options"] = "nosniff"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
