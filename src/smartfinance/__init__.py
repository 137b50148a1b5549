"""Smart Finance Tracker application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, jsonify, request
from flask_login import current_user
from werkzeug.exceptions import HTTPException

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig
from .errors import DomainError
from .logging_config import get_logger, setup_logging

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}

logger = get_logger(__name__)


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths in registration order."""

    yield "smartfinance.blueprints.home"
    yield "smartfinance.blueprints.auth"
    yield "smartfinance.blueprints.transactions"
    yield "smartfinance.blueprints.budgets"
    yield "smartfinance.blueprints.goals"
    yield "smartfinance.blueprints.payments"
    yield "smartfinance.blueprints.settings"
    yield "smartfinance.blueprints.analytics"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_cls = _resolve_config(config_name or app.config.get("ENV"))
    config_obj = config_cls()
    app.config.from_object(config_obj)
    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", config_obj.sqlalchemy_engine_options())
    app.config["SMARTFINANCE_CONFIG"] = config_obj

    setup_logging(config_obj)

    # Imported here so model mappers are only configured once an app exists
    from .extensions import init_db, init_login, init_services

    init_db(app)
    init_login(app)
    init_services(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _cli.init_app(app)

    logger.info("Application created", extra={"config": config_cls.__name__})
    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(error: DomainError):
        body: dict[str, object] = {"error": error.message}
        if error.details:
            body["details"] = error.details
        return jsonify(body), error.status_code

    @app.errorhandler(HTTPException)
    def _http_error(error: HTTPException):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(Exception)
    def _unhandled(error: Exception):
        logger.exception(
            "Unhandled error",
            extra={"route": request.path, "method": request.method},
        )
        from .extensions import get_mailer

        user_email = current_user.email if current_user.is_authenticated else None
        get_mailer().send_error_email(
            route=request.path,
            method=request.method,
            error=error,
            user_email=user_email,
        )
        return jsonify({"error": "Internal server error"}), 500


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
