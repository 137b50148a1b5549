"""Database, login, mailer, and gateway wiring for the Flask app."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from flask import Flask, current_app, jsonify
from flask_login import LoginManager, current_user
from sqlmodel import Session

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import (
    SQLModelBudgetRepository,
    SQLModelGoalRepository,
    SQLModelTransactionRepository,
)
from .services import auth
from .services.mailer import Mailer
from .services.payments import RazorpayGateway

login_manager = LoginManager()

_ENGINE_KEY = "smartfinance.engine"
_SESSION_FACTORY_KEY = "smartfinance.session_factory"
_MAILER_KEY = "smartfinance.mailer"
_GATEWAY_KEY = "smartfinance.gateway"


def init_db(app: Flask) -> None:
    """Create the engine, ensure tables exist, and expose a session factory."""

    config: BaseConfig = app.config["SMARTFINANCE_CONFIG"]
    engine, factory = bootstrap_database(config)
    app.extensions[_ENGINE_KEY] = engine
    app.extensions[_SESSION_FACTORY_KEY] = factory


def init_login(app: Flask) -> None:
    login_manager.init_app(app)

    @login_manager.user_loader
    def _load_user(user_id: str):
        try:
            user = auth.get_user(int(user_id), get_session_factory())
        except ValueError:
            return None
        return auth.SessionUser.from_user(user) if user else None

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "Unauthorized"}), 401


def init_services(app: Flask) -> None:
    config: BaseConfig = app.config["SMARTFINANCE_CONFIG"]
    app.extensions.setdefault(_MAILER_KEY, Mailer(config))


def get_engine():
    """Return the engine bound to the current app."""

    engine = current_app.extensions.get(_ENGINE_KEY)
    if engine is None:  # pragma: no cover - only outside create_app
        raise RuntimeError("Database engine not initialized")
    return engine


def get_session_factory() -> SessionFactory:
    return current_app.extensions[_SESSION_FACTORY_KEY]


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around operations."""

    with get_session_factory()() as session:
        yield session


def get_mailer() -> Mailer:
    return current_app.extensions[_MAILER_KEY]


def get_gateway() -> RazorpayGateway:
    """Return the app's payment gateway, building the SDK client on first use."""

    gateway = current_app.extensions.get(_GATEWAY_KEY)
    if gateway is None:
        gateway = RazorpayGateway.from_config(current_app.config["SMARTFINANCE_CONFIG"])
        current_app.extensions[_GATEWAY_KEY] = gateway
    return gateway


def transaction_repository() -> SQLModelTransactionRepository:
    return SQLModelTransactionRepository(get_session_factory())


def budget_repository() -> SQLModelBudgetRepository:
    return SQLModelBudgetRepository(get_session_factory())


def goal_repository() -> SQLModelGoalRepository:
    return SQLModelGoalRepository(get_session_factory())


def current_user_id() -> int:
    return int(current_user.get_id())
