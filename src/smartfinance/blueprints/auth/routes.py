"""Registration, login, and session routes."""

from __future__ import annotations

from flask import jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from ...errors import AuthenticationError, NotFoundError
from ...extensions import current_user_id, get_mailer, get_session_factory
from ...forms import parse_payload
from ...logging_config import get_logger
from ...serializers import user_to_dict
from ...services import auth
from . import bp
from .forms import LoginForm, RegisterForm

logger = get_logger(__name__)


@bp.post("/register")
def register():
    form = parse_payload(RegisterForm, request.get_json(silent=True))
    user = auth.create_user(
        name=form.name,
        email=form.email,
        password=form.password,
        session_factory=get_session_factory(),
    )
    login_user(auth.SessionUser.from_user(user))
    logger.info("User registered", extra={"user_id": user.id})
    get_mailer().send_signup_email(to=user.email, name=user.name)
    return jsonify({"message": "User registered successfully", "user": user_to_dict(user)}), 201


@bp.post("/login")
def login():
    form = parse_payload(LoginForm, request.get_json(silent=True))
    user = auth.authenticate(
        email=form.email, password=form.password, session_factory=get_session_factory()
    )
    if user is None:
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid credentials")
    login_user(auth.SessionUser.from_user(user))
    return jsonify({"message": "Login successful", "user": user_to_dict(user)})


@bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"message": "Logged out"})


@bp.get("/me")
@login_required
def me():
    user = auth.get_user(current_user_id(), get_session_factory())
    if user is None:
        raise NotFoundError("User not found")
    return jsonify({"user": user_to_dict(user)})


@bp.get("/status")
def status():
    """Lightweight probe the frontend polls to know whether a session exists."""

    if not current_user.is_authenticated:
        return jsonify({"authenticated": False})
    return jsonify({"authenticated": True, "user": {"id": current_user.id, "email": current_user.email}})
