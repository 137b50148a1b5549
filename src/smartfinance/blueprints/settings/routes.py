"""User preference routes."""

from __future__ import annotations

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from ...errors import NotFoundError
from ...extensions import current_user_id, get_mailer, get_session_factory
from ...forms import parse_payload
from ...logging_config import get_logger
from ...serializers import user_to_dict
from ...services import auth
from ...services.mailer import DELIVERY_ERRORS
from . import bp
from .forms import PreferencesForm, SendEmailForm

logger = get_logger(__name__)


@bp.get("/preferences")
@login_required
def get_preferences():
    user = auth.get_user(current_user_id(), get_session_factory())
    if user is None:
        raise NotFoundError("User not found")
    return jsonify({"user": user_to_dict(user)})


@bp.put("/preferences")
@login_required
def update_preferences():
    form = parse_payload(PreferencesForm, request.get_json(silent=True))
    config = current_app.config["SMARTFINANCE_CONFIG"]
    user = auth.update_preferences(
        user_id=current_user_id(),
        changes=form.changes(),
        session_factory=get_session_factory(),
        currencies=config.SUPPORTED_CURRENCIES,
        date_formats=config.SUPPORTED_DATE_FORMATS,
    )
    return jsonify({"message": "Preferences updated successfully", "user": user_to_dict(user)})


@bp.post("/send-email")
@login_required
def send_email():
    """Send a test message, to the signed-in user unless ``to`` is given."""

    form = parse_payload(SendEmailForm, request.get_json(silent=True) or {})
    mailer = get_mailer()
    if not mailer.configured:
        return jsonify({"error": "Email is not configured"}), 503
    try:
        message_id = mailer.send(
            to=form.to or current_user.email,
            subject=form.subject,
            text=form.text,
            html=form.html,
        )
    except DELIVERY_ERRORS:
        logger.error("Test email failed", exc_info=True)
        return jsonify({"error": "Failed to send email"}), 502
    return jsonify({"messageId": message_id})
