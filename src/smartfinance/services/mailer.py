"""Outbound email: welcome messages, budget alerts, and error reports."""

from __future__ import annotations

import smtplib
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import make_msgid
from html import escape
from typing import Any, Iterable, Mapping, Optional

from ..config import BaseConfig
from ..logging_config import get_logger
from .budgeting import BudgetAlert

logger = get_logger(__name__)

# Mail delivery failures we log and swallow; anything else is a bug and propagates.
DELIVERY_ERRORS = (smtplib.SMTPException, OSError)


@dataclass(slots=True)
class OutgoingEmail:
    """A composed message prior to delivery."""

    to: list[str]
    subject: str
    text: str = ""
    html: str = ""
    sender: str = ""
    headers: dict[str, str] = field(default_factory=dict)


class Mailer:
    """Thin SMTP wrapper configured from :class:`BaseConfig`.

    ``send`` returns ``None`` when SMTP is not configured so callers can treat
    email as optional. The ``send_*`` helpers never raise.
    """

    def __init__(self, config: BaseConfig, *, timeout: float = 10.0):
        self.config = config
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return self.config.smtp_configured

    def compose(
        self,
        *,
        to: str | Iterable[str],
        subject: str,
        text: str = "",
        html: str = "",
        sender: Optional[str] = None,
    ) -> OutgoingEmail:
        recipients = [to] if isinstance(to, str) else list(to)
        return OutgoingEmail(
            to=recipients,
            subject=subject,
            text=text,
            html=html,
            sender=sender or self.config.mail_sender,
        )

    def send(
        self,
        *,
        to: str | Iterable[str],
        subject: str,
        text: str = "",
        html: str = "",
        sender: Optional[str] = None,
    ) -> Optional[str]:
        """Deliver a message and return its Message-ID."""

        if not self.configured:
            logger.warning("SMTP not configured; skipping email", extra={"subject": subject})
            return None
        message = self.compose(to=to, subject=subject, text=text, html=html, sender=sender)
        return self.deliver(message)

    def deliver(self, message: OutgoingEmail) -> str:
        email = EmailMessage()
        message_id = make_msgid(domain=(message.sender.split("@")[-1] or None))
        email["Message-ID"] = message_id
        email["From"] = message.sender
        email["To"] = ", ".join(message.to)
        email["Subject"] = message.subject
        for key, value in message.headers.items():
            email[key] = value
        email.set_content(message.text or "")
        if message.html:
            email.add_alternative(message.html, subtype="html")

        cfg = self.config
        if cfg.SMTP_SECURE:
            client: smtplib.SMTP = smtplib.SMTP_SSL(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=self.timeout)
        else:
            client = smtplib.SMTP(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=self.timeout)
        with client:
            if not cfg.SMTP_SECURE:
                client.ehlo()
                if client.has_extn("starttls"):
                    client.starttls()
                    client.ehlo()
            client.login(cfg.SMTP_USER or "", cfg.SMTP_PASS or "")
            client.send_message(email)
        logger.info("Email sent", extra={"subject": message.subject, "message_id": message_id})
        return message_id

    def send_signup_email(self, *, to: str, name: Optional[str] = None) -> None:
        if not self.config.SIGNUP_EMAIL_ENABLED:
            return
        text, html = render_signup_email(name)
        try:
            self.send(to=to, subject="Welcome to Smart Finance Tracker", text=text, html=html)
        except DELIVERY_ERRORS:
            logger.warning("Failed to send signup email", exc_info=True, extra={"to": to})

    def notify_budget_threshold(self, alert: BudgetAlert) -> bool:
        """Email a threshold alert; True only once SMTP accepted the message."""

        if not self.config.BUDGET_EMAIL_ENABLED:
            return False
        subject, text, html = render_budget_alert(alert)
        try:
            message_id = self.send(to=alert.recipient, subject=subject, text=text, html=html)
        except DELIVERY_ERRORS:
            logger.warning(
                "Failed to send budget exceeded email",
                exc_info=True,
                extra={"budget_id": alert.budget_id},
            )
            return False
        return message_id is not None

    def send_error_email(
        self,
        *,
        route: str,
        method: Optional[str],
        error: BaseException,
        user_email: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Report an unhandled request error to the admin mailbox when enabled."""

        admin = self.config.ADMIN_EMAIL or self.config.mail_sender
        if not self.config.ERROR_EMAIL_ENABLED or not admin:
            return
        subject, text, html = render_error_report(
            route=route, method=method, error=error, user_email=user_email, extra=extra
        )
        try:
            self.send(to=admin, subject=subject, text=text, html=html)
        except DELIVERY_ERRORS:
            logger.warning("Failed to send error email", exc_info=True)


def render_signup_email(name: Optional[str]) -> tuple[str, str]:
    greeting = f"Hi {name}," if name else "Hi,"
    text = (
        f"{greeting}\n\n"
        "Welcome to Smart Finance Tracker! Your account has been created successfully.\n\n"
        "You can now sign in and start tracking your finances.\n\n"
        "- Smart Finance Tracker"
    )
    html = (
        f"<p>{escape(greeting)}</p>"
        "<p>Welcome to <b>Smart Finance Tracker</b>! Your account has been created successfully.</p>"
        "<p>You can now sign in and start tracking your finances.</p>"
        "<p>- Smart Finance Tracker</p>"
    )
    return text, html


def render_budget_alert(alert: BudgetAlert) -> tuple[str, str, str]:
    label = f' ({alert.category})' if alert.category else ""
    subject = f"Budget Alert: {alert.budget_name} at {round(alert.percentage)}%"
    text = (
        f'Your budget "{alert.budget_name}"{label} has reached {alert.percentage:.1f}% of its limit.\n\n'
        f"Spent: {alert.spent:g}\n"
        f"Limit: {alert.amount:g}\n"
        f"Alert Threshold: {alert.threshold:g}%\n\n"
        "Consider adjusting your spending or budget."
    )
    html = (
        f"<p>Your budget <b>{escape(alert.budget_name)}</b>{escape(label)} has reached "
        f"<b>{alert.percentage:.1f}%</b> of its limit.</p>"
        "<ul>"
        f"<li>Spent: <b>{alert.spent:g}</b></li>"
        f"<li>Limit: <b>{alert.amount:g}</b></li>"
        f"<li>Alert Threshold: <b>{alert.threshold:g}%</b></li>"
        "</ul>"
        "<p>Consider adjusting your spending or budget.</p>"
    )
    return subject, text, html


def render_error_report(
    *,
    route: str,
    method: Optional[str],
    error: BaseException,
    user_email: Optional[str] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> tuple[str, str, str]:
    subject = f"SFT: Error in {method or 'REQUEST'} {route}"
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    lines = [
        f"Route: {route}",
        f"Method: {method or 'N/A'}",
        f"User: {user_email}" if user_email else "",
        f"Time: {datetime.now(timezone.utc).isoformat()}",
        f"Message: {error}",
    ]
    if extra:
        lines.extend(f"{key}: {value}" for key, value in extra.items())
    if stack:
        lines.append(f"\nStack:\n{stack}")
    body = "\n".join(line for line in lines if line)
    html = f'<pre style="font-family: monospace; white-space: pre-wrap;">{escape(body)}</pre>'
    return subject, body, html


__all__ = [
    "DELIVERY_ERRORS",
    "Mailer",
    "OutgoingEmail",
    "render_budget_alert",
    "render_error_report",
    "render_signup_email",
]
