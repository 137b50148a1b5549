from __future__ import annotations

import smtplib

import pytest

from smartfinance.config import BaseConfig
from smartfinance.services import mailer as mailer_module
from smartfinance.services.budgeting import BudgetAlert
from smartfinance.services.mailer import Mailer, render_budget_alert, render_error_report


@pytest.fixture
def config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> BaseConfig:
    monkeypatch.setenv("SMARTFINANCE_DATA_DIR", str(tmp_path))
    for name in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS", "SMTP_FROM", "ADMIN_EMAIL"):
        monkeypatch.delenv(name, raising=False)
    return BaseConfig()


def _alert(**overrides) -> BudgetAlert:
    fields = dict(
        recipient="asha@example.com",
        budget_id=1,
        budget_name="Groceries",
        category="Food",
        spent=450.0,
        amount=500.0,
        percentage=90.0,
        threshold=80.0,
    )
    fields.update(overrides)
    return BudgetAlert(**fields)


def test_render_budget_alert():
    subject, text, html = render_budget_alert(_alert(percentage=94.4))

    assert subject == "Budget Alert: Groceries at 94%"
    assert '"Groceries" (Food) has reached 94.4%' in text
    assert "Alert Threshold: 80%" in text
    assert "<b>Groceries</b>" in html


def test_render_error_report_includes_stack():
    try:
        raise RuntimeError("db down")
    except RuntimeError as exc:
        subject, text, _ = render_error_report(route="/api/goals", method="POST", error=exc, user_email="a@b.c")

    assert subject == "SFT: Error in POST /api/goals"
    assert "Message: db down" in text
    assert "User: a@b.c" in text
    assert "RuntimeError" in text


def test_send_without_smtp_returns_none(config):
    assert Mailer(config).send(to="a@b.c", subject="Hi", text="x") is None


def test_deliver_uses_starttls_and_login(config, monkeypatch: pytest.MonkeyPatch):
    config.SMTP_HOST = "smtp.example.com"
    config.SMTP_USER = "bot@example.com"
    config.SMTP_PASS = "pw"
    sent = []

    class FakeSMTP:
        def __init__(self, host, port, timeout):
            self.host, self.port = host, port
            self.calls = []

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def ehlo(self):
            self.calls.append("ehlo")

        def has_extn(self, name):
            return name == "starttls"

        def starttls(self):
            self.calls.append("starttls")

        def login(self, user, password):
            self.calls.append(("login", user))

        def send_message(self, message):
            sent.append((self, message))

    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)

    message_id = Mailer(config).send(to="asha@example.com", subject="Hello", text="Body", html="<p>Body</p>")

    client, message = sent[0]
    assert message_id == message["Message-ID"]
    assert message["To"] == "asha@example.com"
    assert message["From"] == "bot@example.com"
    assert (client.host, client.port) == ("smtp.example.com", 587)
    assert "starttls" in client.calls
    assert ("login", "bot@example.com") in client.calls


def test_budget_alert_delivery_failure_is_swallowed(config, monkeypatch: pytest.MonkeyPatch):
    config.SMTP_HOST = "smtp.example.com"
    config.SMTP_USER = "bot@example.com"
    config.SMTP_PASS = "pw"

    def _refuse(self, message):
        raise smtplib.SMTPServerDisconnected("gone")

    monkeypatch.setattr(Mailer, "deliver", _refuse)

    assert Mailer(config).notify_budget_threshold(_alert()) is False


def test_budget_alert_reports_whether_it_was_sent(config, monkeypatch: pytest.MonkeyPatch):
    assert Mailer(config).notify_budget_threshold(_alert()) is False

    config.SMTP_HOST = "smtp.example.com"
    config.SMTP_USER = "bot@example.com"
    config.SMTP_PASS = "pw"
    monkeypatch.setattr(Mailer, "deliver", lambda self, message: "<sent@example.com>")

    assert Mailer(config).notify_budget_threshold(_alert()) is True


def test_budget_alerts_respect_toggle(config, monkeypatch: pytest.MonkeyPatch):
    config.BUDGET_EMAIL_ENABLED = False
    calls = []
    monkeypatch.setattr(Mailer, "send", lambda self, **kwargs: calls.append(kwargs))

    assert Mailer(config).notify_budget_threshold(_alert()) is False
    assert calls == []


def test_error_email_goes_to_admin_when_enabled(config, monkeypatch: pytest.MonkeyPatch):
    config.ERROR_EMAIL_ENABLED = True
    config.ADMIN_EMAIL = "ops@example.com"
    calls = []
    monkeypatch.setattr(Mailer, "send", lambda self, **kwargs: calls.append(kwargs))

    Mailer(config).send_error_email(route="/x", method="GET", error=ValueError("boom"))

    assert calls[0]["to"] == "ops@example.com"
    assert calls[0]["subject"] == "SFT: Error in GET /x"
