from __future__ import annotations

import pytest

from smartfinance import _resolve_config
from smartfinance import config as cfg
from smartfinance.config import BaseConfig, DevConfig


@pytest.fixture(autouse=True)
def _isolated_data_dir(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SMARTFINANCE_DATA_DIR", str(tmp_path))
    for name in ("SMARTFINANCE_DATABASE_URL", "SMTP_HOST", "SMTP_USER", "SMTP_PASS", "SMTP_FROM"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    config = BaseConfig()

    assert config.DATA_DIR == tmp_path.resolve()
    assert config.DATABASE_URL == f"sqlite:///{tmp_path.resolve() / 'smartfinance.db'}"
    assert config.PERMANENT_SESSION_LIFETIME == 3600
    assert config.SMTP_PORT == 587
    assert config.SIGNUP_EMAIL_ENABLED is True
    assert config.ERROR_EMAIL_ENABLED is False
    assert config.smtp_configured is False
    assert config.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SMTP_HOST", "mail.example.com")
    monkeypatch.setenv("SMTP_USER", "bot@example.com")
    monkeypatch.setenv("SMTP_PASS", "pw")
    monkeypatch.setenv("SMTP_PORT", "not-a-number")
    monkeypatch.setenv("SMTP_SECURE", "yes")
    monkeypatch.setenv("SMARTFINANCE_DATABASE_URL", "postgresql://db/finance")

    config = BaseConfig()

    assert config.smtp_configured is True
    assert config.mail_sender == "bot@example.com"
    assert config.SMTP_PORT == 587
    assert config.SMTP_SECURE is True
    assert config.sqlalchemy_engine_options() == {"pool_pre_ping": True}


def test_secret_required_outside_dev_mode(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SMARTFINANCE_DEV_MODE", "false")
    monkeypatch.delenv("SMARTFINANCE_SECRET_KEY", raising=False)

    with pytest.raises(ValueError):
        BaseConfig()


def test_test_config_disables_outbound_email():
    config = cfg.TestConfig()

    assert config.TESTING is True
    assert config.SIGNUP_EMAIL_ENABLED is False
    assert config.ERROR_EMAIL_ENABLED is False


def test_resolve_config_by_name():
    assert _resolve_config("development") is DevConfig
    assert _resolve_config("TESTING") is cfg.TestConfig
    assert _resolve_config(None) is BaseConfig
    assert _resolve_config("unknown") is BaseConfig
