"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Smart Finance Tracker"
    DB_FILENAME = "smartfinance.db"
    TESTING = False
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}
    SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "INR", "CAD", "AUD")
    SUPPORTED_DATE_FORMATS = ("MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD")

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("SMARTFINANCE_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("SMARTFINANCE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("SMARTFINANCE_DATABASE_URL", self._build_sqlite_url())
        self.PERMANENT_SESSION_LIFETIME = _env_int("SESSION_LIFETIME_SECONDS", 60 * 60)

        self.SMTP_HOST = os.getenv("SMTP_HOST")
        self.SMTP_PORT = _env_int("SMTP_PORT", 587)
        self.SMTP_SECURE = _env_bool("SMTP_SECURE", default=False)
        self.SMTP_USER = os.getenv("SMTP_USER")
        self.SMTP_PASS = os.getenv("SMTP_PASS")
        self.SMTP_FROM = os.getenv("SMTP_FROM")
        self.ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
        self.ERROR_EMAIL_ENABLED = _env_bool("ERROR_EMAIL_ENABLED", default=False)
        self.SIGNUP_EMAIL_ENABLED = _env_bool("SIGNUP_EMAIL_ENABLED", default=True)
        self.BUDGET_EMAIL_ENABLED = _env_bool("BUDGET_EMAIL_ENABLED", default=True)

        self.RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
        self.RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
        self.RAZORPAY_WEBHOOK_SECRET = os.getenv("RAZORPAY_WEBHOOK_SECRET", "")

        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("SMARTFINANCE_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("SMARTFINANCE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def smtp_configured(self) -> bool:
        """True when enough SMTP settings exist to open a connection."""

        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASS)

    @property
    def mail_sender(self) -> str:
        return self.SMTP_FROM or self.SMTP_USER or ""

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if not self.DATABASE_URL.startswith("sqlite"):
            return {"pool_pre_ping": True}
        return {"connect_args": {"check_same_thread": False}}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration used by the test-suite; never sends real email."""

    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.SIGNUP_EMAIL_ENABLED = False
        self.ERROR_EMAIL_ENABLED = False
        self.SECRET_KEY = os.getenv("SMARTFINANCE_SECRET_KEY", "testing-secret")
