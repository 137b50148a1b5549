"""Pytest configuration and shared fixtures for Smart Finance Tracker tests.

This module provides database fixtures, test data factories, and fake
collaborators (mailer, payment client) so rules, repositories, and routes can
be exercised without touching the real app database or network.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import razorpay
from sqlmodel import SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from smartfinance.models import Budget, Goal, GoalMilestone, Transaction, User
from smartfinance.models.base import utcnow
from smartfinance.infra.database import create_session_factory
from smartfinance.infra.repositories import (
    SQLModelBudgetRepository,
    SQLModelGoalRepository,
    SQLModelTransactionRepository,
)
from smartfinance.services import auth
from smartfinance.services.budgeting import BudgetAlert
from smartfinance.services.mailer import Mailer, OutgoingEmail
from smartfinance.services.payments import RazorpayGateway

TEST_KEY_ID = "rzp_test_key"
TEST_KEY_SECRET = "rzp_test_secret"
TEST_WEBHOOK_SECRET = "rzp_webhook_secret"

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory with the same commit/rollback semantics as the app."""

    return create_session_factory(db_engine)


@pytest.fixture
def user(session_factory) -> User:
    """Create a default user for scoping data."""

    return auth.create_user(
        name="Tester",
        email="tester@example.com",
        password="correct-horse",
        session_factory=session_factory,
    )


@pytest.fixture
def budget_repo(session_factory) -> SQLModelBudgetRepository:
    return SQLModelBudgetRepository(session_factory)


@pytest.fixture
def transaction_repo(session_factory) -> SQLModelTransactionRepository:
    return SQLModelTransactionRepository(session_factory)


@pytest.fixture
def goal_repo(session_factory) -> SQLModelGoalRepository:
    return SQLModelGoalRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def budget_factory(budget_repo, user):
    """Factory for creating persisted budgets over March 2024 by default."""

    def _create_budget(
        *,
        name: str = "Food budget",
        category: str = "Food",
        subcategory: str | None = None,
        amount: float = 500.0,
        spent: float = 0.0,
        period_start: date = date(2024, 3, 1),
        period_end: date = date(2024, 3, 31),
        is_active: bool = True,
        alerts_enabled: bool = True,
        alert_threshold: float = 80.0,
        alert_channels: list[str] | None = None,
        owner: User | None = None,
    ) -> Budget:
        owner = owner or user
        budget = Budget(
            name=name,
            category=category,
            subcategory=subcategory,
            amount=amount,
            spent=spent,
            period_start=period_start,
            period_end=period_end,
            period_type="monthly",
            is_active=is_active,
            alerts_enabled=alerts_enabled,
            alert_threshold=alert_threshold,
            alert_channels=["email"] if alert_channels is None else alert_channels,
        )
        return budget_repo.create(budget, user_id=owner.id)

    return _create_budget


@pytest.fixture
def transaction_factory(transaction_repo, user):
    """Factory for creating persisted transactions.

    Amounts are positive; ``kind`` decides whether it is income or expense.
    """

    def _create_transaction(
        amount: float,
        *,
        kind: str = "expense",
        category: str = "Food",
        subcategory: str | None = None,
        description: str = "Test transaction",
        occurred_at: datetime | None = None,
        owner: User | None = None,
    ) -> Transaction:
        owner = owner or user
        transaction = Transaction(
            kind=kind,
            category=category,
            subcategory=subcategory,
            amount=amount,
            description=description,
            occurred_at=occurred_at or datetime(2024, 3, 15, 12, 0),
        )
        return transaction_repo.create(transaction, user_id=owner.id)

    return _create_transaction


@pytest.fixture
def goal_factory(goal_repo, user):
    """Factory for creating persisted goals with optional milestones."""

    def _create_goal(
        *,
        title: str = "Emergency fund",
        target_amount: float = 1000.0,
        current_amount: float = 0.0,
        milestones: list[tuple[float, str]] | None = None,
        is_completed: bool = False,
        priority: str = "medium",
        target_date: datetime | None = None,
        owner: User | None = None,
    ) -> Goal:
        owner = owner or user
        goal = Goal(
            title=title,
            goal_type="savings",
            target_amount=target_amount,
            current_amount=current_amount,
            target_date=target_date or utcnow() + timedelta(days=180),
            is_completed=is_completed,
            priority=priority,
            category="Savings",
        )
        milestone_rows = [
            GoalMilestone(amount=amount, description=description)
            for amount, description in (milestones or [])
        ]
        return goal_repo.create(goal, milestone_rows, user_id=owner.id)

    return _create_goal


# =============================================================================
# Fake collaborators
# =============================================================================


@dataclass
class RecordingNotifier:
    """Collects budget alerts instead of emailing them."""

    alerts: list[BudgetAlert] = field(default_factory=list)
    fail: bool = False

    def notify_budget_threshold(self, alert: BudgetAlert) -> bool:
        if self.fail:
            raise RuntimeError("notifier offline")
        self.alerts.append(alert)
        return True


class RecordingMailer(Mailer):
    """Mailer that keeps outgoing messages in memory."""

    def __init__(self, config):
        super().__init__(config)
        self.outbox: list[OutgoingEmail] = []

    def deliver(self, message: OutgoingEmail) -> str:
        self.outbox.append(message)
        return f"<test-{len(self.outbox)}@smartfinance.test>"


class _FakeOrders:
    def __init__(self):
        self.created: list[dict[str, Any]] = []

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        self.created.append(data)
        return {
            "id": f"order_test_{len(self.created)}",
            "entity": "order",
            "amount": data["amount"],
            "currency": data["currency"],
            "receipt": data["receipt"],
            "status": "created",
        }


class _FakePayments:
    def __init__(self):
        self.status = "captured"

    def fetch(self, payment_id: str) -> dict[str, Any]:
        return {
            "id": payment_id,
            "status": self.status,
            "amount": 50000,
            "currency": "INR",
            "method": "upi",
            "captured": self.status == "captured",
        }


class FakeRazorpayClient:
    """Stands in for ``razorpay.Client`` with canned gateway responses.

    Signature checks run through the SDK's own ``utility`` so they stay offline.
    """

    def __init__(self, auth: tuple[str, str] = (TEST_KEY_ID, TEST_KEY_SECRET)):
        self.auth = auth
        self.order = _FakeOrders()
        self.payment = _FakePayments()
        self.utility = razorpay.Client(auth=auth).utility


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def razorpay_client() -> FakeRazorpayClient:
    return FakeRazorpayClient()


@pytest.fixture
def gateway(razorpay_client) -> RazorpayGateway:
    return RazorpayGateway(
        key_id=TEST_KEY_ID,
        key_secret=TEST_KEY_SECRET,
        webhook_secret=TEST_WEBHOOK_SECRET,
        client=razorpay_client,
    )


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch: pytest.MonkeyPatch, gateway):
    """Flask app on a throwaway database with fake mail and payment backends."""

    monkeypatch.setenv("SMARTFINANCE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SMARTFINANCE_DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("SMTP_HOST", "smtp.test")
    monkeypatch.setenv("SMTP_USER", "alerts@smartfinance.test")
    monkeypatch.setenv("SMTP_PASS", "secret")

    from smartfinance import create_app

    app = create_app("testing")
    app.extensions["smartfinance.mailer"] = RecordingMailer(app.config["SMARTFINANCE_CONFIG"])
    app.extensions["smartfinance.gateway"] = gateway
    return app


@pytest.fixture
def mailer(app) -> RecordingMailer:
    return app.extensions["smartfinance.mailer"]


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def auth_client(client):
    """Test client with a registered, signed-in user."""

    response = client.post(
        "/api/auth/register",
        json={"name": "Asha", "email": "asha@example.com", "password": "s3cret-pass"},
    )
    assert response.status_code == 201, response.get_json()
    return client
