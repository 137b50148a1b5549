"""SQLModel implementation of the budget repository."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import update
from sqlmodel import select

from ...models.base import utcnow
from ...models.budget import Budget
from ..database import SessionFactory


class SQLModelBudgetRepository:
    """SQLModel-based budget repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, budget_id: int, *, user_id: int) -> Optional[Budget]:
        """Retrieve a budget owned by ``user_id``."""
        with self.session_factory() as session:
            return session.exec(
                select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
            ).first()

    def list_all(
        self,
        *,
        user_id: int,
        is_active: Optional[bool] = None,
        category: Optional[str] = None,
    ) -> list[Budget]:
        """List budgets, newest first."""
        with self.session_factory() as session:
            statement = select(Budget).where(Budget.user_id == user_id)
            if is_active is not None:
                statement = statement.where(Budget.is_active == is_active)
            if category:
                statement = statement.where(Budget.category == category)
            statement = statement.order_by(Budget.created_at.desc(), Budget.id.desc())  # type: ignore
            return list(session.exec(statement).all())

    def find_matching(
        self,
        *,
        user_id: int,
        category: str,
        subcategory: Optional[str],
        on: date,
    ) -> list[Budget]:
        """Active budgets whose category and window cover an expense.

        A transaction with a subcategory only matches budgets scoped to that
        subcategory; without one it matches every budget of the category.
        """
        with self.session_factory() as session:
            statement = (
                select(Budget)
                .where(Budget.user_id == user_id)
                .where(Budget.is_active == True)  # noqa: E712
                .where(Budget.category == category)
                .where(Budget.period_start <= on)
                .where(Budget.period_end >= on)
            )
            if subcategory:
                statement = statement.where(Budget.subcategory == subcategory)
            statement = statement.order_by(Budget.id)  # type: ignore
            return list(session.exec(statement).all())

    def increment_spent(self, budget_id: int, amount: float) -> Budget:
        """Add ``amount`` to ``spent`` with a single UPDATE and return the fresh row."""
        with self.session_factory() as session:
            session.execute(
                update(Budget)
                .where(Budget.id == budget_id)
                .values(spent=Budget.spent + amount, updated_at=utcnow())
            )
            session.commit()
            budget = session.get(Budget, budget_id)
            if budget is None:
                raise LookupError(f"Budget {budget_id} disappeared during update")
            return budget

    def create(self, budget: Budget, *, user_id: int) -> Budget:
        """Create a new budget."""
        with self.session_factory() as session:
            budget.user_id = user_id
            session.add(budget)
            session.commit()
            session.refresh(budget)
            return budget

    def update(self, budget: Budget, *, user_id: int) -> Budget:
        """Persist changes to an existing budget."""
        with self.session_factory() as session:
            budget.user_id = user_id
            budget.touch()
            budget = session.merge(budget)
            session.commit()
            session.refresh(budget)
            return budget

    def delete(self, budget_id: int, *, user_id: int) -> bool:
        """Delete a budget; returns False when nothing matched."""
        with self.session_factory() as session:
            budget = session.exec(
                select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
            ).first()
            if budget is None:
                return False
            session.delete(budget)
            session.commit()
            return True

