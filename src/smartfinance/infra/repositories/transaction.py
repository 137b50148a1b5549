"""SQLModel implementation of the transaction repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlmodel import select

from ...models.transaction import Transaction
from ..database import SessionFactory


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self.session_factory() as session:
            return session.exec(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
            ).first()

    def search(
        self,
        *,
        user_id: int,
        kind: Optional[str] = None,
        category: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[Transaction], int]:
        """Return one page of matching transactions (newest first) and the total count."""

        clauses = [Transaction.user_id == user_id]
        if kind:
            clauses.append(Transaction.kind == kind)
        if category:
            clauses.append(Transaction.category == category)
        if start_date:
            clauses.append(Transaction.occurred_at >= start_date)
        if end_date:
            clauses.append(Transaction.occurred_at <= end_date)

        sanitized_page = max(page, 1)
        sanitized_per_page = max(min(per_page, 100), 1)
        offset = (sanitized_page - 1) * sanitized_per_page

        with self.session_factory() as session:
            total = session.exec(
                select(func.count()).select_from(Transaction).where(*clauses)
            ).one()
            statement = (
                select(Transaction)
                .where(*clauses)
                .order_by(Transaction.occurred_at.desc(), Transaction.id.desc())  # type: ignore
                .offset(offset)
                .limit(sanitized_per_page)
            )
            rows = list(session.exec(statement).all())
        return rows, int(total or 0)

    def filter_by_date_range(
        self, start_date: datetime, end_date: datetime, *, user_id: int
    ) -> list[Transaction]:
        """Get transactions within ``[start_date, end_date)``."""
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.occurred_at >= start_date)
                .where(Transaction.occurred_at < end_date)
                .order_by(Transaction.occurred_at)  # type: ignore
            )
            return list(session.exec(statement).all())

    def find_by_payment_id(self, payment_id: str) -> Optional[Transaction]:
        with self.session_factory() as session:
            return session.exec(
                select(Transaction).where(Transaction.payment_id == payment_id)
            ).first()

    def find_by_order_id(self, order_id: str) -> Optional[Transaction]:
        with self.session_factory() as session:
            return session.exec(
                select(Transaction).where(Transaction.payment_order_id == order_id)
            ).first()

    def create(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Create a new transaction."""
        with self.session_factory() as session:
            transaction.user_id = user_id
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            return transaction

    def update(self, transaction: Transaction) -> Transaction:
        """Persist changes to an existing transaction."""
        with self.session_factory() as session:
            transaction.touch()
            transaction = session.merge(transaction)
            session.commit()
            session.refresh(transaction)
            return transaction

    def delete(self, transaction_id: int, *, user_id: int) -> bool:
        """Delete a transaction; returns False when nothing matched."""
        with self.session_factory() as session:
            transaction = session.exec(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
            ).first()
            if transaction is None:
                return False
            session.delete(transaction)
            session.commit()
            return True
