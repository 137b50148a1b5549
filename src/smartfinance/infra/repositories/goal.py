"""SQLModel implementation of the goal repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from ...models.goal import Goal, GoalMilestone
from ..database import SessionFactory

_PRIORITY_RANK = case(
    (Goal.priority == "high", 0),
    (Goal.priority == "medium", 1),
    else_=2,
)


def load_goal(session: Session, goal_id: int, *, user_id: int) -> Optional[Goal]:
    """Fetch a goal with milestones and contributions eagerly loaded."""

    return session.exec(
        select(Goal)
        .options(selectinload(Goal.milestones), selectinload(Goal.contributions))
        .where(Goal.id == goal_id, Goal.user_id == user_id)
    ).first()


class SQLModelGoalRepository:
    """SQLModel-based goal repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, goal_id: int, *, user_id: int) -> Optional[Goal]:
        with self.session_factory() as session:
            return load_goal(session, goal_id, user_id=user_id)

    def list_all(
        self,
        *,
        user_id: int,
        is_completed: Optional[bool] = None,
        goal_type: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> list[Goal]:
        """List goals by priority (high first) then nearest target date."""
        with self.session_factory() as session:
            statement = (
                select(Goal)
                .options(selectinload(Goal.milestones), selectinload(Goal.contributions))
                .where(Goal.user_id == user_id)
            )
            if is_completed is not None:
                statement = statement.where(Goal.is_completed == is_completed)
            if goal_type:
                statement = statement.where(Goal.goal_type == goal_type)
            if priority:
                statement = statement.where(Goal.priority == priority)
            statement = statement.order_by(_PRIORITY_RANK, Goal.target_date)  # type: ignore
            return list(session.exec(statement).all())

    def create(
        self, goal: Goal, milestones: list[GoalMilestone], *, user_id: int
    ) -> Goal:
        """Insert a goal together with its milestones."""
        with self.session_factory() as session:
            goal.user_id = user_id
            for position, milestone in enumerate(milestones):
                milestone.position = position
            goal.milestones = list(milestones)
            goal.contributions = []
            session.add(goal)
            session.commit()
            return goal

    def update(
        self,
        goal_id: int,
        *,
        user_id: int,
        changes: dict,
        milestones: Optional[list[GoalMilestone]] = None,
    ) -> Optional[Goal]:
        """Apply column changes and optionally replace the milestone list."""
        with self.session_factory() as session:
            goal = load_goal(session, goal_id, user_id=user_id)
            if goal is None:
                return None
            for key, value in changes.items():
                setattr(goal, key, value)
            if milestones is not None:
                goal.milestones.clear()
                session.flush()
                for position, milestone in enumerate(milestones):
                    milestone.position = position
                    goal.milestones.append(milestone)
            goal.touch()
            session.add(goal)
            session.commit()
            return goal

    def delete(self, goal_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            goal = load_goal(session, goal_id, user_id=user_id)
            if goal is None:
                return False
            session.delete(goal)
            session.commit()
            return True
