"""Goal routes."""

from __future__ import annotations

from flask import jsonify, request
from flask_login import login_required

from ...errors import NotFoundError
from ...extensions import current_user_id, get_session_factory, goal_repository
from ...forms import parse_bool_arg, parse_payload
from ...logging_config import get_logger
from ...models.goal import Goal
from ...serializers import contribution_to_dict, goal_to_dict, milestone_to_dict
from ...services import goals as goal_service
from . import bp
from .forms import ContributionForm, GoalForm, GoalUpdateForm

logger = get_logger(__name__)


@bp.get("")
@login_required
def list_goals():
    """Goals ordered by priority (high first), then nearest target date."""

    goals = goal_repository().list_all(
        user_id=current_user_id(),
        is_completed=parse_bool_arg(request.args.get("isCompleted")),
        goal_type=request.args.get("type") or None,
        priority=request.args.get("priority") or None,
    )
    return jsonify({"goals": [goal_to_dict(goal) for goal in goals]})


@bp.get("/<int:goal_id>")
@login_required
def get_goal(goal_id: int):
    goal = goal_repository().get_by_id(goal_id, user_id=current_user_id())
    if goal is None:
        raise NotFoundError("Goal not found")
    return jsonify({"goal": goal_to_dict(goal)})


@bp.post("")
@login_required
def create_goal():
    form = parse_payload(GoalForm, request.get_json(silent=True))
    goal = goal_repository().create(
        Goal(**form.column_values()),
        form.milestone_models() or [],
        user_id=current_user_id(),
    )
    logger.info("Goal created", extra={"goal_id": goal.id, "target_amount": goal.target_amount})
    return jsonify({"message": "Goal created successfully", "goal": goal_to_dict(goal)}), 201


@bp.put("/<int:goal_id>")
@login_required
def update_goal(goal_id: int):
    form = parse_payload(GoalUpdateForm, request.get_json(silent=True))
    goal = goal_repository().update(
        goal_id,
        user_id=current_user_id(),
        changes=form.column_values(),
        milestones=form.milestone_models(),
    )
    if goal is None:
        raise NotFoundError("Goal not found")
    return jsonify({"message": "Goal updated successfully", "goal": goal_to_dict(goal)})


@bp.delete("/<int:goal_id>")
@login_required
def delete_goal(goal_id: int):
    if not goal_repository().delete(goal_id, user_id=current_user_id()):
        raise NotFoundError("Goal not found")
    logger.info("Goal deleted", extra={"goal_id": goal_id})
    return jsonify({"message": "Goal deleted successfully"})


@bp.post("/<int:goal_id>/contribute")
@login_required
def contribute(goal_id: int):
    """Add money to a goal and report any milestones or completion it unlocked."""

    form = parse_payload(ContributionForm, request.get_json(silent=True))
    result = goal_service.contribute(
        goal_id,
        user_id=current_user_id(),
        amount=form.amount,
        source=form.source,
        description=form.description,
        session_factory=get_session_factory(),
    )
    message = "Goal completed!" if result.completed_now else "Contribution added successfully"
    return jsonify(
        {
            "message": message,
            "goal": goal_to_dict(result.goal),
            "contribution": contribution_to_dict(result.contribution),
            "milestonesAchieved": [milestone_to_dict(m) for m in result.milestones_achieved],
        }
    )
