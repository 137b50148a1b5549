"""Home routes."""

from __future__ import annotations

from flask import jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import session_scope
from ...logging_config import get_logger
from . import bp

logger = get_logger(__name__)


@bp.get("/health")
def health():
    """Report liveness plus whether the database answers a trivial query."""

    try:
        with session_scope() as session:
            session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database", exc_info=True)
        database = "unavailable"
    status = "ok" if database == "connected" else "degraded"
    return jsonify({"status": status, "database": database}), 200 if status == "ok" else 503
