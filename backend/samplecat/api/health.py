"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from samplecat.api.deps import timing
from samplecat.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report database reachability; 503 when degraded."""
    db_ok = True
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_ok = False
    finally:
        db.session.rollback()
    payload = {"status": "ok" if db_ok else "degraded", "db": db_ok}
    response = jsonify(payload)
    response.status_code = 200 if db_ok else 503
    return response
