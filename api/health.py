from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import db
from logging_utils import get_logger

logger = get_logger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    """Liveness + database round trip."""

    session = db.SessionLocal()
    try:
        now = session.execute(text("SELECT CURRENT_TIMESTAMP AS now")).scalar()
    except SQLAlchemyError as e:
        logger.warning("Health check DB query failed: %s", e)
        return jsonify({"ok": False, "error": str(e)}), 500
    finally:
        session.close()

    # SQLite returns a string here, PostgreSQL a datetime.
    if hasattr(now, "isoformat"):
        now = now.isoformat()
    return jsonify({"ok": True, "now": str(now)})
