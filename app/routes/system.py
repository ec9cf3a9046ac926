"""
System Routes - Health check
"""

import socket

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from db import db, logger
from constants import BUILD_VERSION
from utils import now_utc

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


@system_bp.route("/health", methods=["GET"])
def health_check_api():
    """
    Health check endpoint for monitoring.
    """
    checks = {
        "timestamp": now_utc().isoformat(),
        "version": BUILD_VERSION,
        "hostname": socket.gethostname(),
        "database": "unknown",
    }

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "healthy"
        status = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        db.session.rollback()
        checks["database"] = "unhealthy"
        status = "unhealthy"

    checks["status"] = status
    return jsonify({"success": status == "healthy", "data": checks}), 200 if status == "healthy" else 503
