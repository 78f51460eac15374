# backend/rentdesk/routes/system.py
"""
System health and version endpoints. Both are public.
"""

import os
import sys
import time
from flask import Blueprint, current_app
from ..config import get_settings
from ..extensions import db
from ..models import Document, Shop, User
from rentdesk import __version__
from rentdesk.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        shop_count = db.session.query(Shop).count()
        document_count = db.session.query(Document).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "users": user_count,
                "shops": shop_count,
                "documents": document_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_storage_health() -> dict:
    """Upload folder must exist and be writable."""
    folder = get_settings().upload_folder
    if not os.path.isdir(folder):
        return {"status": "unhealthy", "error": "Upload folder missing"}
    if not os.access(folder, os.W_OK):
        return {"status": "unhealthy", "error": "Upload folder not writable"}
    return {"status": "healthy"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: All systems healthy
    - 503: One or more systems unhealthy
    """
    start_time = time.time()

    database_health = check_database_health()
    storage_health = check_storage_health()

    all_checks = [database_health, storage_health]
    healthy = all(check["status"] == "healthy" for check in all_checks)

    response = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "storage": storage_health,
        }
    }

    return response, 200 if healthy else 503


@system_bp.get("/version")
def version():
    """
    Non-sensitive deployment information. Never exposes secrets, database
    credentials or paths.
    """
    return {
        "api_version": __version__,
        "environment": current_app.config.get("APP_ENV", "development"),
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
