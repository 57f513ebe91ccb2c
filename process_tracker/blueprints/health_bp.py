"""
Health check blueprint.

Endpoints:
    GET /api/health  — app status plus readability of the JSON documents
"""

import logging
import os

from flask import Blueprint, current_app, jsonify

from process_tracker.services.document_store import JsonDocumentStore

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.route("/health", methods=["GET"])
def health():
    """200 when both documents parse and the upload folder is usable, else 503."""
    checks = {}
    overall = True

    for name, key in (("processes", "PROCESSES_DB_PATH"), ("plan", "PLAN_DB_PATH")):
        store = JsonDocumentStore(current_app.config[key])
        if store.readable():
            checks[name] = {"status": "ok"}
        else:
            checks[name] = {"status": "error", "detail": f"{store.path} is not valid JSON"}
            overall = False
            logger.error("Health check — %s document unreadable: %s", name, store.path)

    upload_dir = current_app.config["UPLOAD_FOLDER"]
    if os.path.isdir(upload_dir) and not os.access(upload_dir, os.W_OK):
        checks["uploads"] = {"status": "error", "detail": "upload folder is not writable"}
        overall = False
    else:
        checks["uploads"] = {"status": "ok"}

    body = {"status": "ok" if overall else "degraded", "app": "Process Tracker", "checks": checks}
    return jsonify(body), 200 if overall else 503
