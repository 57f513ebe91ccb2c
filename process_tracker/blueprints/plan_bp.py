"""
Procurement plan blueprint (read only).

Endpoints:
    GET /api/plan  — processes listed in the annual procurement plan document
"""

from flask import Blueprint, current_app, jsonify

from process_tracker.services.document_store import JsonDocumentStore

plan_bp = Blueprint("plan", __name__, url_prefix="/api")


@plan_bp.route("/plan", methods=["GET"])
def get_plan():
    """Return the plan items as stored; they are not process records."""
    document = JsonDocumentStore(current_app.config["PLAN_DB_PATH"]).load()
    return jsonify(document["processes"])
