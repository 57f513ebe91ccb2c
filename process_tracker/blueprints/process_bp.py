"""
Process Tracker
Process blueprint — CRUD endpoints for procurement processes.

Endpoints:
    GET    /api/processes          list all processes
    POST   /api/processes          create (JSON or multipart with ``files``)
    GET    /api/processes/<id>     fetch one
    PUT    /api/processes/<id>     update (JSON or multipart with ``files``)
    DELETE /api/processes/<id>     delete, removing attachment files

Multipart forms send every field as text: ``location`` as JSON, ``value`` as
a number-in-text and ``logHistory`` as "true"/"false". ``logHistory`` is
decoded here; the service layer decodes the rest. When ``logHistory`` is
omitted, history is tracked.
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from process_tracker.core.exceptions import (
    DocumentStoreError,
    NotFoundError,
    ValidationError,
)
from process_tracker.services import process_service
from process_tracker.services.document_store import JsonDocumentStore
from process_tracker.services.upload_service import remove_attachment_files, save_uploads
from process_tracker.utils.errors import E, api_error
from process_tracker.utils.helpers import parse_bool, utc_now

logger = logging.getLogger(__name__)

process_bp = Blueprint("processes", __name__, url_prefix="/api")


# ── Helpers ──────────────────────────────────────────────────────────────────


def _store():
    return JsonDocumentStore(current_app.config["PROCESSES_DB_PATH"])


def _upload_dir():
    return current_app.config["UPLOAD_FOLDER"]


def _request_data() -> dict:
    """Body as a flat dict, from JSON or from form fields."""
    if request.is_json:
        data = request.get_json(silent=True)
        return dict(data) if isinstance(data, dict) else {}
    return request.form.to_dict()


def _save_request_files(now):
    return save_uploads(request.files.getlist("files"), _upload_dir(), now)


# ── Error handlers ───────────────────────────────────────────────────────────


@process_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@process_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return api_error(E.VALIDATION_INVALID, str(error), details=error.details)


@process_bp.errorhandler(DocumentStoreError)
def _handle_store_error(error: DocumentStoreError):
    logger.error("Document write failed: %s", error)
    return api_error(E.STORAGE, "Could not save processes")


@process_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unexpected error in process_bp endpoint=%s", request.endpoint)
    return api_error(E.INTERNAL, "Internal server error")


# ═════════════════════════════════════════════════════════════════════════
# Read
# ═════════════════════════════════════════════════════════════════════════


@process_bp.route("/processes", methods=["GET"])
def list_processes():
    processes = process_service.list_processes(_store())
    return jsonify([p.to_dict() for p in processes])


@process_bp.route("/processes/<int:pid>", methods=["GET"])
def get_process(pid):
    process = process_service.get_process(_store(), pid)
    return jsonify(process.to_dict())


# ═════════════════════════════════════════════════════════════════════════
# Write
# ═════════════════════════════════════════════════════════════════════════


@process_bp.route("/processes", methods=["POST"])
def create_process():
    """Create a process; uploaded ``files`` become its first attachments."""
    data = _request_data()
    data.pop("logHistory", None)
    now = utc_now()

    attachments = _save_request_files(now)
    try:
        process = process_service.create(_store(), data, now=now, attachments=attachments)
    except Exception:
        remove_attachment_files(attachments, _upload_dir())
        raise
    return jsonify(process.to_dict()), 201


@process_bp.route("/processes/<int:pid>", methods=["PUT"])
def update_process(pid):
    """Update a process; uploaded ``files`` are appended to its attachments."""
    data = _request_data()
    try:
        log_history = parse_bool(data.pop("logHistory", None), default=True)
    except ValueError as exc:
        return api_error(E.VALIDATION_INVALID, str(exc), details={"logHistory": "not a boolean"})

    store = _store()
    # 404 before any file lands on disk
    process_service.get_process(store, pid)

    now = utc_now()
    attachments = _save_request_files(now)
    try:
        process = process_service.update(
            store, pid, data, log_history=log_history, now=now, attachments=attachments,
        )
    except Exception:
        remove_attachment_files(attachments, _upload_dir())
        raise
    return jsonify(process.to_dict())


@process_bp.route("/processes/<int:pid>", methods=["DELETE"])
def delete_process(pid):
    process_service.delete(_store(), pid, upload_dir=_upload_dir())
    return "", 204
