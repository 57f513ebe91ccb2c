"""
Process Tracker
Flask Application Factory.

Usage:
    from process_tracker import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from process_tracker.config import config as config_map
from process_tracker.middleware.logging_config import configure_logging
from process_tracker.middleware.rate_limiter import init_rate_limits
from process_tracker.middleware.timing import init_request_timing

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit — apply per-blueprint
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    settings = config_map[config_name]()
    app = Flask(
        __name__,
        static_folder=settings.STATIC_FOLDER,
        static_url_path="",
    )
    app.config.from_object(settings)

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Blueprints ───────────────────────────────────────────────────────
    from process_tracker.blueprints import ALL_BLUEPRINTS

    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    # ── SPA entry point ──────────────────────────────────────────────────
    @app.route("/")
    def index():
        return send_from_directory(app.static_folder, "index.html")

    # ── Stored attachments ───────────────────────────────────────────────
    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("repair-contract-dates")
    @click.option("--apply", is_flag=True, help="Persist corrections (default: dry run)")
    def repair_contract_dates_cmd(apply):
        """Align "Contracted" history entries with each process's contractDate."""
        from process_tracker.services.contract_date_repair import run_contract_date_repair
        from process_tracker.services.document_store import JsonDocumentStore

        summary = run_contract_date_repair(
            JsonDocumentStore(app.config["PROCESSES_DB_PATH"]),
            apply=apply,
            contracted_phase=app.config["CONTRACTED_PHASE"],
        )
        click.echo(
            f"mode={summary['mode']} processed={summary['processed']} "
            f"corrected={summary['corrected']} written={summary['written']} "
            f"errors={summary['errors']}"
        )
        if summary["errors"]:
            raise SystemExit(1)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        from flask import request
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(413)
    def too_large(e):
        return {"error": "Upload too large"}, 413

    @app.errorhandler(429)
    def rate_limited(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error"}, 500

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
