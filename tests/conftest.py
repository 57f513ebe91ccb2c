"""
Shared pytest fixtures for the Process Tracker test suite.

Provides:
    - app: Flask application bound to per-test JSON documents under tmp_path
    - client: Flask test client
    - store: JsonDocumentStore for the processes document
    - plan_store: JsonDocumentStore for the procurement plan document
    - t0..t3: fixed clock instants for engine tests
"""

from datetime import datetime, timezone

import pytest

from process_tracker import create_app
from process_tracker.services.document_store import JsonDocumentStore


# ── App & document fixtures ──────────────────────────────────────────────


@pytest.fixture()
def app(tmp_path):
    """Create the Flask application with documents in a private tmp dir."""
    application = create_app("testing")
    application.config.update(
        PROCESSES_DB_PATH=str(tmp_path / "processos.json"),
        PLAN_DB_PATH=str(tmp_path / "plano.json"),
        UPLOAD_FOLDER=str(tmp_path / "uploads"),
    )
    return application


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def store(app):
    return JsonDocumentStore(app.config["PROCESSES_DB_PATH"])


@pytest.fixture()
def plan_store(app):
    return JsonDocumentStore(app.config["PLAN_DB_PATH"])


# ── Clock fixtures ───────────────────────────────────────────────────────


@pytest.fixture()
def t0():
    return datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def t1():
    return datetime(2024, 2, 1, 14, 30, tzinfo=timezone.utc)


@pytest.fixture()
def t2():
    return datetime(2024, 3, 5, 8, 15, 30, 250000, tzinfo=timezone.utc)


@pytest.fixture()
def t3():
    return datetime(2024, 4, 20, 17, 45, tzinfo=timezone.utc)
