"""
WSGI entry point.

Usage:
    flask --app wsgi run
    flask --app wsgi repair-contract-dates --apply
    gunicorn wsgi:app
"""

from process_tracker import create_app

app = create_app()
