"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in process_tracker/__init__.py with no default
limits; this module applies limits per route category.

Usage:
    from process_tracker.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

WRITE_METHODS = ["POST", "PUT", "DELETE"]
READ_METHODS = ["GET"]


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Process writes:  60/minute  (POST/PUT/DELETE, uploads + document rewrites)
        - Process reads:   200/minute (GET)
        - Plan endpoints:  200/minute (read only)
        - Health check:    exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    bp = app.blueprints.get("processes")
    if bp:
        limiter.limit(WRITE_LIMIT, methods=WRITE_METHODS)(bp)
        limiter.limit(READ_LIMIT, methods=READ_METHODS)(bp)

    bp = app.blueprints.get("plan")
    if bp:
        limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured — write: %s, read: %s",
                    WRITE_LIMIT, READ_LIMIT)
