"""
Process Tracker
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])
"""

import os

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
_DATA_DIR = os.path.join(basedir, "data")


class Config:
    """Base configuration shared across all environments."""

    DEBUG = False
    TESTING = False

    # JSON documents
    PROCESSES_DB_PATH = os.getenv("PROCESSES_DB_PATH", os.path.join(_DATA_DIR, "processos.json"))
    PLAN_DB_PATH = os.getenv("PLAN_DB_PATH", os.path.join(_DATA_DIR, "plano.json"))

    # Attachments
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(basedir, "uploads"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(25 * 1024 * 1024)))  # 25 MB

    # Frontend (SPA) served from here
    STATIC_FOLDER = os.getenv("STATIC_FOLDER", os.path.join(basedir, "public"))

    # Label of the phase reconciled by the contract-date repair
    CONTRACTED_PHASE = os.getenv("CONTRACTED_PHASE", "Contracted")

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Logging (None: DEBUG in development, INFO in production)
    LOG_LEVEL = os.getenv("LOG_LEVEL")

    # Rate limiting (Flask-Limiter)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True


class TestingConfig(Config):
    """Testing environment configuration. Paths are overridden per test."""

    TESTING = True
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    def __init__(self):
        if not self.CORS_ORIGINS:
            raise RuntimeError("CORS_ORIGINS environment variable must be set in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
