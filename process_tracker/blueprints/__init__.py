"""
Process Tracker
Blueprint registry.
"""

from process_tracker.blueprints.health_bp import health_bp
from process_tracker.blueprints.plan_bp import plan_bp
from process_tracker.blueprints.process_bp import process_bp

ALL_BLUEPRINTS = (process_bp, plan_bp, health_bp)
