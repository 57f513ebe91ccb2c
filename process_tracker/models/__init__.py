"""
Process Tracker
Domain models.
"""

from process_tracker.models.process import (  # noqa: F401
    MONETARY_FIELDS,
    PHASE_CONTRACTED,
    Attachment,
    HistoryEntry,
    Location,
    LocationEntry,
    Process,
)
