"""
Exception hierarchy shared by services and blueprints.

Services raise these types; blueprints register handlers against them once
and get consistent HTTP status codes everywhere.

Usage:
    from process_tracker.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Process", resource_id=42)
    raise ValidationError("location is required", details={"location": "missing"})
"""


class NotFoundError(Exception):
    """Raised when a requested record does not exist in the document.

    Maps to HTTP 404. Raised before any mutation, so nothing is written.

    Args:
        resource: Human-readable entity name (e.g. "Process").
        resource_id: The identifier that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input cannot be turned into a well-formed process.

    Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class LocationDecodeError(ValidationError):
    """Raised when a ``location`` sent as text is not a JSON object."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        super().__init__(
            f"location is not a valid JSON object: {reason}",
            details={"location": reason},
        )


class DocumentStoreError(Exception):
    """Raised when the JSON document cannot be written back to disk.

    Maps to HTTP 500. The in-memory state computed before the failed write is
    not rolled back; callers treat the change as not durably applied.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write document {path}: {reason}")
