"""Wire-payload coercion for process create/update requests.

Form submissions deliver everything as text: ``location`` as a JSON string,
monetary fields as numbers-in-text. These helpers turn them into typed values.
All of them accept already-typed input unchanged, so the engine can call them
on payloads that were decoded at the HTTP boundary.
"""

from __future__ import annotations

import json

from process_tracker.core.exceptions import LocationDecodeError, ValidationError
from process_tracker.models.process import MONETARY_FIELDS, Location


def coerce_amount(field_name: str, raw) -> float:
    """Parse a monetary value. Missing or empty -> 0.0, garbage -> ValidationError."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        raise ValidationError(
            f"{field_name} must be a number",
            details={field_name: f"not a number: {text!r}"},
        ) from None


def decode_location(raw) -> Location | None:
    """Decode a ``location`` value (object, JSON text, or Location).

    Returns None for a missing value. Malformed text raises
    ``LocationDecodeError``; nothing is guessed.
    """
    if raw is None:
        return None
    if isinstance(raw, Location):
        return raw
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LocationDecodeError(raw, exc.msg) from exc
    if not isinstance(raw, dict):
        raise LocationDecodeError(str(raw), f"expected an object, got {type(raw).__name__}")
    return Location.from_dict(raw)


def coerce_payload(data: dict) -> dict:
    """Return a copy of ``data`` with location decoded and monetary fields parsed.

    Only keys that are present are touched; absent keys stay absent.
    """
    payload = dict(data)
    if "location" in payload:
        payload["location"] = decode_location(payload["location"])
    for name in MONETARY_FIELDS:
        if name in payload:
            payload[name] = coerce_amount(name, payload[name])
    return payload
