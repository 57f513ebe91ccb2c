"""
Process history engine — phase and location timelines.

Every process carries two append-only timelines:

  history          [{phase, startDate, endDate}]
  locationHistory  [{sector, responsible, startDate, endDate}]

The last entry of each is the open interval (endDate = null). When a logged
update changes the phase (or the location), the open entry is closed at
``now`` and a new open entry starting at ``now`` is appended. Nothing else
about existing entries is ever touched.

Both operations are pure: the caller supplies the clock and the id source,
and ``apply_update`` returns a new Process without mutating its input.

Usage:
    from process_tracker.services.history_engine import apply_update, create_process

    process = create_process(data, now=utc_now(), next_id=lambda: 1)
    process = apply_update(process, {"phase": "Review"}, log_history=True, now=utc_now())
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Callable

from process_tracker.core.exceptions import ValidationError
from process_tracker.models.process import (
    CORE_KEYS,
    MONETARY_FIELDS,
    Attachment,
    HistoryEntry,
    Location,
    LocationEntry,
    Process,
)
from process_tracker.services.payload import coerce_payload
from process_tracker.utils.helpers import to_timestamp

logger = logging.getLogger(__name__)


def _incoming_phase(payload: dict) -> str | None:
    """Phase carried by a payload (``fase`` is the legacy key). Empty -> None."""
    phase = payload.get("phase", payload.get("fase"))
    return phase or None


def _location_changed(current: Location | None, incoming: Location) -> bool:
    """A missing current location differs from any concrete one."""
    if current is None:
        return True
    return (
        incoming.sector != current.sector
        or incoming.responsible != current.responsible
    )


def _close_open_entry(timeline: list, stamp: str) -> None:
    """Set endDate on the last entry if it is still open. Empty timeline -> no-op."""
    if timeline and timeline[-1].is_open:
        timeline[-1].end_date = stamp


def _attachments(raw) -> list[Attachment]:
    return [a if isinstance(a, Attachment) else Attachment.from_dict(a) for a in raw or []]


def _merge_plain_fields(process: Process, payload: dict) -> None:
    for name in MONETARY_FIELDS:
        if name in payload:
            setattr(process, name, payload[name])
    if "contractDate" in payload:
        process.contract_date = payload["contractDate"] or None
    for key, value in payload.items():
        if key not in CORE_KEYS:
            process.extra[key] = value


def apply_update(
    existing: Process,
    update: dict,
    log_history: bool,
    now: datetime,
) -> Process:
    """Merge ``update`` into a copy of ``existing``, extending the timelines.

    Args:
        existing: Normalized stored process.
        update: Flat mapping of wire field names; absent keys are unchanged.
            ``history``, ``locationHistory``, ``creationDate`` and ``id`` are
            ignored. ``attachments`` are appended, never replaced.
        log_history: When False the timelines are left untouched even if the
            phase or location changes.
        now: Instant used for closing and opening intervals.

    Returns:
        A new Process.

    Raises:
        ValidationError: ``log_history`` is not a bool, or a monetary field
            is not a number.
        LocationDecodeError: ``location`` text is not a JSON object.
    """
    if not isinstance(log_history, bool):
        raise ValidationError(
            "log_history must be a boolean",
            details={"logHistory": f"got {type(log_history).__name__}"},
        )

    payload = coerce_payload(update)
    stamp = to_timestamp(now)
    result = copy.deepcopy(existing)

    new_phase = _incoming_phase(payload)
    new_location = payload.get("location")

    if log_history and new_phase is not None and new_phase != existing.phase:
        _close_open_entry(result.history, stamp)
        result.history.append(HistoryEntry(phase=new_phase, start_date=stamp))
        logger.debug("Process %s phase %r -> %r at %s",
                     existing.id, existing.phase, new_phase, stamp)

    if (log_history and new_location is not None
            and _location_changed(existing.location, new_location)):
        _close_open_entry(result.location_history, stamp)
        result.location_history.append(LocationEntry(
            sector=new_location.sector,
            responsible=new_location.responsible,
            start_date=stamp,
        ))
        logger.debug("Process %s moved to %s/%s at %s",
                     existing.id, new_location.sector, new_location.responsible, stamp)

    if new_phase is not None:
        result.phase = new_phase
    if new_location is not None:
        result.location = Location(new_location.sector, new_location.responsible)
    _merge_plain_fields(result, payload)
    result.attachments.extend(_attachments(payload.get("attachments")))
    result.id = existing.id
    return result


def create_process(
    data: dict,
    now: datetime,
    next_id: Callable[[], int],
) -> Process:
    """Build a new Process with both timelines seeded by one open entry.

    ``phase`` and ``location`` are required: without them the seeded
    timelines could not mirror the current state.
    """
    payload = coerce_payload(data)
    phase = _incoming_phase(payload)
    location = payload.get("location")

    missing = {}
    if phase is None:
        missing["phase"] = "required"
    if location is None:
        missing["location"] = "required"
    if missing:
        raise ValidationError(
            f"Missing required field(s): {', '.join(missing)}", details=missing,
        )

    stamp = to_timestamp(now)
    process = Process(
        id=next_id(),
        phase=phase,
        location=location,
        creation_date=stamp,
        attachments=_attachments(payload.get("attachments")),
        history=[HistoryEntry(phase=phase, start_date=stamp)],
        location_history=[LocationEntry(
            sector=location.sector,
            responsible=location.responsible,
            start_date=stamp,
        )],
    )
    _merge_plain_fields(process, payload)
    return process
