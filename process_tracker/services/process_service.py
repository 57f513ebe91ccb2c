"""Process service layer — CRUD over the JSON document store.

Every operation takes the store explicitly and performs one read and at most
one write of the whole document (read-modify-write, last writer wins).
History rules live in ``history_engine``; this module only locates records,
assigns ids and persists.

Operations:
- list / get
- create   (seeds both timelines)
- update   (phase/location history, attachment concatenation)
- delete   (also removes attachment files)
"""
import logging

from process_tracker.core.exceptions import NotFoundError
from process_tracker.models.process import Process
from process_tracker.services.history_engine import apply_update, create_process
from process_tracker.services.upload_service import remove_attachment_files

logger = logging.getLogger(__name__)


def _load(store):
    document = store.load()
    processes = [Process.from_dict(raw) for raw in document[store.collection]]
    return document, processes


def _save(store, document, processes):
    document[store.collection] = [p.to_dict() for p in processes]
    store.save(document)


def _index_of(processes, process_id):
    for index, process in enumerate(processes):
        if process.id == process_id:
            return index
    raise NotFoundError(resource="Process", resource_id=process_id)


def next_process_id(processes, now):
    """Creation-time id (epoch ms), bumped past any existing id to stay unique."""
    candidate = int(now.timestamp() * 1000)
    existing = [p.id for p in processes if isinstance(p.id, int)]
    if existing and candidate <= max(existing):
        candidate = max(existing) + 1
    return candidate


# ── Read ─────────────────────────────────────────────────────────────────


def list_processes(store):
    _document, processes = _load(store)
    return processes


def get_process(store, process_id):
    _document, processes = _load(store)
    return processes[_index_of(processes, process_id)]


# ── Write ────────────────────────────────────────────────────────────────


def create(store, data, *, now, attachments=()):
    """Create and persist a process. Returns the new Process."""
    document, processes = _load(store)
    payload = dict(data)
    payload["attachments"] = list(attachments)

    process = create_process(payload, now, lambda: next_process_id(processes, now))
    processes.append(process)
    _save(store, document, processes)
    logger.info("Created process %s (phase=%s)", process.label, process.phase)
    return process


def update(store, process_id, data, *, log_history, now, attachments=()):
    """Apply an update to a stored process and persist it.

    Raises NotFoundError before anything is written when the id is unknown.
    """
    document, processes = _load(store)
    index = _index_of(processes, process_id)
    payload = dict(data)
    payload["attachments"] = list(attachments)

    before = processes[index]
    after = apply_update(before, payload, log_history, now)
    processes[index] = after
    _save(store, document, processes)
    logger.info(
        "Updated process %s (history %d->%d, locationHistory %d->%d)",
        after.label,
        len(before.history), len(after.history),
        len(before.location_history), len(after.location_history),
    )
    return after


def delete(store, process_id, *, upload_dir):
    """Remove a process and its attachment files. Returns the removed Process.

    Files are deleted only after the document write succeeds.
    """
    document, processes = _load(store)
    index = _index_of(processes, process_id)
    process = processes.pop(index)
    _save(store, document, processes)
    removed = remove_attachment_files(process.attachments, upload_dir)
    logger.info("Deleted process %s (%d attachment file(s) removed)", process.label, removed)
    return process
