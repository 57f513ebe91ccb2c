"""
Contract-date repair — reconcile the "Contracted" history entry with contractDate.

``contractDate`` is entered as a plain calendar date while history timestamps
are instants. Older records opened their "Contracted" interval at the moment
the form was saved (or at a date parsed at midnight UTC, which shows up as the
previous day west of Greenwich). The repair rewrites the startDate of that
terminal entry to the contract date anchored at 12:00 UTC.

The pass is idempotent: a corrected entry already matches and is skipped.

Usage:
    from process_tracker.services.contract_date_repair import run_contract_date_repair

    summary = run_contract_date_repair(store, apply=True)
"""

from __future__ import annotations

import logging

from process_tracker.core.exceptions import DocumentStoreError
from process_tracker.models.process import PHASE_CONTRACTED, Process
from process_tracker.utils.helpers import midday_utc_timestamp

logger = logging.getLogger(__name__)


def repair_contract_dates(processes, contracted_phase: str = PHASE_CONTRACTED) -> int:
    """Align the terminal history entry of contracted processes, in place.

    Returns the number of processes whose entry was rewritten.
    """
    corrected = 0
    for process in processes:
        if process.phase != contracted_phase or not process.contract_date or not process.history:
            continue

        last_entry = process.history[-1]
        canonical = midday_utc_timestamp(process.contract_date)
        if canonical is None:
            logger.warning("Process %s: contractDate %r is not a date — skipped",
                           process.label, process.contract_date)
            continue

        if last_entry.phase == contracted_phase and last_entry.start_date != canonical:
            logger.info("Process %s: history startDate %s -> %s",
                        process.label, last_entry.start_date, canonical)
            last_entry.start_date = canonical
            corrected += 1
    return corrected


def run_contract_date_repair(
    store,
    *,
    apply: bool = False,
    contracted_phase: str = PHASE_CONTRACTED,
) -> dict:
    """Run the repair against a document store: one read, one conditional write.

    The document is written only when ``apply`` is set and something changed.
    A failed write is reported in the summary (``errors``); re-running the
    pass afterwards is safe.
    """
    summary = {
        "mode": "apply" if apply else "dry-run",
        "processed": 0,
        "corrected": 0,
        "written": False,
        "errors": 0,
        "error_details": [],
    }

    document = store.load()
    processes = [Process.from_dict(raw) for raw in document[store.collection]]
    summary["processed"] = len(processes)
    if not processes:
        logger.info("No processes in %s — nothing to repair", store.path)
        return summary

    summary["corrected"] = repair_contract_dates(processes, contracted_phase)
    if summary["corrected"] == 0:
        logger.info("All contracted history entries already match their contractDate")
        return summary
    if not apply:
        logger.info("Dry run: %d process(es) would be corrected", summary["corrected"])
        return summary

    document[store.collection] = [p.to_dict() for p in processes]
    try:
        store.save(document)
    except DocumentStoreError as exc:
        summary["errors"] += 1
        summary["error_details"].append({"path": exc.path, "error": exc.reason})
        return summary

    summary["written"] = True
    logger.info("Corrected %d process(es) in %s", summary["corrected"], store.path)
    return summary
