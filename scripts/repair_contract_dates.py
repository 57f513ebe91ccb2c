#!/usr/bin/env python3
"""Align "Contracted" history entries with each process's contractDate (idempotent)."""

import argparse
import sys

sys.path.insert(0, ".")

from process_tracker.config import config
from process_tracker.services.contract_date_repair import run_contract_date_repair
from process_tracker.services.document_store import JsonDocumentStore


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Rewrite the startDate of each contracted process's terminal "
                    "history entry to its contractDate at 12:00 UTC.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Preview only; do not write data")
    mode.add_argument("--apply", action="store_true", help="Persist corrections")
    parser.add_argument("--path", help="processes JSON file (default: PROCESSES_DB_PATH)")
    parser.add_argument("--phase", help="contracted phase label (default: CONTRACTED_PHASE)")
    args = parser.parse_args(argv)

    apply = bool(args.apply)
    if not args.dry_run and not args.apply:
        print("[INFO] No mode specified; defaulting to --dry-run")

    settings = config["default"]
    store = JsonDocumentStore(args.path or settings.PROCESSES_DB_PATH)
    print(f"[INFO] mode={'apply' if apply else 'dry-run'} document={store.path}")

    result = run_contract_date_repair(
        store,
        apply=apply,
        contracted_phase=args.phase or settings.CONTRACTED_PHASE,
    )

    for detail in result["error_details"]:
        print(f"[ERROR] path={detail['path']} error={detail['error']}")
    print(
        "[SUMMARY] "
        f"mode={result['mode']} "
        f"processed={result['processed']} "
        f"corrected={result['corrected']} "
        f"written={result['written']} "
        f"errors={result['errors']}"
    )

    if result["errors"] > 0:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
