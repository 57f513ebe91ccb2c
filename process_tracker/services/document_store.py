"""
JSON document store — one file holds every record of a collection.

The whole document is read, changed in memory and written back on every
request. There is no locking: two concurrent writers race and the last one
wins (lost updates are possible). Acceptable for a single small-office
deployment; put a lock or queue in front of ``save`` before scaling out.

Two on-disk shapes exist in the wild and both are accepted:

    {"processes": [ ... ], ...}     object root
    [ ... ]                         bare list root

``load`` always returns the object shape and ``save`` always writes it.

Usage:
    store = JsonDocumentStore("processos.json")
    document = store.load()
    document["processes"].append({...})
    store.save(document)
"""

from __future__ import annotations

import json
import logging
import os

from process_tracker.core.exceptions import DocumentStoreError

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "processes"


class JsonDocumentStore:
    """Load/save a single JSON document from ``path``."""

    def __init__(self, path: str, collection: str = DEFAULT_COLLECTION) -> None:
        self.path = str(path)
        self.collection = collection

    def __repr__(self) -> str:
        return f"<JsonDocumentStore {self.path!r}>"

    def normalize(self, raw) -> dict:
        """Coerce any loaded value into ``{collection: [...], ...}``."""
        if isinstance(raw, list):
            return {self.collection: raw}
        if not isinstance(raw, dict):
            return {self.collection: []}
        document = dict(raw)
        items = document.get(self.collection)
        document[self.collection] = items if isinstance(items, list) else []
        return document

    def load(self) -> dict:
        """Read the document. A missing or unreadable file yields an empty one."""
        if not os.path.exists(self.path):
            logger.debug("Document %s does not exist yet — starting empty", self.path)
            return self.normalize(None)
        try:
            with open(self.path, encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, ValueError):
            logger.exception("Could not read document %s — treating it as empty", self.path)
            return self.normalize(None)
        return self.normalize(raw)

    def save(self, document: dict) -> None:
        """Write the document back. Raises DocumentStoreError on I/O failure."""
        body = self.normalize(document)
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump(body, fh, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as exc:
            logger.error("Could not write document %s: %s", self.path, exc)
            raise DocumentStoreError(self.path, str(exc)) from exc

    def readable(self) -> bool:
        """True when the file is absent (fresh install) or parses as JSON."""
        if not os.path.exists(self.path):
            return True
        try:
            with open(self.path, encoding="utf-8") as fh:
                json.load(fh)
        except (OSError, ValueError):
            return False
        return True
