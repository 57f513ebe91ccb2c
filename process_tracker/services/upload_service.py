"""Attachment storage on local disk.

Files are stored as ``<epoch-ms>-<token>-<sanitized original name>`` in the
upload folder. The random token keeps files of one request apart even when
their sanitized names match. The returned Attachment records are appended to
a process as-is.
"""

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime

from werkzeug.utils import secure_filename

from process_tracker.models.process import Attachment

logger = logging.getLogger(__name__)


def stored_name(original: str, now: datetime) -> str:
    """Stored filename: upload instant in ms, random token, sanitized name."""
    safe = secure_filename(original or "") or "upload"
    return f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:8]}-{safe}"


def save_uploads(files, upload_dir: str, now: datetime) -> list[Attachment]:
    """Persist werkzeug ``FileStorage`` objects and describe them.

    Empty file fields (no filename) are skipped.
    """
    attachments = []
    if not files:
        return attachments
    os.makedirs(upload_dir, exist_ok=True)
    for storage in files:
        if not storage or not storage.filename:
            continue
        name = stored_name(storage.filename, now)
        path = os.path.join(upload_dir, name)
        while os.path.exists(path):
            name = stored_name(storage.filename, now)
            path = os.path.join(upload_dir, name)
        storage.save(path)
        attachments.append(Attachment(
            stored_filename=name,
            original_filename=storage.filename,
            storage_path=path,
        ))
        logger.debug("Stored upload %r as %s", storage.filename, path)
    return attachments


def remove_attachment_files(attachments, upload_dir: str) -> int:
    """Delete the files behind ``attachments``; missing files are ignored.

    Only paths inside ``upload_dir`` are removed. Returns the number deleted.
    """
    root = os.path.realpath(upload_dir)
    removed = 0
    for attachment in attachments:
        path = attachment.storage_path or os.path.join(upload_dir, attachment.stored_filename)
        real = os.path.realpath(path)
        if os.path.commonpath([root, real]) != root:
            logger.warning("Refusing to delete %s outside upload folder %s", real, root)
            continue
        if os.path.isfile(real):
            os.remove(real)
            removed += 1
    return removed
