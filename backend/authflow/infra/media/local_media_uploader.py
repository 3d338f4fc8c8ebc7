"""Disk-backed media uploader."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from uuid import uuid4

from werkzeug.utils import secure_filename

from authflow.services._shared.errors import UploadFailedError
from authflow.services._shared.ports import MediaSource, MediaUploader

log = logging.getLogger(__name__)


class LocalMediaUploader(MediaUploader):
    """
    Store uploads under ``root`` and return ``<base_url>/<stored name>``.

    Stored names are ``<random hex>-<sanitized client name>`` so two uploads
    with the same client file name never overwrite each other.

    :param root: Target directory (created on first upload).
    :param base_url: Public prefix for the returned references.
    """

    def __init__(self, root: str | Path, base_url: str = "/media") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, source: MediaSource) -> str:
        name = secure_filename(source.filename or "") or "upload"
        stored = f"{uuid4().hex}-{name}"
        target = self.root / stored
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with target.open("wb") as fh:
                shutil.copyfileobj(source.stream, fh)
        except OSError as exc:
            log.error("media.upload_failed target=%s", target, exc_info=True)
            raise UploadFailedError() from exc

        if target.stat().st_size == 0:
            target.unlink(missing_ok=True)
            raise UploadFailedError("Uploaded file is empty")

        log.info("media.uploaded name=%s", stored)
        return f"{self.base_url}/{stored}"

    def discard(self, ref: str) -> None:
        """Delete the file behind ``ref``; references from elsewhere are ignored."""
        prefix = f"{self.base_url}/"
        if not ref.startswith(prefix):
            return
        name = ref[len(prefix):]
        if not name or name != secure_filename(name):
            return
        try:
            (self.root / name).unlink(missing_ok=True)
        except OSError:
            log.warning("media.discard_failed name=%s", name, exc_info=True)
            return
        log.info("media.discarded name=%s", name)
