from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from pathlib import Path
from typing import Optional, Protocol

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Opaque storage for photos and attachments.

    Services only ever see the reference string returned by `store`.
    """

    def store(self, data: bytes, content_type: str, *, folder: str, filename: Optional[str] = None) -> str:
        raise NotImplementedError

    def delete(self, ref: str) -> bool:
        """Remove a stored blob. Returns False when nothing was stored under `ref`."""

        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """Keeps blobs under <root>/<folder>/ and returns 'folder/name.ext' refs."""

    def __init__(self, root: str | Path):
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _folder(self, folder: str) -> Path:
        safe = secure_filename(folder) or "misc"
        path = self._root / safe
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _resolve(self, ref: str) -> Optional[Path]:
        candidate = (self._root / ref).resolve()
        # Refs must stay inside the upload root.
        if self._root != candidate and self._root not in candidate.parents:
            return None
        return candidate

    def store(self, data: bytes, content_type: str, *, folder: str, filename: Optional[str] = None) -> str:
        base, ext = os.path.splitext(filename or "")
        ext = ext.lower()
        if not ext:
            ext = mimetypes.guess_extension(content_type or "") or ".bin"
        safe_base = (secure_filename(base) or "upload")[:50]
        unique_name = f"{safe_base}-{uuid.uuid4().hex[:8]}{ext}"

        target = self._folder(folder) / unique_name
        target.write_bytes(data)
        ref = f"{target.parent.name}/{unique_name}"
        logger.debug("Stored blob %s (%d bytes)", ref, len(data))
        return ref

    def delete(self, ref: str) -> bool:
        path = self._resolve(ref)
        if path is None or not path.is_file():
            return False
        path.unlink()
        return True

    def path_for(self, ref: str) -> Optional[Path]:
        path = self._resolve(ref)
        if path is None or not path.is_file():
            return None
        return path
