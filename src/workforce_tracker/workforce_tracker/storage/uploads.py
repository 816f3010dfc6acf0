"""Upload → validate → call handler pipeline.

Controllers hand the incoming `FileStorage` to `staged_upload`; the service is
called with the resulting blob reference only.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from werkzeug.datastructures import FileStorage

from ..core.constants import (
    LEAVE_ATTACHMENT_EXTENSIONS,
    LEAVE_ATTACHMENT_FOLDER,
    LEAVE_ATTACHMENT_MAX_BYTES,
    LEAVE_ATTACHMENT_MIME_TYPES,
    PHOTO_EXTENSIONS,
    PHOTO_MAX_BYTES,
    PHOTO_MIME_TYPES,
    PROFILE_PICTURE_FOLDER,
    SELFIE_FOLDER,
)
from ..core.exceptions import ValidationError
from .blob_store import BlobStore


@dataclass(frozen=True)
class UploadPolicy:
    folder: str
    allowed_extensions: frozenset
    allowed_mime_types: frozenset
    max_bytes: int
    label: str


SELFIE_POLICY = UploadPolicy(
    folder=SELFIE_FOLDER,
    allowed_extensions=PHOTO_EXTENSIONS,
    allowed_mime_types=PHOTO_MIME_TYPES,
    max_bytes=PHOTO_MAX_BYTES,
    label="Only JPG, JPEG, and PNG photos are allowed",
)

LEAVE_ATTACHMENT_POLICY = UploadPolicy(
    folder=LEAVE_ATTACHMENT_FOLDER,
    allowed_extensions=LEAVE_ATTACHMENT_EXTENSIONS,
    allowed_mime_types=LEAVE_ATTACHMENT_MIME_TYPES,
    max_bytes=LEAVE_ATTACHMENT_MAX_BYTES,
    label="Only PDF, JPG, JPEG, and PNG files are allowed",
)

PROFILE_PICTURE_POLICY = UploadPolicy(
    folder=PROFILE_PICTURE_FOLDER,
    allowed_extensions=PHOTO_EXTENSIONS,
    allowed_mime_types=PHOTO_MIME_TYPES,
    max_bytes=PHOTO_MAX_BYTES,
    label="Only JPG, JPEG, and PNG photos are allowed",
)


def _has_file(file: Optional[FileStorage]) -> bool:
    return file is not None and bool((file.filename or "").strip())


def accept_upload(file: Optional[FileStorage], policy: UploadPolicy, blobs: BlobStore) -> Optional[str]:
    """Validate and store one upload; returns the blob ref or None when no file was sent."""
    if not _has_file(file):
        return None

    extension = os.path.splitext(file.filename)[1].lower()
    mime_type = (file.mimetype or "").lower()
    if extension not in policy.allowed_extensions or mime_type not in policy.allowed_mime_types:
        raise ValidationError(policy.label)

    data = file.read()
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > policy.max_bytes:
        raise ValidationError(f"File exceeds the {policy.max_bytes // (1024 * 1024)} MB limit")

    return blobs.store(data, mime_type, folder=policy.folder, filename=file.filename)


@contextmanager
def staged_upload(file: Optional[FileStorage], policy: UploadPolicy, blobs: BlobStore) -> Iterator[Optional[str]]:
    """Store the upload, yield its ref, and release it again if the handler fails."""
    ref = accept_upload(file, policy, blobs)
    try:
        yield ref
    except Exception:
        if ref:
            blobs.delete(ref)
        raise
