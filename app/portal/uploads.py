from __future__ import annotations

import logging
import mimetypes
import os
import re
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from flask import current_app
from werkzeug.datastructures import FileStorage

from app.portal.storage import storage_from_config

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

ALLOWED_IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
})

ALLOWED_DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})


@dataclass(frozen=True)
class UploadResult:
    success: bool
    url: str | None = None
    file_name: str | None = None
    storage_key: str | None = None
    original_name: str | None = None
    content_type: str | None = None
    size_bytes: int = 0
    error: str | None = None


def sanitize_filename(name: str) -> str:
    name = re.sub(r"[^a-zA-Z0-9.-]", "_", name or "")
    name = re.sub(r"_{2,}", "_", name)
    return name.lower()


def unique_filename(name: str) -> str:
    _, ext = os.path.splitext(name)
    return f"{uuid.uuid4()}{ext}"


def _max_mb(max_size: int) -> str:
    return f"{max_size / 1024 / 1024:g}"


def _max_file_size() -> int:
    return int(current_app.config.get("MAX_FILE_SIZE") or DEFAULT_MAX_FILE_SIZE)


def detect_content_type(file: FileStorage) -> str:
    ctype = (file.mimetype or "").lower()
    if not ctype or ctype == "application/octet-stream":
        ctype = (mimetypes.guess_type(file.filename or "")[0] or ctype).lower()
    return ctype


def validate_image_file(content_type: str, size: int, max_size: int) -> str | None:
    if content_type not in ALLOWED_IMAGE_TYPES:
        return "Invalid image type. Allowed: JPEG, PNG, GIF, WebP"
    if size > max_size:
        return f"Image size exceeds {_max_mb(max_size)}MB limit"
    return None


def validate_document_file(content_type: str, size: int, max_size: int) -> str | None:
    if content_type not in ALLOWED_DOCUMENT_TYPES:
        return "Invalid document type. Allowed: PDF, DOC, DOCX, XLS, XLSX"
    if size > max_size:
        return f"Document size exceeds {_max_mb(max_size)}MB limit"
    return None


def validate_upload(content_type: str, size: int, max_size: int) -> str | None:
    if size > max_size:
        return f"File size exceeds maximum allowed size of {_max_mb(max_size)}MB"
    if content_type not in ALLOWED_IMAGE_TYPES and content_type not in ALLOWED_DOCUMENT_TYPES:
        return "File type not allowed"
    return None


def save_upload(file: FileStorage, sub_dir: str = "general", *, kind: str | None = None) -> UploadResult:
    """
    Validate and store one uploaded file.
    kind: "image", "document" or None (either).
    """
    data = file.read()
    size = len(data)
    content_type = detect_content_type(file)
    max_size = _max_file_size()

    if kind == "image":
        error = validate_image_file(content_type, size, max_size)
    elif kind == "document":
        error = validate_document_file(content_type, size, max_size)
    else:
        error = validate_upload(content_type, size, max_size)
    if error:
        return UploadResult(success=False, error=error, original_name=file.filename)

    parts = [sanitize_filename(p) for p in (sub_dir or "").split("/")]
    sub_dir = "/".join(p for p in parts if p and p.strip(".")) or "general"
    file_name = unique_filename(sanitize_filename(file.filename or ""))
    key = f"{sub_dir}/{file_name}"
    try:
        storage_from_config(current_app.config).put_bytes(key, data, content_type=content_type)
    except Exception:
        logger.exception("Upload failed (key=%s)", key)
        return UploadResult(success=False, error="Failed to upload file", original_name=file.filename)

    return UploadResult(
        success=True,
        url=f"/uploads/{key}",
        file_name=file_name,
        storage_key=key,
        original_name=file.filename,
        content_type=content_type,
        size_bytes=size,
    )


def save_uploads(files: Iterable[FileStorage], sub_dir: str = "general", *, kind: str | None = None) -> list[UploadResult]:
    return [save_upload(f, sub_dir, kind=kind) for f in files if f and f.filename]


def discard_uploads(results: Iterable[UploadResult]) -> None:
    """Remove already-stored files when the surrounding submission is rejected."""
    storage = storage_from_config(current_app.config)
    for r in results:
        if r.success and r.storage_key:
            try:
                storage.delete(r.storage_key)
            except Exception:
                logger.exception("Could not remove orphaned upload (key=%s)", r.storage_key)
