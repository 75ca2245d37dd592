"""
Local disk storage for uploaded receipt files.
"""
from __future__ import annotations

import logging
import random
import re
import time
from pathlib import Path

from fastapi import HTTPException, UploadFile

from finance_tracker.config import settings

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/receipts"
_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def unique_filename(original: str) -> str:
    """``<millis>-<random>-<sanitized stem><ext>``"""
    name = Path(original or "receipt")
    stem = _UNSAFE.sub("_", name.stem) or "receipt"
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{suffix}-{stem}{name.suffix.lower()}"


def get_file_path(filename: str) -> Path:
    return upload_dir() / filename


def get_file_url(filename: str) -> str:
    return f"{URL_PREFIX}/{filename}"


def save_upload(upload: UploadFile) -> str:
    """Validate and write *upload* to disk. Returns the stored filename."""
    ext = Path(upload.filename or "").suffix.lower()
    if ext not in settings.ALLOWED_UPLOAD_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Allowed: " + ", ".join(settings.ALLOWED_UPLOAD_EXTENSIONS),
        )

    content = upload.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB.",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    filename = unique_filename(upload.filename)
    get_file_path(filename).write_bytes(content)
    logger.info("Stored upload %s (%d bytes)", filename, len(content))
    return filename


def delete_file(filename: str) -> bool:
    path = get_file_path(filename)
    if path.exists():
        path.unlink()
        return True
    return False
