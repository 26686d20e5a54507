from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from talentgate.config import get_settings
from talentgate.core.errors import UploadRejected
from talentgate.types import UploadKind

logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 150
UPLOAD_URL_PREFIX = "/uploads"

_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9.-]+")


@dataclass(frozen=True, slots=True)
class UploadPolicy:
    directory: str
    extensions: frozenset[str]
    mime_types: frozenset[str]
    max_bytes: int
    type_error: str


@dataclass(frozen=True, slots=True)
class StoredUpload:
    url: str
    file_name: str
    size: int
    type: str
    path: Path


def upload_policy(kind: UploadKind) -> UploadPolicy:
    settings = get_settings()
    if kind == "portfolio":
        return UploadPolicy(
            directory="portfolio",
            extensions=frozenset({".pdf", ".zip", ".mp4", ".mov", ".webm"}),
            mime_types=frozenset(
                {
                    "application/pdf",
                    "application/zip",
                    "application/x-zip-compressed",
                    "video/mp4",
                    "video/quicktime",
                    "video/webm",
                }
            ),
            max_bytes=settings.portfolio_max_bytes,
            type_error="Invalid file type. Please upload PDF, ZIP, MP4, MOV, or WEBM files.",
        )
    return UploadPolicy(
        directory="resumes",
        extensions=frozenset({".pdf", ".doc", ".docx"}),
        mime_types=frozenset(
            {
                "application/pdf",
                "application/msword",
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            }
        ),
        max_bytes=settings.resume_max_bytes,
        type_error="Invalid file type. Please upload PDF, DOC, or DOCX files.",
    )


def sanitize_filename(raw: str | None, *, default: str = "file") -> str:
    name = Path((raw or "").replace("\\", "/")).name.strip() or default
    name = _SAFE_NAME_RE.sub("_", name).strip("._") or default

    if len(name) > MAX_FILENAME_LENGTH:
        ext = Path(name).suffix
        keep = max(1, MAX_FILENAME_LENGTH - len(ext))
        name = f"{name[: len(name) - len(ext)][:keep]}{ext}"
    return name


def _content_type(raw: str | None) -> str:
    content_type = (raw or "").strip().lower()
    return content_type.split(";", 1)[0].strip()


def validate_upload(filename: str | None, content_type: str | None, size: int, kind: UploadKind) -> str:
    """Return the sanitised file name or raise ``UploadRejected``."""
    if not filename:
        raise UploadRejected("No file provided")

    policy = upload_policy(kind)
    safe_name = sanitize_filename(filename)
    extension = Path(safe_name).suffix.lower()
    if extension not in policy.extensions and _content_type(content_type) not in policy.mime_types:
        raise UploadRejected(policy.type_error)
    if size > policy.max_bytes:
        raise UploadRejected(f"File size exceeds {policy.max_bytes // (1024 * 1024)}MB limit")
    return safe_name


def read_upload(stream: BinaryIO, kind: UploadKind) -> bytes:
    """Read at most one byte past the size ceiling so oversized files are rejected without buffering them."""
    return stream.read(upload_policy(kind).max_bytes + 1)


def store_upload(
    filename: str | None,
    content_type: str | None,
    data: bytes,
    kind: UploadKind = "resume",
) -> StoredUpload:
    try:
        safe_name = validate_upload(filename, content_type, len(data), kind)
    except UploadRejected as exc:
        logger.info("Upload rejected kind=%s name=%s: %s", kind, filename, exc)
        raise

    settings = get_settings()
    policy = upload_policy(kind)
    stored_name = f"{int(time.time() * 1000)}-{safe_name}"
    target_dir = settings.upload_dir / policy.directory
    target = target_dir / stored_name
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError:
        logger.exception("Failed to store upload %s", target)
        raise

    return StoredUpload(
        url=f"{settings.public_origin}{UPLOAD_URL_PREFIX}/{policy.directory}/{stored_name}",
        file_name=filename or safe_name,
        size=len(data),
        type=_content_type(content_type),
        path=target,
    )
