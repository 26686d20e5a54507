from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from talentgate.config import get_settings

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"[^A-Za-z0-9._-]+")


class DraftQuotaExceeded(OSError):
    pass


class DraftStore(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, draft: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...


def _decode(raw: str | bytes) -> dict[str, Any] | None:
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Discarding unreadable draft: %s", exc)
        return None
    if not isinstance(value, dict):
        logger.warning("Discarding draft with unexpected shape: %s", type(value).__name__)
        return None
    return value


def _encode(draft: dict[str, Any]) -> str:
    return json.dumps(draft, default=str, ensure_ascii=False)


class MemoryDraftStore:
    def __init__(self, max_bytes: int | None = None, initial: str | None = None):
        self.max_bytes = max_bytes
        self.raw: str | None = initial

    def load(self) -> dict[str, Any] | None:
        if self.raw is None:
            return None
        draft = _decode(self.raw)
        if draft is None:
            self.raw = None
        return draft

    def save(self, draft: dict[str, Any]) -> None:
        encoded = _encode(draft)
        if self.max_bytes is not None and len(encoded.encode("utf-8")) > self.max_bytes:
            logger.warning("Draft exceeds storage quota of %s bytes; keeping it in memory only", self.max_bytes)
            return
        self.raw = encoded

    def clear(self) -> None:
        self.raw = None


class FileDraftStore:
    """One JSON file per storage key. Failures degrade to in-memory operation."""

    def __init__(self, directory: str | Path | None = None, key: str | None = None, max_bytes: int | None = None):
        settings = get_settings()
        self.directory = Path(directory or settings.draft_dir)
        self.key = _KEY_PATTERN.sub("-", key or settings.draft_storage_key)
        self.max_bytes = settings.draft_max_bytes if max_bytes is None else max_bytes

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read draft %s: %s", self.path, exc)
            return None

        draft = _decode(raw)
        if draft is None:
            self._discard()
        return draft

    def save(self, draft: dict[str, Any]) -> None:
        encoded = _encode(draft)
        try:
            if len(encoded.encode("utf-8")) > self.max_bytes:
                raise DraftQuotaExceeded(f"draft exceeds {self.max_bytes} bytes")
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            tmp_path.write_text(encoded, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            logger.warning("Could not persist draft, continuing in memory: %s", exc)

    def clear(self) -> None:
        self._discard()

    def _discard(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove draft %s: %s", self.path, exc)
