from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import requests
from sqlalchemy.orm import Session

from talentgate.core.errors import ConflictError, FieldError, ValidationFailed, parse_field_path
from talentgate.core.submission import SubmissionReceipt, SubmissionService
from talentgate.db.repositories import Repository
from talentgate.db.session import SessionLocal

logger = logging.getLogger(__name__)


class ServiceSubmitter:
    """Submit in-process through ``SubmissionService`` with a fresh session per call."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def __call__(self, draft: Mapping[str, Any]) -> SubmissionReceipt:
        with self.session_factory() as session:
            return SubmissionService(session).submit(draft)

    def is_email_available(self, email: str) -> bool:
        with self.session_factory() as session:
            return SubmissionService(session).is_email_available(email)

    def list_categories(self) -> list[dict[str, str]]:
        with self.session_factory() as session:
            return [{"id": row.id, "name": row.name} for row in Repository(session).list_categories()]


class HttpSubmitter:
    def __init__(self, api_url: str, timeout_sec: int = 30, session: requests.Session | None = None):
        self.api_url = api_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.http = session or requests.Session()

    def __call__(self, draft: Mapping[str, Any]) -> SubmissionReceipt:
        response = self.http.post(f"{self.api_url}/api/applications", json=dict(draft), timeout=self.timeout_sec)
        if response.status_code == 409:
            raise ConflictError(_detail_message(response, "An application with this email already exists"))
        if response.status_code == 422:
            raise _validation_failure(response)
        response.raise_for_status()

        body = response.json()
        try:
            return SubmissionReceipt(id=str(body["id"]), email=str(body["email"]), message=str(body["message"]))
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Unexpected submission response: {body!r}") from exc

    def is_email_available(self, email: str) -> bool:
        response = self.http.get(
            f"{self.api_url}/api/applications/email-available",
            params={"email": email},
            timeout=self.timeout_sec,
        )
        response.raise_for_status()
        return bool(response.json().get("available"))

    def list_categories(self) -> list[dict[str, str]]:
        response = self.http.get(f"{self.api_url}/api/categories", timeout=self.timeout_sec)
        response.raise_for_status()
        return [{"id": str(item["id"]), "name": str(item["name"])} for item in response.json()]


def _detail_message(response: requests.Response, default: str) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return default
    if isinstance(detail, str):
        return detail
    if isinstance(detail, Mapping) and isinstance(detail.get("message"), str):
        return detail["message"]
    return default


def _validation_failure(response: requests.Response) -> ValidationFailed:
    try:
        detail = response.json().get("detail")
    except ValueError as exc:
        raise ValueError("Validation response was not JSON") from exc
    if not isinstance(detail, Mapping) or not isinstance(detail.get("errors"), list):
        raise ValueError(f"Unexpected validation response: {detail!r}")

    errors = [
        FieldError(parse_field_path(str(item.get("path", ""))), str(item.get("message", "")))
        for item in detail["errors"]
        if isinstance(item, Mapping)
    ]
    logger.info("Server rejected submission with %d field error(s)", len(errors))
    return ValidationFailed(errors, message=str(detail.get("message") or "Please correct the highlighted fields"))
