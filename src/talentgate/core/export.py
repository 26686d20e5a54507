from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from talentgate.db.models import Application
from talentgate.db.repositories import with_relations
from talentgate.types import ApplicationDetail, ExportFormat

logger = logging.getLogger(__name__)

LIST_SEPARATOR = "; "


@dataclass(frozen=True, slots=True)
class ExportResult:
    format: ExportFormat
    data: str


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _timestamp(value: Any) -> str:
    return value.isoformat() if value is not None else ""


def _experience_label(position: str | None, company: str | None) -> str:
    return " at ".join(part for part in (position, company) if part)


def flatten_application(application: Application) -> dict[str, str | int]:
    return {
        "id": application.id,
        "first_name": application.first_name,
        "last_name": application.last_name,
        "email": application.email,
        "phone_number": _text(application.phone_number),
        "category": application.category,
        "status": _text(application.status),
        "country_of_residence": application.country_of_residence,
        "country_of_origin": _text(application.country_of_origin),
        "city": _text(application.city),
        "current_job_status": _text(application.current_job_status),
        "highest_formal_education_level": _text(application.highest_formal_education_level),
        "availability": _text(application.availability),
        "hours_per_week": application.hours_per_week if application.hours_per_week is not None else "",
        "expected_salary": _text(application.expected_salary),
        "resume_url": _text(application.resume_url),
        "video_url": _text(application.video_url),
        "notes": _text(application.notes),
        "tags": LIST_SEPARATOR.join(application.tags or []),
        "languages": LIST_SEPARATOR.join(f"{item.name} ({item.proficiency})" for item in application.languages),
        "skills": LIST_SEPARATOR.join(item.name for item in application.skills),
        "experiences": LIST_SEPARATOR.join(
            _experience_label(item.position, item.company) for item in application.experiences
        ),
        "socials": LIST_SEPARATOR.join(f"{item.platform}: {item.url}" for item in application.socials),
        "created_at": _timestamp(application.created_at),
        "updated_at": _timestamp(application.updated_at),
    }


def render_csv(rows: list[dict[str, str | int]]) -> str:
    if not rows:
        return ""
    headers = list(rows[0])
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for row in rows:
        writer.writerow([row[header] for header in headers])
    return "\n".join([",".join(headers), buffer.getvalue().rstrip("\n")])


def render_json(applications: list[Application]) -> str:
    payload = [ApplicationDetail.model_validate(item).model_dump(mode="json") for item in applications]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def export_applications(
    session: Session,
    fmt: ExportFormat = "csv",
    filter_status: str | None = None,
    filter_category: str | None = None,
) -> ExportResult:
    stmt = select(Application)
    if filter_status:
        stmt = stmt.where(Application.status == filter_status)
    if filter_category:
        stmt = stmt.where(Application.category == filter_category)
    stmt = with_relations(stmt.order_by(Application.created_at.desc(), Application.id.desc()))
    applications = list(session.scalars(stmt).all())
    logger.info("Exporting %d application(s) as %s", len(applications), fmt)

    if fmt == "json":
        return ExportResult(format="json", data=render_json(applications))
    return ExportResult(format="csv", data=render_csv([flatten_application(item) for item in applications]))
