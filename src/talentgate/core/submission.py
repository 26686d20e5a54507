from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from talentgate.core.errors import ConflictError, FieldError, ValidationFailed
from talentgate.core.form_schema import ApplicationForm, validate_submission
from talentgate.db.models import (
    Application,
    Experience,
    ExperienceCategory,
    Language,
    Skill,
    Social,
    new_id,
)
from talentgate.db.repositories import Repository, normalize_email

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An application with this email already exists"
SUCCESS_MESSAGE = "Application submitted successfully"


@dataclass(frozen=True, slots=True)
class SubmissionReceipt:
    id: str
    email: str
    message: str = SUCCESS_MESSAGE


def build_application(form: ApplicationForm) -> Application:
    """Map a validated form onto a new Application graph (not yet added to a session)."""
    application = Application(
        id=new_id(),
        first_name=form.first_name,
        last_name=form.last_name,
        email=normalize_email(form.email),
        phone_number=form.phone_number,
        birth_year=form.birth_year,
        country_of_origin=form.country_of_origin,
        country_of_residence=form.country_of_residence,
        city=form.city,
        time_zone=form.time_zone,
        highest_formal_education_level=form.highest_formal_education_level,
        current_job_status=form.current_job_status,
        category=form.category,
        availability=form.availability,
        available_in=(form.available_in or 0) if form.availability == "full_time" else 0,
        hours_per_week=form.hours_per_week,
        available_from=form.available_from,
        expected_salary=form.expected_salary,
        resume_url=form.resume_url or None,
        video_url=form.video_url or None,
        portfolio_links=list(form.portfolio_links),
        portfolio_file_url=form.portfolio_file_url or None,
        notes=form.notes,
        status="active",
    )

    application.languages = [
        Language(name=entry.name, proficiency=entry.proficiency, sort_order=index)
        for index, entry in enumerate(form.languages)
    ]

    socials = [Social(platform="linkedin", url=form.linkedin_url, sort_order=0)]
    socials.extend(
        Social(platform=profile.platform, url=profile.url, sort_order=index)
        for index, profile in enumerate(form.social_profiles, start=1)
    )
    application.socials = socials

    application.skills = [
        Skill(
            name=entry.name,
            tags=list(entry.tags),
            level=entry.level,
            total_experience=entry.total_experience,
            start_year=entry.start_year,
            institution=entry.institution,
            self_taught=entry.self_taught,
            sort_order=index,
        )
        for index, entry in enumerate(form.skills)
    ]

    experiences: list[Experience] = []
    for index, entry in enumerate(form.experiences):
        experience = Experience(
            id=new_id(),
            company=entry.company,
            position=entry.position,
            description=entry.description,
            start_year=entry.start_year,
            end_year=None if entry.is_current else entry.end_year,
            is_current=entry.is_current,
            links=list(entry.links),
            achievements=list(entry.achievements),
            sort_order=index,
        )
        experience.category_links = [
            ExperienceCategory(category_id=category_id) for category_id in entry.category_ids
        ]
        experiences.append(experience)
    application.experiences = experiences
    return application


class SubmissionService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = Repository(session)

    def is_email_available(self, email: str) -> bool:
        return not self.repo.email_exists(email)

    def submit(self, payload: Mapping[str, Any]) -> SubmissionReceipt:
        result = validate_submission(payload)
        if not result.is_valid:
            logger.info("Submission rejected: %d field error(s)", len(result.errors))
            raise ValidationFailed(result.errors)

        form = cast(ApplicationForm, result.data)
        self._check_categories(form)

        email = normalize_email(form.email)
        if self.repo.email_exists(email):
            logger.info("Submission rejected: duplicate email")
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        application = build_application(form)
        try:
            self.repo.create_application(application)
        except IntegrityError as exc:
            # Lost the race against a concurrent submission with the same email.
            if self.repo.email_exists(email):
                logger.info("Submission rejected: duplicate email detected at commit")
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from exc
            raise

        logger.info("Submission accepted id=%s", application.id)
        return SubmissionReceipt(id=application.id, email=application.email)

    def _check_categories(self, form: ApplicationForm) -> None:
        requested = {category_id for entry in form.experiences for category_id in entry.category_ids}
        known = self.repo.existing_category_ids(requested)
        errors = [
            FieldError(("experiences", index, "category_ids"), "Please select categories from the list")
            for index, entry in enumerate(form.experiences)
            if any(category_id not in known for category_id in entry.category_ids)
        ]
        if errors:
            logger.info("Submission rejected: unknown experience categories")
            raise ValidationFailed(errors)
