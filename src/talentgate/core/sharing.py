from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from talentgate.config import get_settings
from talentgate.core.errors import NotFoundError, TokenMintingError
from talentgate.db.models import Application
from talentgate.db.repositories import Repository

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Application not found"


@dataclass(frozen=True, slots=True)
class ShareState:
    application_id: str
    is_public: bool
    public_token: str | None
    shareable_url: str | None


def generate_token() -> str:
    return secrets.token_hex(get_settings().public_token_bytes)


def build_shareable_url(token: str) -> str:
    return f"{get_settings().public_origin}/application/{token}"


def _state(application: Application) -> ShareState:
    token = application.public_token if application.is_public else None
    return ShareState(
        application_id=application.id,
        is_public=application.is_public,
        public_token=token,
        shareable_url=build_shareable_url(token) if token else None,
    )


def set_public(
    session: Session,
    application_id: str,
    is_public: bool,
    token_factory: Callable[[], str] = generate_token,
) -> ShareState:
    repo = Repository(session)
    application = repo.get_application(application_id, load_relations=False)
    if application is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    if not is_public:
        application.is_public = False
        application.public_token = None
        session.commit()
        logger.info("Application %s is no longer public", application_id)
        return _state(application)

    attempts = get_settings().public_token_max_attempts
    for attempt in range(1, attempts + 1):
        token = token_factory()
        if repo.token_in_use(token):
            logger.warning("Public token collision (attempt %d/%d)", attempt, attempts)
            continue

        application.is_public = True
        application.public_token = token
        try:
            session.commit()
        except IntegrityError:
            # Another writer claimed the same token between the check and the commit.
            session.rollback()
            logger.warning("Public token rejected at commit (attempt %d/%d)", attempt, attempts)
            application = repo.get_application(application_id, load_relations=False)
            if application is None:
                raise NotFoundError(NOT_FOUND_MESSAGE) from None
            continue

        logger.info("Application %s shared publicly", application_id)
        return _state(application)

    logger.error("Could not mint a unique public token after %d attempts", attempts)
    raise TokenMintingError(f"Could not generate a unique public link after {attempts} attempts")


def get_public_application(session: Session, token: str) -> Application:
    application = Repository(session).get_public_application(token) if token else None
    if application is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return application
