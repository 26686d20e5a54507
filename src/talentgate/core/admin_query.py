from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field
from sqlalchemy import String, and_, cast, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement

from talentgate.config import get_settings
from talentgate.core.errors import NotFoundError
from talentgate.db.base import utcnow
from talentgate.db.models import Application, Experience, Skill, Social
from talentgate.db.repositories import Repository

logger = logging.getLogger(__name__)

FilterStrategy = Literal["exists", "two_phase"]
ApplicationStatus = Literal["active", "archived"]

NOT_FOUND_MESSAGE = "Application not found"

CHILD_TABLES = {
    "filter_min_skills": Skill,
    "filter_min_experiences": Experience,
    "filter_min_socials": Social,
}


class ApplicationQuery(BaseModel):
    search_value: str | None = None
    search_field: Literal["name", "email", "category"] | None = None
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    sort_by: Literal["created_at", "name"] | None = None
    sort_direction: Literal["asc", "desc"] = "desc"
    filter_status: str | None = None
    filter_category: str | None = None
    filter_min_skills: bool = False
    filter_min_experiences: bool = False
    filter_min_socials: bool = False
    filter_has_portfolio: bool = False
    filter_has_note: bool = False
    filter_has_resume: bool = False
    filter_has_video: bool = False

    @property
    def cardinality_filters(self) -> list[str]:
        return [name for name in CHILD_TABLES if getattr(self, name)]


@dataclass(slots=True)
class ApplicationPage:
    applications: list[Application]
    total: int
    limit: int
    offset: int


@dataclass(slots=True)
class FavoriteEntry:
    application: Application
    favorited_by: str
    favorited_at: datetime


@dataclass(slots=True)
class FavoritePage:
    favorites: list[FavoriteEntry]
    total: int
    limit: int
    offset: int


def _present(column: ColumnElement) -> ColumnElement:
    return and_(column.is_not(None), func.trim(column) != "")


def _search_condition(query: ApplicationQuery) -> ColumnElement | None:
    if not query.search_value:
        return None
    term = f"%{query.search_value}%"
    full_name = Application.first_name + " " + Application.last_name
    name_match = or_(
        Application.first_name.ilike(term),
        Application.last_name.ilike(term),
        full_name.ilike(term),
    )
    if query.search_field == "name":
        return name_match
    if query.search_field == "email":
        return Application.email.ilike(term)
    if query.search_field == "category":
        return Application.category.ilike(term)
    return or_(name_match, Application.email.ilike(term))


def root_conditions(query: ApplicationQuery) -> list[ColumnElement]:
    """Predicates that only need columns of the applications table."""
    conditions: list[ColumnElement] = []
    search = _search_condition(query)
    if search is not None:
        conditions.append(search)
    if query.filter_status:
        conditions.append(Application.status == query.filter_status)
    if query.filter_category:
        conditions.append(Application.category == query.filter_category)
    if query.filter_has_note:
        conditions.append(_present(Application.notes))
    if query.filter_has_resume:
        conditions.append(_present(Application.resume_url))
    if query.filter_has_video:
        conditions.append(_present(Application.video_url))
    if query.filter_has_portfolio:
        conditions.append(
            or_(
                _present(Application.portfolio_file_url),
                cast(Application.portfolio_links, String).not_in(["[]", "null"]),
            )
        )
    return conditions


def exists_conditions(query: ApplicationQuery) -> list[ColumnElement]:
    return [
        select(model.id).where(model.application_id == Application.id).exists()
        for name, model in CHILD_TABLES.items()
        if getattr(query, name)
    ]


def _ordering(query: ApplicationQuery) -> list[ColumnElement]:
    column = Application.first_name if query.sort_by == "name" else Application.created_at
    if query.sort_direction == "asc":
        return [column.asc(), Application.id.asc()]
    return [column.desc(), Application.id.desc()]


def _child_counts(session: Session, query: ApplicationQuery, ids: Sequence[str]) -> dict[str, dict[str, int]]:
    counts: dict[str, dict[str, int]] = {}
    for name in query.cardinality_filters:
        model = CHILD_TABLES[name]
        rows = session.execute(
            select(model.application_id, func.count())
            .where(model.application_id.in_(ids))
            .group_by(model.application_id)
        ).all()
        counts[name] = {application_id: int(count) for application_id, count in rows}
    return counts


def _passes(application_id: str, counts: dict[str, dict[str, int]]) -> bool:
    return all(per_app.get(application_id, 0) >= 1 for per_app in counts.values())


def _list_with_exists(session: Session, query: ApplicationQuery) -> ApplicationPage:
    conditions = [*root_conditions(query), *exists_conditions(query)]
    stmt = select(Application).where(*conditions).order_by(*_ordering(query))
    applications = list(session.scalars(stmt.limit(query.limit).offset(query.offset)).all())
    total = session.scalar(select(func.count()).select_from(Application).where(*conditions)) or 0
    return ApplicationPage(applications=applications, total=int(total), limit=query.limit, offset=query.offset)


def _list_two_phase(session: Session, query: ApplicationQuery) -> ApplicationPage:
    conditions = root_conditions(query)
    if not query.cardinality_filters:
        return _list_with_exists(session, query)

    settings = get_settings()
    window = (query.offset + query.limit) * settings.admin_overfetch_factor
    stmt = select(Application).where(*conditions).order_by(*_ordering(query))
    candidates = list(session.scalars(stmt.limit(window)).all())
    counts = _child_counts(session, query, [application.id for application in candidates])
    matching = [application for application in candidates if _passes(application.id, counts)]
    page = matching[query.offset : query.offset + query.limit]

    all_ids = list(
        session.scalars(
            select(Application.id).where(*conditions).order_by(*_ordering(query)).limit(settings.admin_count_ceiling)
        ).all()
    )
    if len(all_ids) >= settings.admin_count_ceiling:
        logger.warning("Listing total capped at %s candidates", settings.admin_count_ceiling)
    all_counts = _child_counts(session, query, all_ids) if all_ids else {}
    total = sum(1 for application_id in all_ids if _passes(application_id, all_counts))
    return ApplicationPage(applications=page, total=total, limit=query.limit, offset=query.offset)


def list_applications(
    session: Session,
    query: ApplicationQuery,
    strategy: FilterStrategy | None = None,
) -> ApplicationPage:
    strategy = strategy or get_settings().admin_filter_strategy
    if strategy == "two_phase":
        return _list_two_phase(session, query)
    return _list_with_exists(session, query)


def get_application_detail(session: Session, application_id: str) -> Application:
    application = Repository(session).get_application(application_id)
    if application is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return application


def set_status(session: Session, application_id: str, status: ApplicationStatus) -> Application:
    application = Repository(session).get_application(application_id, load_relations=False)
    if application is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    application.status = status
    application.archived_at = utcnow() if status == "archived" else None
    session.commit()
    session.refresh(application)
    logger.info("Application %s marked %s", application_id, status)
    return application


def toggle_favorite(session: Session, user_id: str, application_id: str) -> bool:
    repo = Repository(session)
    if repo.get_application(application_id, load_relations=False) is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    if repo.get_favorite(user_id, application_id) is not None:
        repo.remove_favorite(user_id, application_id)
        return False
    try:
        repo.add_favorite(user_id, application_id)
    except IntegrityError:
        session.rollback()
        logger.info("Favorite for %s by %s was added concurrently", application_id, user_id)
        return repo.get_favorite(user_id, application_id) is not None
    return True


def is_favorite(session: Session, user_id: str, application_id: str) -> bool:
    return Repository(session).get_favorite(user_id, application_id) is not None


def list_favorites(session: Session, limit: int = 50, offset: int = 0) -> FavoritePage:
    repo = Repository(session)
    favorites = [
        FavoriteEntry(
            application=favorite.application,
            favorited_by=favorite.user_id,
            favorited_at=favorite.created_at,
        )
        for favorite in repo.list_favorites(limit=limit, offset=offset)
    ]
    return FavoritePage(favorites=favorites, total=repo.count_favorites(), limit=limit, offset=offset)
