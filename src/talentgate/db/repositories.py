from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import Select

from talentgate.db.models import Application, Category, Experience, Favorite


def normalize_email(email: str) -> str:
    return email.strip().lower()


def with_relations(stmt: Select) -> Select:
    return stmt.options(
        selectinload(Application.languages),
        selectinload(Application.socials),
        selectinload(Application.skills),
        selectinload(Application.experiences).selectinload(Experience.categories),
    )


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def list_categories(self) -> list[Category]:
        return list(self.session.scalars(select(Category).order_by(Category.name)).all())

    def existing_category_ids(self, ids: Iterable[str]) -> set[str]:
        wanted = set(ids)
        if not wanted:
            return set()
        return set(self.session.scalars(select(Category.id).where(Category.id.in_(wanted))).all())

    def email_exists(self, email: str) -> bool:
        stmt = select(Application.id).where(func.lower(Application.email) == normalize_email(email))
        return self.session.scalar(stmt.limit(1)) is not None

    def create_application(self, application: Application) -> Application:
        self.session.add(application)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(application)
        return application

    def get_application(self, application_id: str, *, load_relations: bool = True) -> Application | None:
        stmt = select(Application).where(Application.id == application_id)
        if load_relations:
            stmt = with_relations(stmt)
        return self.session.scalar(stmt)

    def get_public_application(self, token: str) -> Application | None:
        stmt = select(Application).where(
            Application.public_token == token,
            Application.is_public.is_(True),
        )
        return self.session.scalar(with_relations(stmt))

    def token_in_use(self, token: str) -> bool:
        stmt = select(Application.id).where(Application.public_token == token)
        return self.session.scalar(stmt.limit(1)) is not None

    def get_favorite(self, user_id: str, application_id: str) -> Favorite | None:
        return self.session.scalar(
            select(Favorite).where(Favorite.user_id == user_id, Favorite.application_id == application_id)
        )

    def add_favorite(self, user_id: str, application_id: str) -> Favorite:
        favorite = Favorite(user_id=user_id, application_id=application_id)
        self.session.add(favorite)
        self.session.commit()
        self.session.refresh(favorite)
        return favorite

    def remove_favorite(self, user_id: str, application_id: str) -> None:
        self.session.execute(
            delete(Favorite).where(Favorite.user_id == user_id, Favorite.application_id == application_id)
        )
        self.session.commit()

    def list_favorites(self, limit: int = 50, offset: int = 0) -> list[Favorite]:
        stmt = (
            select(Favorite)
            .options(selectinload(Favorite.application))
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.scalars(stmt).all())

    def count_favorites(self) -> int:
        return int(self.session.scalar(select(func.count()).select_from(Favorite)) or 0)
