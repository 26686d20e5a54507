from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from talentgate.db.models import Category

DEFAULT_CATEGORIES: list[str] = [
    "Frontend Developer",
    "Backend Developer",
    "Full-Stack Developer",
    "Mobile Developer",
    "DevOps Engineer",
    "Data Scientist",
    "QA Engineer",
    "UI/UX Designer",
    "Graphic Designer",
    "Video Editor",
    "Product Manager",
    "Project Manager",
    "Content Writer",
    "Digital Marketer",
    "Customer Support",
    "Virtual Assistant",
]


def seed_categories(session: Session, names: list[str] | None = None) -> int:
    existing = set(session.scalars(select(Category.name)).all())
    inserted = 0
    for name in names or DEFAULT_CATEGORIES:
        if name in existing:
            continue
        session.add(Category(name=name))
        existing.add(name)
        inserted += 1

    session.commit()
    return inserted
