from __future__ import annotations

from pathlib import Path

from talentgate.config import get_settings
from talentgate.db import models  # noqa: F401
from talentgate.db.base import Base
from talentgate.db.seed import seed_categories
from talentgate.db.session import SessionLocal, engine


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [settings.data_dir, settings.upload_dir, settings.draft_dir]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        inserted = seed_categories(session)
    return {"seeded_categories": inserted}
