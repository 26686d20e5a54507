from __future__ import annotations

import copy
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="talentgate-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'talentgate.db'}"
os.environ["DATA_DIR"] = str(_TEST_ROOT)
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["DRAFT_DIR"] = str(_TEST_ROOT / "drafts")
os.environ["APP_ENV"] = "test"
os.environ["PUBLIC_APP_URL"] = "https://apply.example.org/"

import pytest  # noqa: E402

from talentgate.config import get_settings  # noqa: E402
from talentgate.db.base import Base  # noqa: E402
from talentgate.db.seed import seed_categories  # noqa: E402
from talentgate.db.session import SessionLocal, engine  # noqa: E402

VALID_DRAFT: dict[str, Any] = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@lovelace.dev",
    "phone_number": "+1 555 123 4567",
    "highest_formal_education_level": "master",
    "current_job_status": "employed",
    "category": "Backend Developer",
    "portfolio_links": ["https://github.com/ada"],
    "portfolio_file_url": "",
    "country_of_residence": "GB",
    "time_zone": "Europe/London",
    "country_of_origin": "GB",
    "city": "London",
    "birth_year": 1990,
    "languages": [
        {"name": "English", "proficiency": "native"},
        {"name": "French", "proficiency": "intermediate"},
    ],
    "linkedin_url": "https://linkedin.com/in/ada",
    "social_profiles": [{"platform": "github", "url": "https://github.com/ada"}],
    "availability": "full_time",
    "available_in": 14,
    "hours_per_week": None,
    "available_from": "2026-11-01",
    "expected_salary": 4500,
    "skills": [
        {
            "name": "Python",
            "tags": ["Backend", "APIs"],
            "level": "expert",
            "total_experience": 8,
            "start_year": 2016,
            "institution": "",
            "self_taught": True,
        }
    ],
    "experiences": [
        {
            "company": "Analytical Engines",
            "position": "Backend Engineer",
            "description": "Built the billing APIs",
            "start_year": 2018,
            "end_year": None,
            "is_current": True,
            "links": [],
            "achievements": ["Shipped v2"],
            "category_ids": [],
        }
    ],
    "resume_url": "https://files.example.org/ada.pdf",
    "video_url": "",
    "notes": "Happy to work across time zones",
}


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_categories(session)
    yield


@pytest.fixture
def make_draft() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        draft = copy.deepcopy(VALID_DRAFT)
        draft.update(copy.deepcopy(overrides))
        return draft

    return _make


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
