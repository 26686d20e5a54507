from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ExportFormat = Literal["csv", "json"]
UploadKind = Literal["resume", "portfolio"]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CategoryView(ORMModel):
    id: str
    name: str


class LanguageView(ORMModel):
    id: str
    name: str
    proficiency: str


class SocialView(ORMModel):
    id: str
    platform: str
    url: str


class SkillView(ORMModel):
    id: str
    name: str
    tags: list[str] = Field(default_factory=list)
    level: str | None = None
    total_experience: int | None = None
    start_year: int | None = None
    institution: str | None = None
    self_taught: bool | None = None


class ExperienceView(ORMModel):
    id: str
    company: str | None = None
    position: str | None = None
    description: str | None = None
    start_year: int | None = None
    end_year: int | None = None
    is_current: bool
    links: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    categories: list[CategoryView] = Field(default_factory=list)


class ApplicationSummary(ORMModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    category: str
    status: str
    country_of_residence: str
    city: str | None = None
    availability: str | None = None
    expected_salary: float | None = None
    resume_url: str | None = None
    video_url: str | None = None
    portfolio_links: list[str] = Field(default_factory=list)
    portfolio_file_url: str | None = None
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_public: bool
    created_at: datetime
    updated_at: datetime


class ApplicationDetail(ApplicationSummary):
    birth_year: int | None = None
    country_of_origin: str | None = None
    time_zone: str | None = None
    highest_formal_education_level: str | None = None
    current_job_status: str | None = None
    available_in: int = 0
    hours_per_week: int | None = None
    available_from: date | None = None
    source: str | None = None
    archived_at: datetime | None = None
    languages: list[LanguageView] = Field(default_factory=list)
    socials: list[SocialView] = Field(default_factory=list)
    skills: list[SkillView] = Field(default_factory=list)
    experiences: list[ExperienceView] = Field(default_factory=list)
