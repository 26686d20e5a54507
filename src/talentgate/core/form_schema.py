from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Literal
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from talentgate.core.errors import FieldError, FieldPath

EducationLevel = Literal["bachelor", "master", "doctorate", "postdoctoral", "none", "other"]
JobStatus = Literal["employed", "unemployed", "self_employed", "retired", "student", "other"]
Availability = Literal["full_time", "part_time", "freelance"]
SkillLevel = Literal["beginner", "intermediate", "advanced", "expert"]
LanguageProficiency = Literal["beginner", "intermediate", "advanced", "native"]
SocialPlatform = Literal["linkedin", "github", "twitter", "facebook", "instagram", "youtube"]

TOTAL_STEPS = 10
STEP_TITLES: dict[int, str] = {
    1: "User Identity",
    2: "Professional Baseline",
    3: "Personal Profile",
    4: "Language Proficiency",
    5: "Social Profiles",
    6: "Availability & Compensation",
    7: "Skills",
    8: "Work Experience",
    9: "Resume & Video",
    10: "Review",
}

PORTFOLIO_REQUIRED_CATEGORIES = frozenset(
    {
        "Frontend Developer",
        "Backend Developer",
        "Full-Stack Developer",
        "UI/UX Designer",
        "Graphic Designer",
    }
)
VIDEO_EDITOR_CATEGORY = "Video Editor"
ENGLISH = "english"

_PHONE_STRIP = re.compile(r"[\s\-()]")
_PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise PydanticCustomError("url", "Please enter a valid URL (e.g., https://example.com)")
    return value


def _check_year(value: int) -> int:
    if value > date.today().year:
        raise PydanticCustomError("year_in_future", "Year cannot be in the future")
    return value


Url = Annotated[str, AfterValidator(_check_url)]
Year = Annotated[int, Field(ge=1900), AfterValidator(_check_year)]
Money = Annotated[
    Decimal,
    Field(ge=0, le=10_000_000, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]


def normalize_tag(tag: str) -> str:
    return tag.strip().lower()


def normalize_chips(values: Iterable[str], *, lower: bool = False, unique: bool = True) -> list[str]:
    seen: set[str] = set()
    chips: list[str] = []
    for raw in values:
        value = normalize_tag(raw) if lower else raw.strip()
        if not value or (unique and value in seen):
            continue
        seen.add(value)
        chips.append(value)
    return chips


class FormModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _blank_optionals(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        cleaned = dict(data)
        for name, info in cls.model_fields.items():
            value = cleaned.get(name)
            if info.is_required():
                if name in cleaned and value is None:
                    del cleaned[name]
            elif isinstance(value, str) and not value.strip():
                cleaned[name] = None
        return cleaned


class LanguageEntry(FormModel):
    name: str = Field(min_length=1, max_length=50)
    proficiency: LanguageProficiency | None = None

    @property
    def is_english(self) -> bool:
        return self.name.casefold() == ENGLISH


class SocialEntry(FormModel):
    platform: SocialPlatform
    url: Url


class SkillEntry(FormModel):
    name: str = Field(min_length=1, max_length=100)
    tags: list[str] = Field(default_factory=list)
    level: SkillLevel
    total_experience: int | None = Field(default=None, ge=0, le=100)
    start_year: Year | None = None
    institution: str | None = Field(default=None, max_length=200)
    self_taught: bool | None = None

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return normalize_chips(value, lower=True)

    @model_validator(mode="after")
    def _drop_institution_when_self_taught(self) -> SkillEntry:
        if self.self_taught:
            self.institution = None
        return self


class ExperienceEntry(FormModel):
    company: str | None = Field(default=None, max_length=200)
    position: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    start_year: Year | None = None
    end_year: Year | None = None
    is_current: bool = False
    links: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    category_ids: list[str] = Field(default_factory=list)

    @field_validator("links", "category_ids")
    @classmethod
    def _normalize_unique_lists(cls, value: list[str]) -> list[str]:
        return normalize_chips(value)

    @field_validator("achievements")
    @classmethod
    def _normalize_achievements(cls, value: list[str]) -> list[str]:
        return normalize_chips(value, unique=False)


class IdentityStep(FormModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone_number: str = Field(min_length=1, max_length=20)

    @field_validator("phone_number")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        if not _PHONE_PATTERN.match(_PHONE_STRIP.sub("", value)):
            raise PydanticCustomError("phone", "Please enter a valid phone number (e.g., +1 555 123 4567)")
        return value


class BaselineStep(FormModel):
    highest_formal_education_level: EducationLevel
    current_job_status: JobStatus
    category: str = Field(min_length=1, max_length=200)
    portfolio_links: list[Url] = Field(default_factory=list)
    portfolio_file_url: Url | None = None


class ProfileStep(FormModel):
    country_of_residence: str = Field(min_length=2, max_length=2)
    time_zone: str = Field(min_length=1, max_length=64)
    country_of_origin: str | None = Field(default=None, min_length=2, max_length=2)
    city: str | None = Field(default=None, max_length=100)
    birth_year: Year | None = None

    @field_validator("country_of_residence", "country_of_origin")
    @classmethod
    def _upper_country(cls, value: str | None) -> str | None:
        return value.upper() if value else value


class LanguageStep(FormModel):
    languages: list[LanguageEntry] = Field(min_length=1)


class SocialStep(FormModel):
    linkedin_url: Url
    social_profiles: list[SocialEntry] = Field(default_factory=list)


class AvailabilityStep(FormModel):
    availability: Availability
    available_in: int | None = Field(default=None, ge=0, le=365)
    hours_per_week: int | None = Field(default=None, ge=1, le=80)
    available_from: date | None = None
    expected_salary: Money


class SkillsStep(FormModel):
    skills: list[SkillEntry] = Field(default_factory=list)


class ExperienceStep(FormModel):
    experiences: list[ExperienceEntry] = Field(default_factory=list)


class ResumeStep(FormModel):
    resume_url: Url | None = None
    video_url: Url | None = None
    notes: str | None = Field(default=None, max_length=5000)


class ReviewStep(FormModel):
    pass


class ApplicationForm(
    IdentityStep,
    BaselineStep,
    ProfileStep,
    LanguageStep,
    SocialStep,
    AvailabilityStep,
    SkillsStep,
    ExperienceStep,
    ResumeStep,
    ReviewStep,
):
    pass


STEP_MODELS: dict[int, type[FormModel]] = {
    1: IdentityStep,
    2: BaselineStep,
    3: ProfileStep,
    4: LanguageStep,
    5: SocialStep,
    6: AvailabilityStep,
    7: SkillsStep,
    8: ExperienceStep,
    9: ResumeStep,
    10: ReviewStep,
}

FIELD_STEPS: dict[str, int] = {
    "first_name": 1,
    "last_name": 1,
    "email": 1,
    "phone_number": 1,
    "highest_formal_education_level": 2,
    "current_job_status": 2,
    "category": 2,
    "portfolio_links": 2,
    "portfolio_file_url": 2,
    "country_of_residence": 3,
    "time_zone": 3,
    "country_of_origin": 3,
    "city": 3,
    "birth_year": 3,
    "languages": 4,
    "linkedin_url": 5,
    "social_profiles": 5,
    "availability": 6,
    "available_in": 6,
    "hours_per_week": 6,
    "available_from": 6,
    "expected_salary": 6,
    "skills": 7,
    "experiences": 8,
    "resume_url": 9,
    "video_url": 9,
    "notes": 9,
}

FIELD_MESSAGES: dict[tuple[str, str], str] = {
    ("first_name", "missing"): "First name is required",
    ("first_name", "string_too_short"): "First name is required",
    ("first_name", "string_too_long"): "First name must be less than 100 characters",
    ("last_name", "missing"): "Last name is required",
    ("last_name", "string_too_short"): "Last name is required",
    ("last_name", "string_too_long"): "Last name must be less than 100 characters",
    ("email", "missing"): "Email address is required",
    ("email", "value_error"): "Please enter a valid email address (e.g., name@example.com)",
    ("phone_number", "missing"): "Phone number is required",
    ("phone_number", "string_too_short"): "Phone number is required",
    ("phone_number", "string_too_long"): "Phone number must be less than 20 characters",
    ("highest_formal_education_level", "missing"): "Please select your highest level of education",
    ("highest_formal_education_level", "literal_error"): "Please select your highest level of education",
    ("current_job_status", "missing"): "Please select your current job status",
    ("current_job_status", "literal_error"): "Please select your current job status",
    ("category", "missing"): "Please select or enter your specialization",
    ("category", "string_too_short"): "Please select or enter your specialization",
    ("category", "string_too_long"): "Specialization must be less than 200 characters",
    ("country_of_residence", "missing"): "Please select your country of residence",
    ("country_of_residence", "string_too_short"): "Please select your country of residence",
    ("country_of_residence", "string_too_long"): "Please select your country of residence",
    ("time_zone", "missing"): "Please select your time zone",
    ("time_zone", "string_too_short"): "Please select your time zone",
    ("country_of_origin", "string_too_short"): "Country code must be 2 characters",
    ("country_of_origin", "string_too_long"): "Country code must be 2 characters",
    ("city", "string_too_long"): "City name must be less than 100 characters",
    ("birth_year", "greater_than_equal"): "Birth year must be 1900 or later",
    ("birth_year", "year_in_future"): "Birth year cannot be in the future",
    ("languages", "too_short"): "Please add at least one language",
    ("languages", "missing"): "Please add at least one language",
    ("name", "string_too_short"): "Name is required",
    ("proficiency", "literal_error"): "Please select a proficiency level",
    ("linkedin_url", "missing"): "LinkedIn URL is required",
    ("linkedin_url", "url"): "Please enter a valid LinkedIn URL (e.g., https://linkedin.com/in/yourprofile)",
    ("platform", "literal_error"): "Please select a platform",
    ("availability", "missing"): "Please select your availability",
    ("availability", "literal_error"): "Please select your availability",
    ("available_in", "greater_than_equal"): "Available days must be 0 or greater",
    ("available_in", "less_than_equal"): "Available days cannot exceed 365",
    ("hours_per_week", "greater_than_equal"): "Hours per week must be at least 1",
    ("hours_per_week", "less_than_equal"): "Hours per week cannot exceed 80",
    ("expected_salary", "missing"): "Please enter your expected monthly rate",
    ("expected_salary", "greater_than_equal"): "Expected salary must be 0 or greater",
    ("expected_salary", "less_than_equal"): "Expected salary cannot exceed $10,000,000",
    ("expected_salary", "decimal_max_places"): "Salary must have at most 2 decimal places",
    ("level", "missing"): "Please select a skill level",
    ("level", "literal_error"): "Please select a skill level",
    ("total_experience", "greater_than_equal"): "Total experience must be 0 or greater",
    ("total_experience", "less_than_equal"): "Total experience cannot exceed 100 years",
    ("start_year", "greater_than_equal"): "Start year must be 1900 or later",
    ("start_year", "year_in_future"): "Start year cannot be in the future",
    ("end_year", "greater_than_equal"): "End year must be 1900 or later",
    ("end_year", "year_in_future"): "End year cannot be in the future",
    ("institution", "string_too_long"): "Institution name must be less than 200 characters",
    ("company", "string_too_long"): "Company name must be less than 200 characters",
    ("position", "string_too_long"): "Position title must be less than 200 characters",
    ("description", "string_too_long"): "Description must be less than 5000 characters",
    ("resume_url", "url"): "Please enter a valid resume URL (e.g., https://example.com/resume.pdf)",
    ("video_url", "url"): "Please enter a valid video URL (e.g., https://youtube.com/watch?v=...)",
    ("notes", "string_too_long"): "Additional notes must be less than 5000 characters",
}

GENERIC_MESSAGES: dict[str, str] = {
    "missing": "This field is required",
    "literal_error": "Please select a valid option",
    "int_parsing": "Please enter a whole number",
    "int_type": "Please enter a whole number",
    "int_from_float": "Please enter a whole number",
    "decimal_parsing": "Please enter a number",
    "decimal_type": "Please enter a number",
    "bool_parsing": "Please choose yes or no",
    "date_from_datetime_parsing": "Please enter a valid date (YYYY-MM-DD)",
    "date_parsing": "Please enter a valid date (YYYY-MM-DD)",
    "string_type": "Please enter text",
    "list_type": "Please provide a list",
    "model_type": "Please provide the expected fields",
}


def _message_for(error: Mapping[str, Any]) -> str:
    field_name = next((segment for segment in reversed(error["loc"]) if isinstance(segment, str)), "")
    return (
        FIELD_MESSAGES.get((field_name, error["type"]))
        or GENERIC_MESSAGES.get(error["type"])
        or error["msg"]
    )


def _errors_from(exc: ValidationError) -> list[FieldError]:
    return [FieldError(path=tuple(error["loc"]), message=_message_for(error)) for error in exc.errors()]


def portfolio_requirement(category: str | None) -> Literal["links", "links_or_file", "none"]:
    normalized = (category or "").strip().casefold()
    if normalized in {item.casefold() for item in PORTFOLIO_REQUIRED_CATEGORIES}:
        return "links"
    if normalized == VIDEO_EDITOR_CATEGORY.casefold():
        return "links_or_file"
    return "none"


def _portfolio_links_required(data: BaselineStep) -> Iterator[FieldError]:
    if portfolio_requirement(data.category) == "links" and not data.portfolio_links:
        yield FieldError(("portfolio_links",), "Please add at least one portfolio link for this specialization")


def _video_editor_portfolio(data: BaselineStep) -> Iterator[FieldError]:
    if portfolio_requirement(data.category) != "links_or_file":
        return
    if not data.portfolio_links and not data.portfolio_file_url:
        yield FieldError(("portfolio_links",), "Please add a portfolio link or upload a portfolio file")


def _english_present(data: LanguageStep) -> Iterator[FieldError]:
    if not any(language.is_english for language in data.languages):
        yield FieldError(("languages",), "English is required. Please add English to your languages.")


def _english_proficiency(data: LanguageStep) -> Iterator[FieldError]:
    for index, language in enumerate(data.languages):
        if language.is_english and language.proficiency is None:
            yield FieldError(("languages", index, "proficiency"), "Please select your English proficiency level")


def _language_proficiency(data: LanguageStep) -> Iterator[FieldError]:
    for index, language in enumerate(data.languages):
        if not language.is_english and language.proficiency is None:
            yield FieldError(
                ("languages", index, "proficiency"),
                "Please select a proficiency level for all languages",
            )


def _unique_social_platforms(data: SocialStep) -> Iterator[FieldError]:
    platforms = [profile.platform for profile in data.social_profiles]
    if len(set(platforms)) != len(platforms):
        yield FieldError(
            ("social_profiles",),
            "You cannot add the same platform twice. Please remove the duplicate.",
        )


def _full_time_lead_time(data: AvailabilityStep) -> Iterator[FieldError]:
    if data.availability == "full_time" and data.available_in is None:
        yield FieldError(
            ("available_in",),
            "Please specify how many days until you're available for full-time work",
        )


def _part_time_hours(data: AvailabilityStep) -> Iterator[FieldError]:
    if data.availability != "full_time" and data.hours_per_week is None:
        yield FieldError(("hours_per_week",), "Please specify how many hours per week you're available")


def _unique_skill_names(data: SkillsStep) -> Iterator[FieldError]:
    names = [skill.name.casefold() for skill in data.skills]
    if len(set(names)) != len(names):
        yield FieldError(("skills",), "You cannot add the same skill twice. Please remove the duplicate.")


def _experience_years(data: ExperienceStep) -> Iterator[FieldError]:
    for index, entry in enumerate(data.experiences):
        path: FieldPath = ("experiences", index, "end_year")
        if entry.is_current and entry.end_year is not None:
            yield FieldError(path, "End year should be empty for current positions")
        if entry.end_year is not None and entry.start_year is not None and entry.end_year < entry.start_year:
            yield FieldError(path, "End year must be the same as or after the start year")
        if not entry.is_current and entry.end_year is None:
            yield FieldError(
                path,
                "Please provide an end year for past positions, or mark this as your current position",
            )


def _experience_has_content(data: ExperienceStep) -> Iterator[FieldError]:
    for index, entry in enumerate(data.experiences):
        if not (entry.company or entry.position or entry.description):
            yield FieldError(
                ("experiences", index),
                "Please provide at least a company name, position title, or description",
            )


@dataclass(frozen=True, slots=True)
class Rule:
    step: int
    name: str
    check: Callable[[Any], Iterator[FieldError]]


RULES: tuple[Rule, ...] = (
    Rule(2, "portfolio_links_required", _portfolio_links_required),
    Rule(2, "video_editor_portfolio", _video_editor_portfolio),
    Rule(4, "english_present", _english_present),
    Rule(4, "english_proficiency", _english_proficiency),
    Rule(4, "language_proficiency", _language_proficiency),
    Rule(5, "unique_social_platforms", _unique_social_platforms),
    Rule(6, "full_time_lead_time", _full_time_lead_time),
    Rule(6, "part_time_hours", _part_time_hours),
    Rule(7, "unique_skill_names", _unique_skill_names),
    Rule(8, "experience_years", _experience_years),
    Rule(8, "experience_has_content", _experience_has_content),
)


@dataclass(slots=True)
class ValidationResult:
    errors: list[FieldError] = field(default_factory=list)
    data: BaseModel | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def first_step(self) -> int | None:
        return first_error_step(error.path for error in self.errors)

    def by_path(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.key, []).append(error.message)
        return grouped

    def as_payload(self) -> list[dict[str, Any]]:
        return [error.as_dict(step_for_path(error.path)) for error in self.errors]


def step_for_path(path: Iterable[str | int]) -> int | None:
    for segment in path:
        if isinstance(segment, str):
            return FIELD_STEPS.get(segment)
        return None
    return None


def first_error_step(paths: Iterable[Iterable[str | int]]) -> int | None:
    for path in paths:
        step = step_for_path(path)
        if step is not None:
            return step
    return None


def _check_step(step: int, draft: Mapping[str, Any]) -> tuple[FormModel | None, list[FieldError]]:
    try:
        model = STEP_MODELS[step].model_validate(draft)
    except ValidationError as exc:
        return None, _errors_from(exc)

    errors: list[FieldError] = []
    for rule in RULES:
        if rule.step == step:
            errors.extend(rule.check(model))
    return model, errors


def validate_step(draft: Mapping[str, Any], step: int) -> ValidationResult:
    if step not in STEP_MODELS:
        raise ValueError(f"step must be between 1 and {TOTAL_STEPS}, got {step}")
    if step == TOTAL_STEPS:
        return validate_submission(draft)

    model, errors = _check_step(step, draft)
    return ValidationResult(errors=errors, data=None if errors else model)


def validate_submission(draft: Mapping[str, Any]) -> ValidationResult:
    errors: list[FieldError] = []
    for step in range(1, TOTAL_STEPS + 1):
        _, step_errors = _check_step(step, draft)
        errors.extend(step_errors)

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(data=ApplicationForm.model_validate(draft))
