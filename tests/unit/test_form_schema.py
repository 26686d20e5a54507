from datetime import date

import pytest

from talentgate.core.form_schema import (
    FIELD_STEPS,
    STEP_MODELS,
    ApplicationForm,
    first_error_step,
    portfolio_requirement,
    step_for_path,
    validate_step,
    validate_submission,
)


def _messages(result) -> dict[str, list[str]]:
    return result.by_path()


def test_complete_draft_passes_and_normalizes(make_draft) -> None:
    result = validate_submission(make_draft())
    assert result.is_valid
    assert isinstance(result.data, ApplicationForm)
    skill = result.data.skills[0]
    assert skill.tags == ["backend", "apis"]
    assert skill.institution is None
    assert result.data.country_of_residence == "GB"


def test_missing_first_name_maps_to_step_one(make_draft) -> None:
    result = validate_step(make_draft(first_name="   "), 1)
    assert not result.is_valid
    assert _messages(result)["first_name"] == ["First name is required"]
    assert result.first_step == 1


def test_invalid_email_uses_friendly_message(make_draft) -> None:
    result = validate_step(make_draft(email="not-an-email"), 1)
    assert _messages(result)["email"] == ["Please enter a valid email address (e.g., name@example.com)"]


def test_step_validation_only_checks_its_own_fields(make_draft) -> None:
    broken_later_steps = make_draft(linkedin_url="", experiences=[{"is_current": False}])
    assert validate_step(broken_later_steps, 1).is_valid
    assert not validate_step(broken_later_steps, 5).is_valid
    assert not validate_step(broken_later_steps, 8).is_valid


def test_english_must_be_present(make_draft) -> None:
    result = validate_step(make_draft(languages=[{"name": "French", "proficiency": "native"}]), 4)
    assert _messages(result) == {"languages": ["English is required. Please add English to your languages."]}
    assert result.first_step == 4


def test_english_match_is_case_insensitive(make_draft) -> None:
    result = validate_step(make_draft(languages=[{"name": "english", "proficiency": "advanced"}]), 4)
    assert result.is_valid


def test_english_needs_proficiency(make_draft) -> None:
    result = validate_step(make_draft(languages=[{"name": "English", "proficiency": None}]), 4)
    assert _messages(result) == {"languages.0.proficiency": ["Please select your English proficiency level"]}


def test_every_language_needs_proficiency(make_draft) -> None:
    languages = [{"name": "English", "proficiency": "native"}, {"name": "German", "proficiency": ""}]
    result = validate_step(make_draft(languages=languages), 4)
    assert _messages(result) == {"languages.1.proficiency": ["Please select a proficiency level for all languages"]}


def test_empty_language_list_is_rejected_before_rules(make_draft) -> None:
    result = validate_step(make_draft(languages=[]), 4)
    assert _messages(result) == {"languages": ["Please add at least one language"]}


def test_duplicate_social_platforms_rejected(make_draft) -> None:
    profiles = [
        {"platform": "github", "url": "https://github.com/ada"},
        {"platform": "github", "url": "https://github.com/ada-alt"},
    ]
    result = validate_step(make_draft(social_profiles=profiles), 5)
    assert _messages(result) == {
        "social_profiles": ["You cannot add the same platform twice. Please remove the duplicate."]
    }


def test_linkedin_is_required(make_draft) -> None:
    result = validate_step(make_draft(linkedin_url=None), 5)
    assert _messages(result) == {"linkedin_url": ["LinkedIn URL is required"]}


def test_full_time_requires_lead_time(make_draft) -> None:
    result = validate_step(make_draft(availability="full_time", available_in=None), 6)
    assert _messages(result) == {
        "available_in": ["Please specify how many days until you're available for full-time work"]
    }


@pytest.mark.parametrize("availability", ["part_time", "freelance"])
def test_other_availability_requires_hours(make_draft, availability: str) -> None:
    result = validate_step(make_draft(availability=availability, available_in=None, hours_per_week=None), 6)
    assert _messages(result) == {"hours_per_week": ["Please specify how many hours per week you're available"]}


def test_availability_rules_wait_for_field_constraints(make_draft) -> None:
    result = validate_step(make_draft(availability=None, available_in=None), 6)
    assert list(_messages(result)) == ["availability"]


def test_salary_limited_to_two_decimals(make_draft) -> None:
    result = validate_step(make_draft(expected_salary=1500.555), 6)
    assert _messages(result) == {"expected_salary": ["Salary must have at most 2 decimal places"]}


def test_duplicate_skills_rejected_case_insensitively(make_draft) -> None:
    skills = [
        {"name": "Python", "level": "expert"},
        {"name": "python", "level": "advanced"},
    ]
    result = validate_step(make_draft(skills=skills), 7)
    assert _messages(result) == {"skills": ["You cannot add the same skill twice. Please remove the duplicate."]}


def test_current_position_must_not_have_end_year(make_draft) -> None:
    experiences = [{"company": "Acme", "start_year": 2019, "end_year": 2021, "is_current": True}]
    result = validate_step(make_draft(experiences=experiences), 8)
    assert _messages(result) == {"experiences.0.end_year": ["End year should be empty for current positions"]}


def test_end_year_not_before_start_year(make_draft) -> None:
    experiences = [{"company": "Acme", "start_year": 2020, "end_year": 2019, "is_current": False}]
    result = validate_step(make_draft(experiences=experiences), 8)
    assert _messages(result) == {"experiences.0.end_year": ["End year must be the same as or after the start year"]}


def test_past_position_needs_end_year(make_draft) -> None:
    experiences = [{"company": "Acme", "start_year": 2020, "is_current": False}]
    result = validate_step(make_draft(experiences=experiences), 8)
    assert _messages(result) == {
        "experiences.0.end_year": [
            "Please provide an end year for past positions, or mark this as your current position"
        ]
    }


def test_experience_needs_some_content(make_draft) -> None:
    experiences = [{"company": " ", "position": "", "start_year": 2020, "end_year": 2021}]
    result = validate_step(make_draft(experiences=experiences), 8)
    assert _messages(result) == {
        "experiences.0": ["Please provide at least a company name, position title, or description"]
    }


def test_future_years_rejected(make_draft) -> None:
    result = validate_step(make_draft(birth_year=date.today().year + 1), 3)
    assert _messages(result) == {"birth_year": ["Birth year cannot be in the future"]}


def test_blank_optional_fields_are_accepted(make_draft) -> None:
    result = validate_step(make_draft(city="", country_of_origin="", birth_year=""), 3)
    assert result.is_valid


def test_development_categories_require_portfolio_links(make_draft) -> None:
    result = validate_step(make_draft(category="Frontend Developer", portfolio_links=[]), 2)
    assert _messages(result) == {
        "portfolio_links": ["Please add at least one portfolio link for this specialization"]
    }


def test_development_categories_do_not_accept_file_instead_of_links(make_draft) -> None:
    draft = make_draft(
        category="UI/UX Designer",
        portfolio_links=[],
        portfolio_file_url="https://apply.example.org/uploads/portfolio/1-work.pdf",
    )
    assert not validate_step(draft, 2).is_valid


def test_video_editor_accepts_file_instead_of_links(make_draft) -> None:
    without = make_draft(category="Video Editor", portfolio_links=[], portfolio_file_url="")
    with_file = make_draft(
        category="Video Editor",
        portfolio_links=[],
        portfolio_file_url="https://apply.example.org/uploads/portfolio/1-reel.mp4",
    )
    assert _messages(validate_step(without, 2)) == {
        "portfolio_links": ["Please add a portfolio link or upload a portfolio file"]
    }
    assert validate_step(with_file, 2).is_valid


def test_other_categories_need_no_portfolio(make_draft) -> None:
    assert validate_step(make_draft(category="Data Scientist", portfolio_links=[]), 2).is_valid
    assert portfolio_requirement("data scientist") == "none"
    assert portfolio_requirement("full-stack developer") == "links"


def test_whole_submission_reports_earliest_failing_step(make_draft) -> None:
    draft = make_draft(
        city="x" * 101,
        experiences=[{"company": "Acme", "start_year": 2020, "is_current": False}],
    )
    result = validate_submission(draft)
    assert not result.is_valid
    assert result.first_step == 3
    assert {step_for_path(error.path) for error in result.errors} == {3, 8}


def test_field_steps_cover_every_step_model_field() -> None:
    for step, model in STEP_MODELS.items():
        for name in model.model_fields:
            assert FIELD_STEPS[name] == step


def test_step_lookup_uses_leading_field_name() -> None:
    assert step_for_path(("experiences", 0, "end_year")) == 8
    assert step_for_path(("unknown_field",)) is None
    assert step_for_path(()) is None
    assert first_error_step([("nope",), ("notes",), ("email",)]) == 9


def test_unknown_step_number_rejected(make_draft) -> None:
    with pytest.raises(ValueError):
        validate_step(make_draft(), 11)


def test_review_step_runs_whole_validation(make_draft) -> None:
    result = validate_step(make_draft(linkedin_url="linkedin"), 10)
    assert result.first_step == 5
