"""Terminal front end for the application wizard.

All navigation, validation and persistence go through ``talentgate.core.form_state``;
this module only prompts for values and prints state.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, get_args

import typer

from talentgate.core import form_state
from talentgate.core.drafts import DraftStore
from talentgate.core.form_schema import (
    STEP_TITLES,
    TOTAL_STEPS,
    Availability,
    EducationLevel,
    JobStatus,
    LanguageProficiency,
    SkillLevel,
    SocialPlatform,
    portfolio_requirement,
)
from talentgate.core.form_state import FormState, Submitter

Prompt = Callable[..., Any]
Confirm = Callable[..., bool]

SCALAR_FIELDS: dict[int, list[tuple[str, str, tuple[str, ...] | None]]] = {
    1: [
        ("first_name", "First name", None),
        ("last_name", "Last name", None),
        ("email", "Email", None),
        ("phone_number", "Phone number", None),
    ],
    2: [
        ("highest_formal_education_level", "Highest education level", get_args(EducationLevel)),
        ("current_job_status", "Current job status", get_args(JobStatus)),
        ("category", "Specialization", None),
        ("portfolio_file_url", "Portfolio file URL (optional)", None),
    ],
    3: [
        ("country_of_residence", "Country of residence (2-letter code)", None),
        ("time_zone", "Time zone", None),
        ("country_of_origin", "Country of origin (optional)", None),
        ("city", "City (optional)", None),
        ("birth_year", "Birth year (optional)", None),
    ],
    5: [("linkedin_url", "LinkedIn URL", None)],
    6: [("availability", "Availability", get_args(Availability))],
    9: [
        ("resume_url", "Resume URL (optional)", None),
        ("video_url", "Video URL (optional)", None),
        ("notes", "Additional notes (optional)", None),
    ],
}

INTEGER_FIELDS = {"birth_year", "available_in", "hours_per_week", "total_experience", "start_year", "end_year"}
NUMBER_FIELDS = {"expected_salary"}


def coerce(name: str, raw: str) -> Any:
    """Turn prompt text into draft values; anything unparseable is left for validation to report."""
    value = raw.strip()
    if not value:
        return None if name in INTEGER_FIELDS | NUMBER_FIELDS else ""
    try:
        if name in INTEGER_FIELDS:
            return int(value)
        if name in NUMBER_FIELDS:
            return float(value)
    except ValueError:
        return value
    return value


class Wizard:
    def __init__(
        self,
        submitter: Submitter,
        store: DraftStore,
        prompt: Prompt = typer.prompt,
        confirm: Confirm = typer.confirm,
        echo: Callable[[str], None] = typer.echo,
        email_check: Callable[[str], bool] | None = None,
        categories: Callable[[], list[dict[str, str]]] | None = None,
    ):
        self.submitter = submitter
        self.store = store
        self.prompt = prompt
        self.confirm = confirm
        self.echo = echo
        self.email_check = email_check
        self.categories = categories
        self._category_choices: list[dict[str, str]] | None = None

    def run(self, state: FormState | None = None) -> FormState:
        state = state or form_state.hydrate(self.store)
        while not state.is_complete:
            self._header(state)
            if state.is_last_step:
                state, keep_going = self._review(state)
            else:
                state = self._collect(state)
                state, keep_going = self._navigate(state)
            if not keep_going:
                self.echo("Draft saved. Run the wizard again to continue.")
                break
        return state

    def _header(self, state: FormState) -> None:
        step = state.current_step
        self.echo("")
        self.echo(f"Step {step}/{TOTAL_STEPS}: {STEP_TITLES[step]}")
        if state.message:
            self.echo(state.message)
        for path, messages in state.errors.items():
            for message in messages:
                self.echo(f"  ! {path}: {message}")

    def _ask(self, state: FormState, path: str, label: str, choices: tuple[str, ...] | None = None) -> FormState:
        current = state.draft.get(path)
        if choices:
            label = f"{label} [{'/'.join(choices)}]"
        raw = self.prompt(label, default="" if current is None else str(current), show_default=current not in (None, ""))
        return form_state.apply_field_change(state, path, coerce(path, str(raw)), self.store)

    def _collect(self, state: FormState) -> FormState:
        step = state.current_step
        for path, label, choices in SCALAR_FIELDS.get(step, []):
            state = self._ask(state, path, label, choices)

        if step == 1 and self.email_check and state.draft.get("email"):
            if not self.email_check(state.draft["email"]):
                self.echo("  ! An application with this email already exists")
        elif step == 2:
            state = self._portfolio_links(state)
        elif step == 4:
            state = self._languages(state)
        elif step == 5:
            state = self._social_profiles(state)
        elif step == 6:
            state = self._availability(state)
        elif step == 7:
            state = self._skills(state)
        elif step == 8:
            state = self._experiences(state)
        return state

    def _navigate(self, state: FormState) -> tuple[FormState, bool]:
        action = str(self.prompt("Next, back or quit", default="next")).strip().lower()
        if action.startswith("q"):
            return state, False
        if action.startswith("b"):
            return form_state.go_previous(state), True
        return form_state.go_next(state), True

    def _review(self, state: FormState) -> tuple[FormState, bool]:
        self.echo(json.dumps(state.draft, indent=2, default=str))
        action = str(self.prompt("Submit, edit <step>, back or quit", default="submit")).strip().lower()
        if action.startswith("q"):
            return state, False
        if action.startswith("b"):
            return form_state.go_previous(state), True
        if action.startswith("e"):
            _, _, raw_step = action.partition(" ")
            if raw_step.strip().isdigit() and 1 <= int(raw_step) <= TOTAL_STEPS:
                return form_state.jump_to_step(state, int(raw_step)), True
            self.echo(f"Choose a step between 1 and {TOTAL_STEPS}")
            return state, True

        state = form_state.submit(state, self.submitter, self.store)
        if state.receipt is not None:
            self.echo(f"{state.receipt.message} (id: {state.receipt.id})")
        return state, True

    def _chips(self, state: FormState, path: str, label: str) -> FormState:
        while True:
            raw = str(self.prompt(f"Add {label} (blank to finish)", default="", show_default=False)).strip()
            if not raw:
                return state
            state = form_state.add_tag(state, path, raw, self.store)

    def _remove_entries(self, state: FormState, container: str, describe: Callable[[dict[str, Any]], str]) -> FormState:
        while state.draft.get(container):
            for index, item in enumerate(state.draft[container]):
                self.echo(f"  [{index}] {describe(item)}")
            raw = str(self.prompt("Remove entry number (blank to keep all)", default="", show_default=False)).strip()
            if not raw.isdigit() or int(raw) >= len(state.draft[container]):
                return state
            state = form_state.remove_item(state, container, int(raw), self.store)
            if state.message:
                self.echo(state.message)
        return state

    def _portfolio_links(self, state: FormState) -> FormState:
        requirement = portfolio_requirement(state.draft.get("category"))
        if requirement == "links":
            self.echo("A portfolio link is required for this specialization.")
        elif requirement == "links_or_file":
            self.echo("Add a portfolio link or a portfolio file URL.")
        for link in state.draft.get("portfolio_links") or []:
            self.echo(f"  - {link}")
        return self._chips(state, "portfolio_links", "portfolio link")

    def _languages(self, state: FormState) -> FormState:
        levels = get_args(LanguageProficiency)
        for index, language in enumerate(state.draft.get("languages") or []):
            label = f"Proficiency in {language.get('name') or 'language'} [{'/'.join(levels)}]"
            current = language.get("proficiency") or ""
            raw = str(self.prompt(label, default=current, show_default=bool(current))).strip()
            state = form_state.apply_field_change(state, ("languages", index, "proficiency"), raw or None, self.store)

        while self.confirm("Add another language?", default=False):
            index = len(state.draft.get("languages") or [])
            state = form_state.add_item(state, "languages", store=self.store)
            name = str(self.prompt("Language")).strip()
            level = str(self.prompt(f"Proficiency [{'/'.join(levels)}]")).strip()
            state = form_state.apply_field_change(state, ("languages", index, "name"), name, self.store)
            state = form_state.apply_field_change(state, ("languages", index, "proficiency"), level or None, self.store)

        return self._remove_entries(state, "languages", lambda item: f"{item.get('name')} ({item.get('proficiency')})")

    def _social_profiles(self, state: FormState) -> FormState:
        platforms = get_args(SocialPlatform)
        while self.confirm("Add another social profile?", default=False):
            index = len(state.draft.get("social_profiles") or [])
            state = form_state.add_item(state, "social_profiles", store=self.store)
            platform = str(self.prompt(f"Platform [{'/'.join(platforms)}]")).strip()
            url = str(self.prompt("Profile URL")).strip()
            state = form_state.apply_field_change(state, ("social_profiles", index, "platform"), platform, self.store)
            state = form_state.apply_field_change(state, ("social_profiles", index, "url"), url, self.store)
        return self._remove_entries(state, "social_profiles", lambda item: f"{item.get('platform')}: {item.get('url')}")

    def _availability(self, state: FormState) -> FormState:
        if state.draft.get("availability") == "full_time":
            state = self._ask(state, "available_in", "Days until you can start full time")
            state = form_state.apply_field_change(state, "hours_per_week", None, self.store)
        else:
            state = self._ask(state, "hours_per_week", "Hours per week")
            state = form_state.apply_field_change(state, "available_in", None, self.store)
        state = self._ask(state, "expected_salary", "Expected monthly rate (USD)")
        return self._ask(state, "available_from", "Available from (YYYY-MM-DD, optional)")

    def _skills(self, state: FormState) -> FormState:
        levels = get_args(SkillLevel)
        while self.confirm("Add a skill?", default=False):
            index = len(state.draft.get("skills") or [])
            state = form_state.add_item(state, "skills", store=self.store)
            base = ("skills", index)
            state = form_state.apply_field_change(state, (*base, "name"), str(self.prompt("Skill")).strip(), self.store)
            level = str(self.prompt(f"Level [{'/'.join(levels)}]")).strip()
            state = form_state.apply_field_change(state, (*base, "level"), level or None, self.store)
            years = str(self.prompt("Years of experience (optional)", default="", show_default=False))
            state = form_state.apply_field_change(state, (*base, "total_experience"), coerce("total_experience", years), self.store)
            started = str(self.prompt("First used in (year, optional)", default="", show_default=False))
            state = form_state.apply_field_change(state, (*base, "start_year"), coerce("start_year", started), self.store)
            self_taught = self.confirm("Self-taught?", default=False)
            state = form_state.apply_field_change(state, (*base, "self_taught"), self_taught, self.store)
            if not self_taught:
                institution = str(self.prompt("Institution (optional)", default="", show_default=False)).strip()
                state = form_state.apply_field_change(state, (*base, "institution"), institution, self.store)
            state = self._chips(state, f"skills.{index}.tags", "tag")
        return self._remove_entries(state, "skills", lambda item: f"{item.get('name')} ({item.get('level')})")

    def _category_list(self) -> list[dict[str, str]]:
        if self._category_choices is None:
            self._category_choices = self.categories() if self.categories else []
        return self._category_choices

    def _experience_categories(self, state: FormState, index: int) -> FormState:
        choices = self._category_list()
        if not choices:
            return state
        for number, category in enumerate(choices, start=1):
            self.echo(f"  {number}. {category['name']}")
        path = f"experiences.{index}.category_ids"
        while True:
            raw = str(self.prompt("Category number (blank to finish)", default="", show_default=False)).strip()
            if not raw:
                return state
            if not raw.isdigit() or not 1 <= int(raw) <= len(choices):
                self.echo(f"Choose a number between 1 and {len(choices)}")
                continue
            state = form_state.add_tag(state, path, choices[int(raw) - 1]["id"], self.store)

    def _experiences(self, state: FormState) -> FormState:
        while self.confirm("Add a work experience?", default=False):
            index = len(state.draft.get("experiences") or [])
            state = form_state.add_item(state, "experiences", store=self.store)
            base = ("experiences", index)
            for name, label in (("company", "Company"), ("position", "Position"), ("description", "Description")):
                raw = str(self.prompt(f"{label} (optional)", default="", show_default=False)).strip()
                state = form_state.apply_field_change(state, (*base, name), raw, self.store)
            start = str(self.prompt("Start year (optional)", default="", show_default=False))
            state = form_state.apply_field_change(state, (*base, "start_year"), coerce("start_year", start), self.store)
            is_current = self.confirm("Is this your current position?", default=False)
            state = form_state.apply_field_change(state, (*base, "is_current"), is_current, self.store)
            if not is_current:
                end = str(self.prompt("End year"))
                state = form_state.apply_field_change(state, (*base, "end_year"), coerce("end_year", end), self.store)
            state = self._chips(state, f"experiences.{index}.links", "link")
            state = self._chips(state, f"experiences.{index}.achievements", "achievement")
            state = self._experience_categories(state, index)
        return self._remove_entries(
            state,
            "experiences",
            lambda item: " at ".join(part for part in (item.get("position"), item.get("company")) if part) or "(empty)",
        )
