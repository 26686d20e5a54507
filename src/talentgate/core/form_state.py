"""Wizard state for the ten-step application form.

Every operation takes a ``FormState`` and returns a new one; the draft is
persisted through a ``DraftStore`` after each change.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from talentgate.core.drafts import DraftStore
from talentgate.core.errors import (
    ConflictError,
    FieldError,
    FieldPath,
    ValidationFailed,
    format_field_path,
    parse_field_path,
)
from talentgate.core.form_schema import (
    ENGLISH,
    TOTAL_STEPS,
    first_error_step,
    normalize_tag,
    validate_step,
    validate_submission,
)
from talentgate.core.submission import SubmissionReceipt

logger = logging.getLogger(__name__)

LANGUAGES_STEP = 4
FIX_ERRORS_MESSAGE = "Please fix the errors before continuing"
SUBMIT_INVALID_MESSAGE = "Some answers need attention before you can submit"
SUBMIT_FAILED_MESSAGE = "We could not submit your application. Please try again."
ENGLISH_LOCKED_MESSAGE = "English is required and cannot be removed"

ITEM_TEMPLATES: dict[str, Any] = {
    "languages": {"name": "", "proficiency": None},
    "social_profiles": {"platform": None, "url": ""},
    "skills": {
        "name": "",
        "tags": [],
        "level": None,
        "total_experience": None,
        "start_year": None,
        "institution": "",
        "self_taught": False,
    },
    "experiences": {
        "company": "",
        "position": "",
        "description": "",
        "start_year": None,
        "end_year": None,
        "is_current": False,
        "links": [],
        "achievements": [],
        "category_ids": [],
    },
}


class Submitter(Protocol):
    def __call__(self, draft: Mapping[str, Any]) -> SubmissionReceipt: ...


def english_entry() -> dict[str, Any]:
    return {"name": "English", "proficiency": "intermediate"}


def new_draft() -> dict[str, Any]:
    return {
        "first_name": "",
        "last_name": "",
        "email": "",
        "phone_number": "",
        "highest_formal_education_level": None,
        "current_job_status": None,
        "category": "",
        "portfolio_links": [],
        "portfolio_file_url": "",
        "country_of_residence": "",
        "time_zone": "",
        "country_of_origin": "",
        "city": "",
        "birth_year": None,
        "languages": [english_entry()],
        "linkedin_url": "",
        "social_profiles": [],
        "availability": None,
        "available_in": None,
        "hours_per_week": None,
        "available_from": None,
        "expected_salary": None,
        "skills": [],
        "experiences": [],
        "resume_url": "",
        "video_url": "",
        "notes": "",
    }


@dataclass(slots=True)
class FormState:
    current_step: int = 1
    draft: dict[str, Any] = field(default_factory=new_draft)
    errors: dict[str, list[str]] = field(default_factory=dict)
    dirty: set[str] = field(default_factory=set)
    is_submitting: bool = False
    message: str | None = None
    scroll_to_top: bool = False
    receipt: SubmissionReceipt | None = None

    @property
    def is_last_step(self) -> bool:
        return self.current_step == TOTAL_STEPS

    @property
    def is_complete(self) -> bool:
        return self.receipt is not None


def _is_english(entry: Any) -> bool:
    return isinstance(entry, Mapping) and str(entry.get("name") or "").strip().casefold() == ENGLISH


def _drops_english(before: Mapping[str, Any], after: Mapping[str, Any]) -> bool:
    had_english = any(_is_english(entry) for entry in before.get("languages") or [])
    return had_english and not any(_is_english(entry) for entry in after.get("languages") or [])


def _seed_english(draft: dict[str, Any]) -> dict[str, Any]:
    if not draft.get("languages"):
        draft["languages"] = [english_entry()]
    return draft


def _as_path(path: str | FieldPath) -> FieldPath:
    return parse_field_path(path) if isinstance(path, str) else tuple(path)


def _get_path(draft: Any, path: FieldPath) -> Any:
    node = draft
    for segment in path:
        node = node[segment]
    return node


def _set_path(draft: dict[str, Any], path: FieldPath, value: Any) -> None:
    if not path:
        raise ValueError("field path must not be empty")
    parent = _get_path(draft, path[:-1])
    parent[path[-1]] = value


def _errors_without(errors: dict[str, list[str]], key: str) -> dict[str, list[str]]:
    prefix = f"{key}."
    return {name: messages for name, messages in errors.items() if name != key and not name.startswith(prefix)}


def _group_errors(errors: list[FieldError]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for error in errors:
        grouped.setdefault(error.key, []).append(error.message)
    return grouped


def _persist(state: FormState, store: DraftStore | None) -> FormState:
    if store is not None:
        store.save(state.draft)
    return state


def hydrate(store: DraftStore | None) -> FormState:
    draft = new_draft()
    saved = store.load() if store is not None else None
    if saved:
        draft.update(saved)
    return FormState(draft=_seed_english(draft))


def apply_field_change(
    state: FormState,
    path: str | FieldPath,
    value: Any,
    store: DraftStore | None = None,
) -> FormState:
    field_path = _as_path(path)
    if len(field_path) == 3 and field_path[0] == "languages" and field_path[2] == "name":
        if _is_english(_get_path(state.draft, field_path[:2])):
            return state

    draft = copy.deepcopy(state.draft)
    _set_path(draft, field_path, value)
    if field_path[0] == "languages" and len(field_path) <= 2 and _drops_english(state.draft, draft):
        return replace(state, message=ENGLISH_LOCKED_MESSAGE)
    key = format_field_path(field_path)
    updated = replace(
        state,
        draft=draft,
        errors=_errors_without(state.errors, key),
        dirty=state.dirty | {key},
        scroll_to_top=False,
    )
    return _persist(updated, store)


def add_item(
    state: FormState,
    container: str,
    item: Any = None,
    store: DraftStore | None = None,
) -> FormState:
    if item is None:
        if container not in ITEM_TEMPLATES:
            raise ValueError(f"unknown list field: {container}")
        item = ITEM_TEMPLATES[container]

    draft = copy.deepcopy(state.draft)
    draft.setdefault(container, [])
    draft[container].append(copy.deepcopy(item))
    updated = replace(state, draft=draft, errors=_errors_without(state.errors, container))
    return _persist(updated, store)


def remove_item(state: FormState, container: str, index: int, store: DraftStore | None = None) -> FormState:
    items = state.draft.get(container) or []
    if not 0 <= index < len(items):
        raise IndexError(f"{container} has no item at {index}")
    if container == "languages" and _is_english(items[index]):
        return replace(state, message=ENGLISH_LOCKED_MESSAGE)

    draft = copy.deepcopy(state.draft)
    del draft[container][index]
    updated = replace(state, draft=draft, errors=_errors_without(state.errors, container), message=None)
    return _persist(updated, store)


def add_tag(state: FormState, path: str | FieldPath, tag: str, store: DraftStore | None = None) -> FormState:
    """Append a chip to a list field. Skill tags are lower-cased; links are de-duplicated."""
    field_path = _as_path(path)
    leaf = field_path[-1]
    value = normalize_tag(tag) if leaf == "tags" else tag.strip()
    current = list(_get_path(state.draft, field_path) or [])
    if not value:
        return state
    if leaf != "achievements" and value in current:
        return state
    return apply_field_change(state, field_path, [*current, value], store)


def remove_tag(state: FormState, path: str | FieldPath, tag: str, store: DraftStore | None = None) -> FormState:
    field_path = _as_path(path)
    match = normalize_tag(tag) if field_path[-1] == "tags" else tag
    current = list(_get_path(state.draft, field_path) or [])
    remaining = [item for item in current if (normalize_tag(item) if field_path[-1] == "tags" else item) != match]
    if remaining == current:
        return state
    return apply_field_change(state, field_path, remaining, store)


def validate_current_step(state: FormState) -> FormState:
    result = validate_step(state.draft, state.current_step)
    return replace(state, errors=_group_errors(result.errors))


def _arrive(state: FormState, step: int) -> FormState:
    draft = state.draft
    if step == LANGUAGES_STEP and not draft.get("languages"):
        draft = _seed_english(copy.deepcopy(draft))
    return replace(state, current_step=step, draft=draft, scroll_to_top=True)


def go_next(state: FormState) -> FormState:
    if state.is_last_step:
        return state
    checked = validate_current_step(state)
    if checked.errors:
        return replace(checked, message=FIX_ERRORS_MESSAGE, scroll_to_top=False)
    return _arrive(replace(checked, message=None), state.current_step + 1)


def go_previous(state: FormState) -> FormState:
    return _arrive(replace(state, message=None), max(1, state.current_step - 1))


def jump_to_step(state: FormState, step: int) -> FormState:
    if not 1 <= step <= TOTAL_STEPS:
        raise ValueError(f"step must be between 1 and {TOTAL_STEPS}, got {step}")
    return _arrive(replace(state, message=None), step)


def begin_submission(state: FormState) -> tuple[FormState, bool]:
    """Return the next state and whether the caller may send the draft."""
    if state.is_submitting or state.receipt is not None:
        return state, False
    if not state.is_last_step:
        return replace(state, message="Review your answers before submitting"), False

    result = validate_submission(state.draft)
    if not result.is_valid:
        step = result.first_step or state.current_step
        failed = replace(state, errors=_group_errors(result.errors), message=SUBMIT_INVALID_MESSAGE)
        return _arrive(failed, step), False
    return replace(state, errors={}, is_submitting=True, message=None), True


def finish_submission(
    state: FormState,
    outcome: SubmissionReceipt | BaseException,
    store: DraftStore | None = None,
) -> FormState:
    done = replace(state, is_submitting=False)
    if isinstance(outcome, SubmissionReceipt):
        if store is not None:
            store.clear()
        return replace(done, receipt=outcome, message=outcome.message, errors={})

    if isinstance(outcome, ConflictError):
        errors = {**done.errors, "email": [str(outcome)]}
        return _arrive(replace(done, errors=errors, message=str(outcome)), 1)

    if isinstance(outcome, ValidationFailed):
        step = first_error_step(error.path for error in outcome.errors) or done.current_step
        return _arrive(replace(done, errors=_group_errors(outcome.errors), message=outcome.message), step)

    logger.error("Application submission failed: %s", outcome, exc_info=outcome)
    return replace(done, message=SUBMIT_FAILED_MESSAGE)


def submit(state: FormState, submitter: Submitter, store: DraftStore | None = None) -> FormState:
    pending, ready = begin_submission(state)
    if not ready:
        return pending
    try:
        receipt = submitter(pending.draft)
    except Exception as exc:
        return finish_submission(pending, exc, store)
    return finish_submission(pending, receipt, store)
