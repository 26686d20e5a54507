import json
import logging

import pytest

from talentgate.core import form_state
from talentgate.core.drafts import MemoryDraftStore
from talentgate.core.errors import ConflictError, FieldError, ValidationFailed
from talentgate.core.form_state import (
    ENGLISH_LOCKED_MESSAGE,
    FIX_ERRORS_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
    FormState,
)
from talentgate.core.submission import SubmissionReceipt


class RecordingSubmitter:
    def __init__(self, outcome=None):
        self.outcome = outcome
        self.calls: list[dict] = []

    def __call__(self, draft):
        self.calls.append(dict(draft))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome or SubmissionReceipt(id="app-1", email=draft["email"], message="Application submitted successfully")


def _review_state(draft: dict) -> FormState:
    return FormState(current_step=10, draft=draft)


def test_hydrate_starts_with_english_on_step_one() -> None:
    state = form_state.hydrate(MemoryDraftStore())
    assert state.current_step == 1
    assert state.draft["languages"] == [{"name": "English", "proficiency": "intermediate"}]
    assert state.errors == {}


def test_hydrate_restores_saved_draft() -> None:
    store = MemoryDraftStore(initial=json.dumps({"first_name": "Grace", "languages": []}))
    state = form_state.hydrate(store)
    assert state.draft["first_name"] == "Grace"
    assert state.draft["email"] == ""
    assert state.draft["languages"][0]["name"] == "English"


def test_hydrate_discards_corrupt_draft() -> None:
    store = MemoryDraftStore(initial="{not json")
    state = form_state.hydrate(store)
    assert state.draft == form_state.new_draft()
    assert store.raw is None


def test_field_change_persists_and_clears_matching_errors() -> None:
    store = MemoryDraftStore()
    state = FormState(errors={"first_name": ["First name is required"], "email": ["Email address is required"]})
    updated = form_state.apply_field_change(state, "first_name", "Grace", store)

    assert updated.draft["first_name"] == "Grace"
    assert updated.errors == {"email": ["Email address is required"]}
    assert "first_name" in updated.dirty
    assert json.loads(store.raw)["first_name"] == "Grace"
    assert state.draft["first_name"] == ""


def test_nested_change_clears_descendant_errors() -> None:
    state = FormState(errors={"languages.0.proficiency": ["Please select your English proficiency level"]})
    updated = form_state.apply_field_change(state, ("languages", 0), {"name": "English", "proficiency": "native"})
    assert updated.errors == {}


def test_english_name_cannot_be_edited() -> None:
    state = FormState()
    assert form_state.apply_field_change(state, "languages.0.name", "Spanish") is state


def test_english_cannot_be_removed_but_others_can() -> None:
    state = form_state.add_item(FormState(), "languages", {"name": "French", "proficiency": "native"})

    blocked = form_state.remove_item(state, "languages", 0)
    assert blocked.message == ENGLISH_LOCKED_MESSAGE
    assert len(blocked.draft["languages"]) == 2

    removed = form_state.remove_item(state, "languages", 1)
    assert [item["name"] for item in removed.draft["languages"]] == ["English"]

    with pytest.raises(IndexError):
        form_state.remove_item(state, "languages", 5)


def test_english_survives_whole_entry_and_list_replacement() -> None:
    state = form_state.hydrate(None)

    entry = form_state.apply_field_change(state, ("languages", 0), {"name": "French", "proficiency": "native"})
    assert entry.message == ENGLISH_LOCKED_MESSAGE
    assert entry.draft["languages"] == [{"name": "English", "proficiency": "intermediate"}]

    whole = form_state.apply_field_change(state, "languages", [{"name": "German", "proficiency": "basic"}])
    assert whole.draft["languages"] == state.draft["languages"]

    kept = form_state.apply_field_change(state, ("languages", 0), {"name": "english", "proficiency": "native"})
    assert kept.draft["languages"] == [{"name": "english", "proficiency": "native"}]


def test_add_item_uses_template_copies() -> None:
    state = form_state.add_item(FormState(), "skills")
    state = form_state.add_item(state, "skills")
    state.draft["skills"][0]["tags"].append("python")
    assert state.draft["skills"][1]["tags"] == []

    with pytest.raises(ValueError):
        form_state.add_item(FormState(), "hobbies")


def test_skill_tags_are_lowercased_and_unique() -> None:
    state = form_state.add_item(FormState(), "skills")
    for tag in ("Django", " django ", "REST"):
        state = form_state.add_tag(state, "skills.0.tags", tag)
    assert state.draft["skills"][0]["tags"] == ["django", "rest"]

    state = form_state.remove_tag(state, "skills.0.tags", "DJANGO")
    assert state.draft["skills"][0]["tags"] == ["rest"]


def test_links_are_unique_but_achievements_may_repeat() -> None:
    state = form_state.add_item(FormState(), "experiences")
    for _ in range(2):
        state = form_state.add_tag(state, "experiences.0.links", "https://acme.dev")
        state = form_state.add_tag(state, "experiences.0.achievements", "Employee of the month")
    state = form_state.add_tag(state, "experiences.0.links", "   ")

    experience = state.draft["experiences"][0]
    assert experience["links"] == ["https://acme.dev"]
    assert experience["achievements"] == ["Employee of the month", "Employee of the month"]


def test_go_next_blocks_on_errors(make_draft) -> None:
    state = FormState(draft=make_draft(first_name=""))
    after = form_state.go_next(state)
    assert after.current_step == 1
    assert after.errors == {"first_name": ["First name is required"]}
    assert after.message == FIX_ERRORS_MESSAGE
    assert not after.scroll_to_top


def test_go_next_advances_and_scrolls(make_draft) -> None:
    after = form_state.go_next(FormState(draft=make_draft()))
    assert after.current_step == 2
    assert after.scroll_to_top
    assert after.errors == {}


def test_go_previous_and_jump_keep_bounds(make_draft) -> None:
    state = FormState(draft=make_draft())
    assert form_state.go_previous(state).current_step == 1
    assert form_state.go_previous(form_state.jump_to_step(state, 7)).current_step == 6
    with pytest.raises(ValueError):
        form_state.jump_to_step(state, 0)


def test_arriving_on_languages_step_reseeds_english(make_draft) -> None:
    state = FormState(current_step=3, draft=make_draft(languages=[]))
    arrived = form_state.go_next(state)
    assert arrived.current_step == 4
    assert arrived.draft["languages"] == [{"name": "English", "proficiency": "intermediate"}]


def test_submit_only_from_review_step(make_draft) -> None:
    submitter = RecordingSubmitter()
    state = form_state.submit(FormState(current_step=9, draft=make_draft()), submitter)
    assert submitter.calls == []
    assert not state.is_complete


def test_submit_invalid_draft_jumps_to_first_failing_step(make_draft) -> None:
    submitter = RecordingSubmitter()
    state = form_state.submit(_review_state(make_draft(linkedin_url="", skills=[{"name": ""}])), submitter)
    assert submitter.calls == []
    assert state.current_step == 5
    assert "linkedin_url" in state.errors
    assert not state.is_submitting


def test_successful_submit_clears_draft(make_draft) -> None:
    store = MemoryDraftStore()
    store.save(make_draft())
    submitter = RecordingSubmitter()

    state = form_state.submit(_review_state(make_draft()), submitter, store)

    assert state.is_complete
    assert state.receipt.id == "app-1"
    assert state.message == "Application submitted successfully"
    assert store.raw is None
    assert len(submitter.calls) == 1


def test_submit_is_single_flight(make_draft) -> None:
    submitter = RecordingSubmitter()
    busy = FormState(current_step=10, draft=make_draft(), is_submitting=True)
    assert form_state.submit(busy, submitter) is busy
    assert submitter.calls == []


def test_duplicate_email_returns_to_identity_step(make_draft) -> None:
    store = MemoryDraftStore()
    submitter = RecordingSubmitter(ConflictError("An application with this email already exists"))
    state = form_state.submit(_review_state(make_draft()), submitter, store)

    assert state.current_step == 1
    assert state.errors["email"] == ["An application with this email already exists"]
    assert not state.is_submitting
    assert not state.is_complete


def test_server_validation_errors_route_to_their_step(make_draft) -> None:
    failure = ValidationFailed([FieldError(("experiences", 0, "category_ids"), "Unknown category")])
    state = form_state.submit(_review_state(make_draft()), RecordingSubmitter(failure))
    assert state.current_step == 8
    assert state.errors == {"experiences.0.category_ids": ["Unknown category"]}


def test_unexpected_failure_keeps_draft_for_retry(make_draft) -> None:
    store = MemoryDraftStore()
    store.save(make_draft())
    state = form_state.submit(_review_state(make_draft()), RecordingSubmitter(RuntimeError("boom")), store)

    assert state.current_step == 10
    assert state.message == SUBMIT_FAILED_MESSAGE
    assert not state.is_submitting
    assert store.raw is not None


def test_unexpected_failure_is_logged_with_traceback(make_draft, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="talentgate.core.form_state"):
        form_state.submit(_review_state(make_draft()), RecordingSubmitter(RuntimeError("boom")))

    record = caplog.records[-1]
    assert record.exc_info is not None
    assert record.exc_info[0] is RuntimeError


def test_storage_quota_does_not_block_editing() -> None:
    store = MemoryDraftStore(max_bytes=10)
    state = form_state.apply_field_change(FormState(), "first_name", "Grace", store)
    assert state.draft["first_name"] == "Grace"
    assert store.raw is None
