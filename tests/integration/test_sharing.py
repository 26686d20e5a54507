import pytest

from talentgate.core.errors import NotFoundError, TokenMintingError
from talentgate.core.sharing import get_public_application, set_public
from talentgate.core.submission import SubmissionService


@pytest.fixture
def application_id(db, make_draft) -> str:
    return SubmissionService(db).submit(make_draft()).id


def test_share_toggle_cycle_mints_fresh_tokens(db, application_id) -> None:
    shared = set_public(db, application_id, True)
    assert shared.is_public
    assert len(shared.public_token) == 64
    assert shared.shareable_url == f"https://apply.example.org/application/{shared.public_token}"
    assert get_public_application(db, shared.public_token).id == application_id

    hidden = set_public(db, application_id, False)
    assert not hidden.is_public
    assert hidden.public_token is None
    assert hidden.shareable_url is None
    with pytest.raises(NotFoundError):
        get_public_application(db, shared.public_token)

    reshared = set_public(db, application_id, True)
    assert reshared.public_token != shared.public_token
    with pytest.raises(NotFoundError):
        get_public_application(db, shared.public_token)
    assert get_public_application(db, reshared.public_token).id == application_id


def test_colliding_tokens_are_retried(db, make_draft, application_id) -> None:
    set_public(db, application_id, True, token_factory=lambda: "taken")
    other = SubmissionService(db).submit(make_draft(email="grace@navy.mil")).id

    tokens = iter(["taken", "taken", "fresh"])
    state = set_public(db, other, True, token_factory=lambda: next(tokens))
    assert state.public_token == "fresh"


def test_token_minting_gives_up_after_bounded_attempts(db, make_draft, application_id) -> None:
    set_public(db, application_id, True, token_factory=lambda: "taken")
    other = SubmissionService(db).submit(make_draft(email="grace@navy.mil")).id

    calls: list[int] = []

    def constant() -> str:
        calls.append(1)
        return "taken"

    with pytest.raises(TokenMintingError):
        set_public(db, other, True, token_factory=constant)
    assert len(calls) == 5
    with pytest.raises(NotFoundError):
        get_public_application(db, "")


def test_unknown_application_cannot_be_shared(db) -> None:
    with pytest.raises(NotFoundError, match="Application not found"):
        set_public(db, "missing", True)
