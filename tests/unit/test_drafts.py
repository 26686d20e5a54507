import json

from talentgate.core.drafts import FileDraftStore, MemoryDraftStore


def test_file_store_round_trips_draft(tmp_path) -> None:
    store = FileDraftStore(tmp_path, key="applicant/one")
    assert store.load() is None

    store.save({"first_name": "Ada", "languages": [{"name": "English"}]})
    assert store.path == tmp_path / "applicant-one.json"
    assert store.load() == {"first_name": "Ada", "languages": [{"name": "English"}]}
    assert not store.path.with_suffix(".tmp").exists()


def test_file_store_discards_corrupt_json(tmp_path) -> None:
    store = FileDraftStore(tmp_path, key="draft")
    store.path.write_text("{oops", encoding="utf-8")
    assert store.load() is None
    assert not store.path.exists()


def test_file_store_discards_non_object_json(tmp_path) -> None:
    store = FileDraftStore(tmp_path, key="draft")
    store.path.write_text(json.dumps(["not", "a", "draft"]), encoding="utf-8")
    assert store.load() is None
    assert not store.path.exists()


def test_file_store_quota_leaves_previous_draft(tmp_path) -> None:
    store = FileDraftStore(tmp_path, key="draft", max_bytes=64)
    store.save({"first_name": "Ada"})
    store.save({"notes": "x" * 500})
    assert store.load() == {"first_name": "Ada"}


def test_clear_is_idempotent(tmp_path) -> None:
    store = FileDraftStore(tmp_path, key="draft")
    store.clear()
    store.save({"first_name": "Ada"})
    store.clear()
    store.clear()
    assert store.load() is None


def test_memory_store_keeps_last_good_value_over_quota() -> None:
    store = MemoryDraftStore(max_bytes=32)
    store.save({"a": 1})
    store.save({"a": "y" * 100})
    assert store.load() == {"a": 1}
