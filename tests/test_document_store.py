from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from taskvault.storage import DocumentStore
from taskvault.storage.document_store import DuplicateKeyError, StoreError


@pytest.fixture
def store(tmp_path: Path) -> DocumentStore:
    return DocumentStore(tmp_path / "store")


def test_empty_collection(store):
    assert store.find("things", {}) == []
    assert store.count("things", {}) == 0
    assert store.find_one("things", {"id": "x"}) is None


def test_unique_field_enforced(store):
    store.insert_one("accounts", {"id": "1", "email": "a@x.com"}, unique="email")
    with pytest.raises(DuplicateKeyError):
        store.insert_one("accounts", {"id": "2", "email": "a@x.com"}, unique="email")
    assert store.count("accounts", {}) == 1


def test_find_one_excludes_fields(store):
    store.insert_one("accounts", {"id": "1", "email": "a@x.com", "password_hash": "h"})
    doc = store.find_one("accounts", {"id": "1"}, exclude=("password_hash",))
    assert doc == {"id": "1", "email": "a@x.com"}


def test_find_sorts_descending_with_newest_insert_first_on_ties(store):
    store.insert_one("todos", {"id": "a", "created_at": "2026-01-01T00:00:00"})
    store.insert_one("todos", {"id": "b", "created_at": "2026-01-02T00:00:00"})
    store.insert_one("todos", {"id": "c", "created_at": "2026-01-02T00:00:00"})
    docs = store.find("todos", {}, sort_key="created_at", descending=True)
    assert [d["id"] for d in docs] == ["c", "b", "a"]
    sliced = store.find("todos", {}, sort_key="created_at", descending=True, skip=1, limit=1)
    assert [d["id"] for d in sliced] == ["b"]


def test_find_one_and_update_only_touches_match(store):
    store.insert_one("todos", {"id": "1", "owner": "u1", "status": "pending"})
    store.insert_one("todos", {"id": "2", "owner": "u2", "status": "pending"})
    assert store.find_one_and_update("todos", {"id": "1", "owner": "u2"}, {"status": "x"}) is None
    updated = store.find_one_and_update("todos", {"id": "1", "owner": "u1"}, {"status": "completed"})
    assert updated["status"] == "completed"
    assert store.find_one("todos", {"id": "2"})["status"] == "pending"


def test_concurrent_deletes_succeed_once(store):
    store.insert_one("todos", {"id": "1", "owner": "u1"})

    def attempt(_):
        return store.find_one_and_delete("todos", {"id": "1", "owner": "u1"})

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(8)))

    assert sum(1 for r in results if r is not None) == 1
    assert store.count("todos", {}) == 0


def test_concurrent_inserts_are_all_kept(store):
    def insert(i):
        store.insert_one("todos", {"id": str(i), "owner": "u1"})

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(insert, range(40)))

    assert store.count("todos", {"owner": "u1"}) == 40


def test_corrupt_collection_raises(store, tmp_path: Path):
    (tmp_path / "store").mkdir(parents=True, exist_ok=True)
    (tmp_path / "store" / "todos.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        store.find("todos", {})
