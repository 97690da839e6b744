"""
Tests for the SQLite task and user accessors.
"""
import json
import sqlite3

import pytest

from todoboard.errors import InvalidIdentifier, MissingField, NotFound, StoreUnavailable
from todoboard.schema import Task, is_valid_task_id, make_task_id
from todoboard.store import TaskStore, UserStore


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Identifiers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestTaskIds:

    def test_generated_ids_are_valid(self):
        assert is_valid_task_id(make_task_id())

    def test_uniqueness(self):
        ids = {make_task_id() for _ in range(100)}
        assert len(ids) == 100

    @pytest.mark.parametrize("value", [
        "", "abc", "KAN-001", "z" * 24, "A" * 24, "0" * 25, None, 42,
    ])
    def test_malformed_ids_rejected(self, value):
        assert not is_valid_task_id(value)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TaskStore
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_create_and_get(store):
    """Created task comes back with generated id and timestamp"""
    task = store.create("A", "d", "todo", "x@y.com")

    assert is_valid_task_id(task.id)
    assert task.created_at is not None

    fetched = store.get_one(task.id)
    assert fetched == task


def test_get_missing_returns_none(store):
    assert store.get_one(make_task_id()) is None


def test_get_malformed_id_raises(store):
    with pytest.raises(InvalidIdentifier):
        store.get_one("not-an-id")


@pytest.mark.parametrize("missing", ["title", "description", "category", "email"])
def test_create_requires_every_field(store, missing):
    """Each empty field is reported by name and nothing is written"""
    fields = {"title": "A", "description": "d", "category": "todo", "email": "x@y.com"}
    fields[missing] = ""

    with pytest.raises(MissingField) as exc:
        store.create(**fields)

    assert exc.value.field == missing
    assert store.list_all() == []


def test_create_reports_first_missing_field(store):
    with pytest.raises(MissingField) as exc:
        store.create("A", None, "   ", "")
    assert exc.value.field == "description"


def test_list_all_in_insertion_order(store):
    first = store.create("first", "d", "todo", "x@y.com")
    second = store.create("second", "d", "todo", "x@y.com")
    third = store.create("third", "d", "done", "x@y.com")

    assert [t.id for t in store.list_all()] == [first.id, second.id, third.id]


def test_update_category_touches_one_task(store):
    """Only the targeted task changes, and only its category"""
    a = store.create("A", "d", "todo", "a@y.com")
    b = store.create("B", "e", "todo", "b@y.com")

    store.update_category(a.id, "done")

    updated = store.get_one(a.id)
    assert updated.category == "done"
    assert (updated.title, updated.description, updated.email, updated.created_at) == \
        (a.title, a.description, a.email, a.created_at)
    assert store.get_one(b.id).category == "todo"


def test_update_category_not_found(store):
    with pytest.raises(NotFound):
        store.update_category(make_task_id(), "done")


def test_update_category_requires_category(store):
    task = store.create("A", "d", "todo", "x@y.com")
    with pytest.raises(MissingField) as exc:
        store.update_category(task.id, "")
    assert exc.value.field == "category"
    assert store.get_one(task.id).category == "todo"


def test_update_category_malformed_id(store):
    with pytest.raises(InvalidIdentifier):
        store.update_category("KAN-001", "done")


def test_delete(store):
    task = store.create("A", "d", "todo", "x@y.com")
    other = store.create("B", "d", "todo", "x@y.com")

    store.delete(task.id)

    assert store.get_one(task.id) is None
    assert [t.id for t in store.list_all()] == [other.id]


def test_delete_twice_not_found(store):
    task = store.create("A", "d", "todo", "x@y.com")
    store.delete(task.id)
    with pytest.raises(NotFound):
        store.delete(task.id)


def test_unreachable_store_raises_store_unavailable(store, tmp_path):
    store.db_path = str(tmp_path / "missing-dir" / "todos.db")

    with pytest.raises(StoreUnavailable) as exc:
        store.list_all()
    assert isinstance(exc.value.__cause__, sqlite3.Error)

    with pytest.raises(StoreUnavailable):
        store.create("A", "d", "todo", "x@y.com")


def test_uncreatable_directory_raises_store_unavailable(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(StoreUnavailable) as exc:
        TaskStore(str(blocker / "sub" / "todos.db"))
    assert isinstance(exc.value.__cause__, OSError)


def test_store_persists_across_instances(db_path):
    task = TaskStore(db_path).create("A", "d", "todo", "x@y.com")
    assert TaskStore(db_path).get_one(task.id) == task


def test_task_wire_shape(store):
    data = store.create("A", "d", "todo", "x@y.com").to_dict()
    assert set(data) == {"_id", "title", "description", "category", "email", "createdAt"}
    assert Task.from_dict(data).id == data["_id"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# UserStore
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_user_create_stores_document(store):
    users = UserStore(store)
    profile = {"name": "Ada", "email": "ada@example.com", "prefs": {"theme": "dark"}}

    result = users.create(profile)

    assert result["acknowledged"] is True
    with sqlite3.connect(store.db_path) as conn:
        row = conn.execute(
            "SELECT data FROM users WHERE id = ?", (result["insertedId"],)
        ).fetchone()
    assert json.loads(row[0]) == profile


def test_user_ids_unique(store):
    users = UserStore(store)
    ids = {users.create({})["insertedId"] for _ in range(20)}
    assert len(ids) == 20


def test_user_rejects_non_mapping(store):
    with pytest.raises(MissingField):
        UserStore(store).create(["not", "a", "profile"])
