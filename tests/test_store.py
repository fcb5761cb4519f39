"""Tests for the SQLAlchemy-backed user store."""

import uuid

import pytest
from sqlalchemy import Text
from sqlalchemy.exc import OperationalError

from user_records.models.user import User
from user_records.services.errors import DuplicateKeyError, StoreError
from user_records.store import UserFilter, UserStore


def _fields(**overrides):
    fields = {"name": "Store User", "age": 20, "email": "store@example.com", "address": ""}
    fields.update(overrides)
    return fields


def test_create_assigns_id_and_timestamps(store):
    """Test that the store assigns an id and timestamps."""
    user = store.create(_fields())
    assert isinstance(user.id, uuid.UUID)
    assert user.created_at is not None
    assert user.updated_at is not None


def test_duplicate_email_raises_duplicate_key(store):
    """Test that the unique constraint surfaces as DuplicateKeyError."""
    store.create(_fields())

    with pytest.raises(DuplicateKeyError) as exc_info:
        store.create(_fields(name="Second"))
    assert exc_info.value.field == "email"
    assert exc_info.value.message == "Database operation failed"
    assert store.count(UserFilter()) == 1


def test_duplicate_email_on_update_raises_duplicate_key(store):
    """Test that updating into a taken email raises DuplicateKeyError."""
    store.create(_fields(email="a@example.com"))
    other = store.create(_fields(email="b@example.com"))

    with pytest.raises(DuplicateKeyError):
        store.update_by_id(other.id, {"email": "a@example.com"})

    reloaded = store.find_one(UserFilter(id=other.id))
    assert reloaded.email == "b@example.com"


def test_find_page_and_count(store):
    """Test skip/limit and counting with a search filter."""
    for i in range(5):
        store.create(_fields(name=f"Person {i}", email=f"p{i}@example.com"))
    store.create(_fields(name="Someone Else", email="else@example.com"))

    people = UserFilter(search="PERSON")
    page = store.find_page(people, skip=2, limit=2)

    assert [u.name for u in page] == ["Person 2", "Person 3"]
    assert store.count(people) == 5
    assert store.count(UserFilter()) == 6


def test_find_one_excluding_id(store):
    """Test the email lookup used for uniqueness on update."""
    user = store.create(_fields())

    assert store.find_one(UserFilter(email="store@example.com")).id == user.id
    assert store.find_one(UserFilter(email="store@example.com", exclude_id=user.id)) is None


def test_update_and_delete_unknown_id(store):
    """Test that unknown ids return None instead of raising."""
    missing = uuid.uuid4()
    assert store.update_by_id(missing, {"name": "Nobody"}) is None
    assert store.delete_by_id(missing) is None


def test_update_applies_only_given_fields(store):
    """Test that update_by_id leaves other columns alone."""
    user = store.create(_fields(address="before"))

    updated = store.update_by_id(user.id, {"address": "after"})

    assert updated.address == "after"
    assert updated.name == user.name
    assert updated.email == user.email


def test_delete_returns_deleted_record(store):
    """Test that delete_by_id returns the removed user."""
    user = store.create(_fields())

    deleted = store.delete_by_id(user.id)

    assert deleted.id == user.id
    assert store.find_one(UserFilter(id=user.id)) is None


def test_database_failure_becomes_store_error(store, monkeypatch):
    """Test that driver errors are wrapped without leaking details."""

    def broken_count(self):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr("sqlalchemy.orm.Query.count", broken_count)

    with pytest.raises(StoreError) as exc_info:
        store.count(UserFilter())
    assert "connection lost" not in exc_info.value.message


def test_store_failure_is_internal_error(client, store, monkeypatch):
    """Test that a store failure renders as a 500 in the error shape."""

    def broken(*args, **kwargs):
        raise StoreError("Database operation failed")

    monkeypatch.setattr(store, "count", broken)

    response = client.get("/api/users")
    assert response.status_code == 500
    assert response.json() == {"error": "Database operation failed"}


def test_stores_are_independent_handles(store):
    """Test that a second handle over the same sessions sees the same data."""
    store.create(_fields())
    other = UserStore(store.session_factory)
    assert other.count(UserFilter()) == 1


def test_text_columns_have_no_length_limit():
    """Test that name and email are unbounded text like address."""
    for column in ("name", "email", "address"):
        assert isinstance(User.__table__.c[column].type, Text)


def test_search_lower_is_unicode_aware(db):
    """Test that lower() on the test database folds non-ASCII letters."""
    from sqlalchemy import func, select

    assert db.execute(select(func.lower("ĐẶNG Văn"))).scalar() == "đặng văn"
