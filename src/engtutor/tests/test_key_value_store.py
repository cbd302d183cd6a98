"""Tests for the key/value storage backends."""
from typing import Generator

import pytest
from faker import Faker
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from engtutor.models.base import init_db
from engtutor.models.models import StorageEntry
from engtutor.services.key_value_store import KeyValueStore, MemoryKeyValueStore, SqlKeyValueStore

fake = Faker()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database session for each test."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    db = sessionmaker(bind=engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def kv_store(request, db: Session) -> KeyValueStore:
    if request.param == "memory":
        return MemoryKeyValueStore()
    return SqlKeyValueStore(db)


def test_get_missing_key(kv_store: KeyValueStore) -> None:
    assert kv_store.get_item("missing") is None


def test_set_and_overwrite(kv_store: KeyValueStore) -> None:
    """Test storing and replacing a value."""
    first = fake.sentence()
    kv_store.set_item("doc", first)
    assert kv_store.get_item("doc") == first

    kv_store.set_item("doc", '{"한국어": true}')
    assert kv_store.get_item("doc") == '{"한국어": true}'


def test_remove_item(kv_store: KeyValueStore) -> None:
    kv_store.set_item("doc", "value")
    kv_store.set_item("other", "value")

    kv_store.remove_item("doc")
    kv_store.remove_item("doc")

    assert kv_store.get_item("doc") is None
    assert kv_store.get_item("other") == "value"


def test_sql_store_keeps_one_row_per_key(db: Session) -> None:
    """Test that overwriting updates the existing row."""
    store = SqlKeyValueStore(db)
    store.set_item("doc", "one")
    store.set_item("doc", "two")

    rows = db.query(StorageEntry).all()
    assert len(rows) == 1
    assert rows[0].value == "two"
    assert rows[0].created_at is not None
    assert rows[0].updated_at is not None


def test_sql_store_rolls_back_failed_write(db: Session, mocker) -> None:
    """Test that a failed commit is rolled back and re-raised."""
    store = SqlKeyValueStore(db)
    store.set_item("doc", "one")
    mocker.patch.object(db, "commit", side_effect=RuntimeError("disk full"))
    rollback = mocker.spy(db, "rollback")

    with pytest.raises(RuntimeError):
        store.set_item("doc", "two")
    rollback.assert_called_once()
