"""Key/value storage backends for the persisted documents."""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.orm import Session

from engtutor.models.models import StorageEntry

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String key to string value storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key. May raise on write failure."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key if present."""


class MemoryKeyValueStore(KeyValueStore):
    """In-memory store, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the storage_entries table."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get_item(self, key: str) -> Optional[str]:
        entry = self.db.query(StorageEntry).filter(StorageEntry.key == key).first()
        return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        entry = self.db.query(StorageEntry).filter(StorageEntry.key == key).first()
        if entry:
            entry.value = value
        else:
            self.db.add(StorageEntry(key=key, value=value))
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug(f"Stored {len(value)} characters under key {key}")

    def remove_item(self, key: str) -> None:
        self.db.query(StorageEntry).filter(StorageEntry.key == key).delete()
        self.db.commit()
