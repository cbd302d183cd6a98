"""Database models for the trainer."""
from sqlalchemy import Column, String, Text

from engtutor.models.base import Base, TimestampMixin


class StorageEntry(Base, TimestampMixin):
    """One JSON document stored under a well-known key."""

    __tablename__ = "storage_entries"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
