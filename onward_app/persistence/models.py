# onward_app/persistence/models.py

import logging
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

# Base class for SQLAlchemy models
Base = declarative_base()


class ProfileRecordModel(Base):
    """Single‑row table holding the serialized ProfileRecord."""

    __tablename__ = "profile_records"
    id = Column(Integer, primary_key=True, index=True)
    profile_data = Column(JSON, nullable=False)  # ProfileRecord.to_dict()
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<ProfileRecordModel(id={self.id}, updated_at={self.updated_at})>"


class JournalEntryModel(Base):
    """SQLAlchemy model for a single journal entry."""

    __tablename__ = "journal_entries"

    id = Column(String, primary_key=True, index=True)  # uuid4 string
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    content = Column(Text, nullable=False)
    mood = Column(String, nullable=True)  # e.g. "Peaceful"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "content": self.content,
            "mood": self.mood,
        }

    def __repr__(self):
        return f"<JournalEntryModel(id={self.id}, created_at={self.created_at})>"
