# onward_app/persistence/repository.py

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import JournalEntryModel, ProfileRecordModel

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


# --- ProfileRepository ---
class ProfileRepository:
    """
    Repository for the single ProfileRecord row.

    Writes are staged with flush(); the caller decides when the unit of
    work is committed so that profile and journal changes land together.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self) -> Optional[ProfileRecordModel]:
        """Retrieves the profile row, or None before onboarding."""
        try:
            return self.db.query(ProfileRecordModel).order_by(ProfileRecordModel.id.asc()).first()
        except SQLAlchemyError as e:
            logger.error("Database error retrieving profile record: %s", e)
            raise

    def create(self, profile_data: dict) -> ProfileRecordModel:
        model = ProfileRecordModel(profile_data=profile_data)
        try:
            self.db.add(model)
            self.db.flush()
            logger.info("Staged new profile record id %s", model.id)
            return model
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error creating profile record: %s", e)
            raise

    def update(self, model: ProfileRecordModel, profile_data: dict) -> ProfileRecordModel:
        # Reassign (not mutate) so the JSON column is marked dirty
        model.profile_data = profile_data
        try:
            self.db.flush()
            return model
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error updating profile record id %s: %s", model.id, e)
            raise

    def delete_all(self) -> int:
        try:
            count = self.db.query(ProfileRecordModel).delete()
            self.db.flush()
            return count
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error deleting profile records: %s", e)
            raise

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error committing profile transaction: %s", e)
            raise


# --- JournalEntryRepository ---
class JournalEntryRepository:
    """Repository for JournalEntryModel rows; shares the caller's session."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, content: str, created_at: datetime, mood: Optional[str] = None) -> JournalEntryModel:
        entry = JournalEntryModel(
            id=str(uuid.uuid4()), created_at=created_at, content=content, mood=mood
        )
        try:
            self.db.add(entry)
            self.db.flush()
            logger.info("Staged journal entry %s", entry.id)
            return entry
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error creating journal entry: %s", e)
            raise

    def get(self, entry_id: str) -> Optional[JournalEntryModel]:
        try:
            return self.db.get(JournalEntryModel, entry_id)
        except SQLAlchemyError as e:
            logger.error("Database error retrieving journal entry %s: %s", entry_id, e)
            raise

    def delete(self, entry: JournalEntryModel) -> None:
        entry_id = entry.id
        try:
            self.db.delete(entry)
            self.db.flush()
            logger.info("Staged deletion of journal entry %s", entry_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error deleting journal entry %s: %s", entry_id, e)
            raise

    def list_recent(self, limit: Optional[int] = None) -> List[JournalEntryModel]:
        """Entries newest first; limit=None returns all of them."""
        try:
            query = self.db.query(JournalEntryModel).order_by(JournalEntryModel.created_at.desc())
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing journal entries: %s", e)
            raise

    def delete_all(self) -> int:
        try:
            count = self.db.query(JournalEntryModel).delete()
            self.db.flush()
            return count
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error deleting journal entries: %s", e)
            raise
