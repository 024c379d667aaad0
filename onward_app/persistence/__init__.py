from .database import engine, SessionLocal, get_db
from .models import Base, ProfileRecordModel, JournalEntryModel
from .repository import ProfileRepository, JournalEntryRepository


def init_db(bind=None):
    """
    Creates all tables. Call at application startup; safe to call again
    once the schema exists.
    """
    Base.metadata.create_all(bind=bind or engine)


__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "Base",
    "ProfileRecordModel",
    "JournalEntryModel",
    "ProfileRepository",
    "JournalEntryRepository",
    "init_db",
]
