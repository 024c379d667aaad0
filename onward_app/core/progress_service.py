# onward_app/core/progress_service.py
# =============================================================================
#  ProgressService  –  sole writer of the ProfileRecord
#  * Every public call is one serialized transaction:
#      load → mutate → recompute scores → unlock → persist → return
#  * A failed persist rolls the session back; the stored record stays as it was
#  * Before onboarding every call reports absence (None / []) instead of
#    inventing a record
# =============================================================================

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from onward_app.config.constants import JOURNAL_DEFAULT_LIST_LIMIT, PRECISION_LEVELS
from onward_app.core.errors import (
    EntryNotFoundError,
    InvalidInputError,
    PersistenceError,
    ProfileExistsError,
    ProfileNotFoundError,
)
from onward_app.core.profile import ProfileRecord
from onward_app.core.utils import to_naive_local
from onward_app.modules import metrics
from onward_app.modules.achievements import Achievement, AchievementEngine, engagement_flags
from onward_app.modules.milestones import Milestone, MilestoneEngine
from onward_app.persistence.models import ProfileRecordModel
from onward_app.persistence.repository import JournalEntryRepository, ProfileRepository

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class _Transaction:
    """One unit of work: a session, its repositories and the loaded row."""

    def __init__(self, db: Session, clock: Callable[[], datetime]):
        self.db = db
        self._clock = clock
        self.profiles = ProfileRepository(db)
        self.journal = JournalEntryRepository(db)
        self._model: Optional[ProfileRecordModel] = None

    def load(self) -> Optional[ProfileRecord]:
        self._model = self.profiles.get()
        if self._model is None:
            return None
        return ProfileRecord.from_dict(self._model.profile_data, fallback_start=self._clock())

    def persist(self, profile: ProfileRecord) -> None:
        data = profile.to_dict()
        if self._model is None:
            self._model = self.profiles.create(data)
        else:
            self.profiles.update(self._model, data)
        self.profiles.commit()


class ProgressService:
    """
    Owns the single ProfileRecord. Construct one per application with a
    session factory and a clock, and hand it to whoever needs it.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Callable[[], datetime]] = None,
        milestone_engine: Optional[MilestoneEngine] = None,
        achievement_engine: Optional[AchievementEngine] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or datetime.now
        self._lock = threading.RLock()
        self.milestone_engine = milestone_engine or MilestoneEngine()
        self.achievement_engine = achievement_engine or AchievementEngine()

    # ------------------------------------------------------------------ #
    #  Transaction plumbing
    # ------------------------------------------------------------------ #
    def now(self) -> datetime:
        return self._clock()

    @contextmanager
    def _transaction(self) -> Iterator[_Transaction]:
        # Serialize all callers: scores read counters written earlier in
        # the same transaction.
        with self._lock:
            db = self._session_factory()
            try:
                yield _Transaction(db, self._clock)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Progress transaction rolled back: %s", e)
                raise PersistenceError(f"Failed to persist profile: {e}") from e
            finally:
                db.close()

    @staticmethod
    def _missing(operation: str) -> None:
        logger.warning("%s called before a profile exists; nothing to do.", operation)
        return None

    def _unlock_journal_achievements(self, profile: ProfileRecord, now: datetime) -> List[Achievement]:
        unlocked = self.achievement_engine.check_journal_achievements(profile)
        if unlocked:
            # Self‑care counts unlocked achievements
            metrics.recompute_self_care(profile, now)
        return unlocked

    # ------------------------------------------------------------------ #
    #  Onboarding & reads
    # ------------------------------------------------------------------ #
    def create_profile(
        self,
        no_contact_start_date: datetime,
        name: str = "",
        why_statement: str = "",
        precision_level: str = "day",
        relationship_type: str = "",
        relationship_duration: str = "",
        reason_for_no_contact: str = "",
        previous_no_contact_attempts: int = 0,
    ) -> ProfileRecord:
        """Creates the one profile record at the end of onboarding."""
        now = self.now()
        anchor = to_naive_local(no_contact_start_date)
        if anchor > now:
            raise InvalidInputError("No-contact start date cannot be in the future.")
        if precision_level not in PRECISION_LEVELS:
            raise InvalidInputError(f"precision_level must be one of {PRECISION_LEVELS}.")
        if previous_no_contact_attempts < 0:
            raise InvalidInputError("previous_no_contact_attempts cannot be negative.")

        with self._transaction() as tx:
            if tx.load() is not None:
                raise ProfileExistsError("A profile already exists for this installation.")

            profile = ProfileRecord(start_date=now, no_contact_start_date=anchor)
            profile.name = name
            profile.why_statement = why_statement
            profile.precision_level = precision_level
            profile.relationship_type = relationship_type
            profile.relationship_duration = relationship_duration
            profile.reason_for_no_contact = reason_for_no_contact
            profile.previous_no_contact_attempts = previous_no_contact_attempts
            # Onboarding counts as the first open of the day
            profile.app_opened_today = 1
            profile.record_daily_activity(now.date())
            metrics.recompute_scores(profile, now)

            tx.persist(profile)
            logger.info("Profile created; no-contact anchor %s", anchor.isoformat())
            return profile

    def get_profile(self) -> Optional[ProfileRecord]:
        with self._transaction() as tx:
            return tx.load()

    def progress_summary(self) -> Optional[Dict[str, Any]]:
        """Read‑only view of everything the dashboard shows."""
        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("progress_summary")
            now = self.now()
            return {
                "consistency_score": profile.consistency_score,
                "self_care_score": profile.self_care_score,
                "emotional_stability_score": profile.emotional_stability_score,
                "current_streak": metrics.current_streak(profile, now),
                "active_days": metrics.active_days_count(profile, now),
                "days_since_no_contact": metrics.days_since_no_contact(profile, now),
                "weeks_since_no_contact": metrics.weeks_since_no_contact(profile, now),
                "months_since_no_contact": metrics.months_since_no_contact(profile, now),
                "hours_since_no_contact": metrics.hours_since_no_contact(profile, now),
                "minutes_since_no_contact": metrics.minutes_since_no_contact(profile, now),
                "growth": self.milestone_engine.stage_progress(profile, now),
                "unlocked_achievement_ids": list(profile.unlocked_achievement_ids),
                "achieved_milestone_ids": list(profile.achieved_milestone_ids),
                "engagement_flags": engagement_flags(profile, now),
            }

    # ------------------------------------------------------------------ #
    #  Activity
    # ------------------------------------------------------------------ #
    def record_app_open(self) -> Optional[ProfileRecord]:
        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("record_app_open")
            now = self.now()

            if profile.last_active_date.date() != now.date():
                profile.app_opened_today = 1
                profile.last_active_date = now
                profile.record_daily_activity(now.date())
                metrics.recompute_scores(profile, now)
            else:
                profile.app_opened_today += 1

            tx.persist(profile)
            return profile

    def record_journal_entry(
        self, text: str, mood: Optional[str] = None
    ) -> Optional[Tuple[ProfileRecord, Dict[str, Any]]]:
        """Stores the entry and returns (profile, entry dict)."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Journal entry text must be a non-empty string.")

        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("record_journal_entry")
            now = self.now()

            entry = tx.journal.add(text, created_at=now, mood=mood)
            profile.journal_entries_count += 1
            profile.last_active_date = now
            profile.record_daily_activity(now.date())
            metrics.recompute_scores(profile, now)
            self._unlock_journal_achievements(profile, now)

            tx.persist(profile)
            return profile, entry.to_dict()

    def record_journal_deletion(self, entry_id: Optional[str] = None) -> Optional[ProfileRecord]:
        """
        Deletes entry_id when given (EntryNotFoundError if unknown) and
        decrements the journal count, floored at zero.
        """
        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("record_journal_deletion")
            now = self.now()

            if entry_id is not None:
                entry = tx.journal.get(entry_id)
                if entry is None:
                    raise EntryNotFoundError(f"Journal entry {entry_id} not found.")
                tx.journal.delete(entry)

            profile.journal_entries_count = max(0, profile.journal_entries_count - 1)
            profile.last_active_date = now
            profile.record_daily_activity(now.date())
            metrics.recompute_scores(profile, now)
            self._unlock_journal_achievements(profile, now)

            tx.persist(profile)
            return profile

    def list_journal_entries(self, limit: Optional[int] = JOURNAL_DEFAULT_LIST_LIMIT) -> List[Dict[str, Any]]:
        # SQLite reads a negative LIMIT as "no limit"
        if limit is not None and limit < 0:
            raise InvalidInputError("limit cannot be negative.")
        with self._transaction() as tx:
            return [e.to_dict() for e in tx.journal.list_recent(limit)]

    def record_chat_session(self) -> Optional[ProfileRecord]:
        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("record_chat_session")
            now = self.now()

            if profile.last_chat_session_date.date() != now.date():
                profile.chat_sessions_today = 1
            else:
                profile.chat_sessions_today += 1
            profile.last_chat_session_date = now
            profile.total_chat_sessions += 1
            metrics.recompute_self_care(profile, now)

            tx.persist(profile)
            return profile

    # ------------------------------------------------------------------ #
    #  Settings
    # ------------------------------------------------------------------ #
    def set_no_contact_start_date(self, new_date) -> Optional[ProfileRecord]:
        """
        Moves the no‑contact anchor. Moving it forward shrinks the history the
        scores see, so they may drop; unlocks already earned are kept.
        """
        anchor = to_naive_local(new_date)
        now = self.now()
        if anchor > now:
            logger.warning("Rejected future no-contact start date %s", anchor.isoformat())
            raise InvalidInputError("No-contact start date cannot be in the future.")

        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("set_no_contact_start_date")

            profile.no_contact_start_date = anchor
            metrics.recompute_scores(profile, now)

            tx.persist(profile)
            logger.info("No-contact anchor moved to %s", anchor.isoformat())
            return profile

    def update_relationship_context(
        self,
        relationship_type: str,
        relationship_duration: str,
        reason_for_no_contact: str,
        previous_no_contact_attempts: int,
    ) -> Optional[ProfileRecord]:
        if previous_no_contact_attempts < 0:
            raise InvalidInputError("previous_no_contact_attempts cannot be negative.")

        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("update_relationship_context")
            profile.relationship_type = relationship_type
            profile.relationship_duration = relationship_duration
            profile.reason_for_no_contact = reason_for_no_contact
            profile.previous_no_contact_attempts = previous_no_contact_attempts
            tx.persist(profile)
            return profile

    def update_settings(
        self,
        daily_reminder_enabled: bool,
        reminder_time: str,
        weekly_reports_enabled: bool,
        anonymous_analytics_enabled: bool,
    ) -> Optional[ProfileRecord]:
        try:
            datetime.strptime(reminder_time, "%H:%M")
        except (TypeError, ValueError):
            raise InvalidInputError("reminder_time must be formatted HH:MM.")

        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("update_settings")
            profile.daily_reminder_enabled = daily_reminder_enabled
            profile.reminder_time = reminder_time
            profile.weekly_reports_enabled = weekly_reports_enabled
            profile.anonymous_analytics_enabled = anonymous_analytics_enabled
            tx.persist(profile)
            return profile

    # ------------------------------------------------------------------ #
    #  Unlocks
    # ------------------------------------------------------------------ #
    def check_milestones(self, missing_ok: bool = True) -> Optional[Milestone]:
        """
        Awards at most one milestone; returns it for the celebration UI.

        None means either no profile or nothing newly reached. Callers that
        must tell the two apart pass missing_ok=False and get
        ProfileNotFoundError for the former.
        """
        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                if not missing_ok:
                    raise ProfileNotFoundError("No profile exists yet; complete onboarding first.")
                return self._missing("check_milestones")

            milestone = self.milestone_engine.check_and_award(profile, self.now())
            if milestone is not None:
                tx.persist(profile)
            return milestone

    def check_achievements(self) -> Optional[List[Achievement]]:
        """Evaluates tenure, streak and journal achievements in one pass."""
        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("check_achievements")
            now = self.now()

            unlocked = self.achievement_engine.check_all(profile, now)
            if unlocked:
                metrics.recompute_self_care(profile, now)
                tx.persist(profile)
            return unlocked

    # ------------------------------------------------------------------ #
    #  Export & erase
    # ------------------------------------------------------------------ #
    def export_snapshot(self) -> Optional[Dict[str, Any]]:
        with self._transaction() as tx:
            profile = tx.load()
            if profile is None:
                return self._missing("export_snapshot")
            now = self.now()

            entries = [
                {
                    "id": e.id,
                    "date": e.created_at.isoformat() if e.created_at else None,
                    "content": e.content,
                    "mood": e.mood,
                    "word_count": len(e.content.split()),
                }
                for e in tx.journal.list_recent(limit=None)
            ]
            return {
                "profile": profile.to_dict(),
                "journal_entries": entries,
                "statistics": {
                    "days_since_no_contact": metrics.days_since_no_contact(profile, now),
                    "weeks_since_no_contact": metrics.weeks_since_no_contact(profile, now),
                    "months_since_no_contact": metrics.months_since_no_contact(profile, now),
                    "current_streak": metrics.current_streak(profile, now),
                    "active_days": metrics.active_days_count(profile, now),
                },
                "exported_at": now.isoformat(),
            }

    def erase_all(self) -> bool:
        """Irreversibly removes the profile and every journal entry. Returns True if a profile existed."""
        with self._transaction() as tx:
            removed_entries = tx.journal.delete_all()
            removed_profiles = tx.profiles.delete_all()
            tx.profiles.commit()
            logger.info(
                "Erased all data: %s profile record(s), %s journal entr(ies)",
                removed_profiles,
                removed_entries,
            )
            return removed_profiles > 0
