# onward_app/core/profile.py
import json
import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from onward_app.config.constants import (
    ACTIVITY_RETENTION_DAYS,
    DEFAULT_REMINDER_TIME,
)
from onward_app.core.utils import clamp01, parse_date, parse_datetime

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class GrowthStage(str, Enum):
    """Plant stages shown in the healing garden, in growth order."""

    SEED = "Seed"
    SPROUT = "Sprout"
    SAPLING = "Sapling"

    @property
    def rank(self) -> int:
        return list(GrowthStage).index(self)


class ProfileRecord:
    """
    Serializable container for the single user's recovery journey.

    Counters and the activity log are raw inputs; the three scores are cached
    derived values that the owning mutation must refresh through
    ``onward_app.modules.metrics.recompute_scores``.
    """

    def __init__(
        self,
        start_date: datetime,
        no_contact_start_date: Optional[datetime] = None,
    ) -> None:
        # ---- Anchors ---------------------------------------------------
        self.start_date: datetime = start_date
        self.no_contact_start_date: datetime = no_contact_start_date or self.start_date

        # ---- Onboarding context -----------------------------------------
        self.name: str = ""
        self.why_statement: str = ""
        self.precision_level: str = "day"  # day / hour / minute
        self.relationship_type: str = ""
        self.relationship_duration: str = ""
        self.reason_for_no_contact: str = ""
        self.previous_no_contact_attempts: int = 0

        # ---- Engagement counters ----------------------------------------
        self.journal_entries_count: int = 0
        self.total_chat_sessions: int = 0
        self.chat_sessions_today: int = 0
        self.last_chat_session_date: datetime = self.start_date
        self.app_opened_today: int = 0
        self.last_active_date: datetime = self.start_date
        self.daily_activity_log: Set[date] = set()

        # ---- Unlocks & growth -------------------------------------------
        self.unlocked_achievement_ids: List[str] = []
        self.achieved_milestone_ids: List[str] = []
        self.current_growth_stage: GrowthStage = GrowthStage.SEED

        # ---- Cached scores (0–1) ----------------------------------------
        self.consistency_score: float = 0.0
        self.self_care_score: float = 0.0
        self.emotional_stability_score: float = 0.0

        # ---- Settings ---------------------------------------------------
        self.daily_reminder_enabled: bool = True
        self.reminder_time: str = DEFAULT_REMINDER_TIME
        self.weekly_reports_enabled: bool = True
        self.anonymous_analytics_enabled: bool = True

    # ------------------------------------------------------------------ #
    #  Invariant‑preserving helpers (called by ProgressService only)
    # ------------------------------------------------------------------ #
    def record_daily_activity(self, today: date) -> bool:
        """
        Adds today to the activity log and trims days that fell out of the
        retention window. Returns False if today was already logged.
        """
        if today in self.daily_activity_log:
            return False
        self.daily_activity_log.add(today)
        cutoff = today - timedelta(days=ACTIVITY_RETENTION_DAYS)
        self.daily_activity_log = {d for d in self.daily_activity_log if d > cutoff}
        return True

    def unlock_achievement(self, achievement_id: str) -> bool:
        if achievement_id in self.unlocked_achievement_ids:
            return False
        self.unlocked_achievement_ids.append(achievement_id)
        return True

    def add_milestone(self, milestone_id: str) -> bool:
        if milestone_id in self.achieved_milestone_ids:
            return False
        self.achieved_milestone_ids.append(milestone_id)
        return True

    def advance_growth_stage(self, required: GrowthStage, new_stage: GrowthStage) -> bool:
        """Moves to new_stage only from the required stage, so stages never skip or regress."""
        if self.current_growth_stage != required or new_stage.rank <= required.rank:
            return False
        logger.info(
            "Growth stage advanced %s -> %s", self.current_growth_stage.value, new_stage.value
        )
        self.current_growth_stage = new_stage
        return True

    # ------------------------------------------------------------------ #
    #  Persistence helpers
    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to a JSON‑safe dict."""
        return {
            # Anchors
            "start_date": self.start_date.isoformat(),
            "no_contact_start_date": self.no_contact_start_date.isoformat(),

            # Onboarding context
            "name": self.name,
            "why_statement": self.why_statement,
            "precision_level": self.precision_level,
            "relationship_type": self.relationship_type,
            "relationship_duration": self.relationship_duration,
            "reason_for_no_contact": self.reason_for_no_contact,
            "previous_no_contact_attempts": self.previous_no_contact_attempts,

            # Counters
            "journal_entries_count": self.journal_entries_count,
            "total_chat_sessions": self.total_chat_sessions,
            "chat_sessions_today": self.chat_sessions_today,
            "last_chat_session_date": self.last_chat_session_date.isoformat(),
            "app_opened_today": self.app_opened_today,
            "last_active_date": self.last_active_date.isoformat(),
            "daily_activity_log": sorted(d.isoformat() for d in self.daily_activity_log),

            # Unlocks
            "unlocked_achievement_ids": list(self.unlocked_achievement_ids),
            "achieved_milestone_ids": list(self.achieved_milestone_ids),
            "current_growth_stage": self.current_growth_stage.value,

            # Scores
            "consistency_score": self.consistency_score,
            "self_care_score": self.self_care_score,
            "emotional_stability_score": self.emotional_stability_score,

            # Settings
            "daily_reminder_enabled": self.daily_reminder_enabled,
            "reminder_time": self.reminder_time,
            "weekly_reports_enabled": self.weekly_reports_enabled,
            "anonymous_analytics_enabled": self.anonymous_analytics_enabled,
        }

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """Rehydrate from a dict, skipping (and logging) values that fail to parse."""
        if not isinstance(data, dict):
            logger.error("Invalid data passed to update_from_dict: expected dict, got %s", type(data))
            return

        for attr in ("start_date", "no_contact_start_date", "last_chat_session_date", "last_active_date"):
            if attr in data:
                try:
                    setattr(self, attr, parse_datetime(data[attr]))
                except (TypeError, ValueError) as e:
                    logger.warning("Could not parse %s=%r: %s", attr, data[attr], e)

        for attr in (
            "name", "why_statement", "precision_level", "relationship_type",
            "relationship_duration", "reason_for_no_contact", "reminder_time",
            "daily_reminder_enabled", "weekly_reports_enabled", "anonymous_analytics_enabled",
        ):
            if attr in data:
                setattr(self, attr, data[attr])

        for attr in (
            "previous_no_contact_attempts", "journal_entries_count", "total_chat_sessions",
            "chat_sessions_today", "app_opened_today",
        ):
            if attr in data:
                try:
                    setattr(self, attr, max(0, int(data[attr])))
                except (TypeError, ValueError) as e:
                    logger.warning("Could not parse %s=%r: %s", attr, data[attr], e)

        for attr in ("consistency_score", "self_care_score", "emotional_stability_score"):
            if attr in data:
                try:
                    setattr(self, attr, clamp01(float(data[attr])))
                except (TypeError, ValueError) as e:
                    logger.warning("Could not parse %s=%r: %s", attr, data[attr], e)

        if "daily_activity_log" in data:
            days = set()
            for raw in data["daily_activity_log"] or []:
                try:
                    days.add(parse_date(raw))
                except (TypeError, ValueError) as e:
                    logger.warning("Dropping unparseable activity day %r: %s", raw, e)
            self.daily_activity_log = days

        # Order‑preserving de‑duplication
        for attr in ("unlocked_achievement_ids", "achieved_milestone_ids"):
            if attr in data:
                setattr(self, attr, list(dict.fromkeys(data[attr] or [])))

        if "current_growth_stage" in data:
            try:
                self.current_growth_stage = GrowthStage(data["current_growth_stage"])
            except ValueError:
                logger.warning("Unknown growth stage %r, keeping %s",
                               data["current_growth_stage"], self.current_growth_stage.value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_start: datetime) -> "ProfileRecord":
        """
        Rebuilds a stored record. A record without a readable start_date is
        anchored at fallback_start (the caller's clock) and the repair is
        logged as an error.
        """
        if not isinstance(data, dict):
            logger.error("Invalid data passed to ProfileRecord.from_dict: expected dict, got %s", type(data))
            return cls(start_date=fallback_start)

        try:
            start = parse_datetime(data["start_date"])
        except (KeyError, TypeError, ValueError) as e:
            logger.error(
                "Stored profile has no readable start_date (%r); anchoring at %s",
                e,
                fallback_start.isoformat(),
            )
            start = fallback_start

        record = cls(start_date=start)
        record.update_from_dict(data)
        return record

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)
