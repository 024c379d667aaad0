# onward_app/modules/achievements.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from onward_app.config.constants import (
    GRATITUDE_MIN_ENTRIES,
    GRATITUDE_MIN_SELF_CARE,
    GROWTH_MINDSET_MIN_ACTIVE_DAYS,
    GROWTH_MINDSET_MIN_CONSISTENCY,
    JOURNAL_ACHIEVEMENT_THRESHOLDS,
    POSITIVE_LANGUAGE_MIN_CONSISTENCY,
    POSITIVE_LANGUAGE_MIN_ENTRIES,
    SELF_COMPASSION_MIN_ENTRIES,
    SELF_COMPASSION_MIN_STABILITY,
    STRENGTH_MIN_DAYS,
    STRENGTH_MIN_STABILITY,
    STREAK_ACHIEVEMENT_THRESHOLDS,
    TENURE_ACHIEVEMENT_THRESHOLDS,
)
from onward_app.core.profile import ProfileRecord
from onward_app.modules import metrics

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class Achievement:
    """A one‑time, count‑threshold unlock with display copy for the celebration popup."""

    def __init__(self, category: str, requirement: int, title: str, subtitle: str):
        self.category = category
        self.requirement = requirement
        self.title = title
        self.subtitle = subtitle

    @property
    def id(self) -> str:
        if self.category == "journal":
            return f"journal_{self.requirement}_entries"
        if self.category == "streak":
            return f"streak_{self.requirement}_days"
        return f"time_{self.requirement}_days"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "requirement": self.requirement,
            "title": self.title,
            "subtitle": self.subtitle,
        }

    def __repr__(self) -> str:
        return f"<Achievement(id={self.id})>"


_JOURNAL_COPY = {
    1:   ("First Words", "Your first journal entry"),
    5:   ("Storyteller", "5 journal entries"),
    10:  ("Chronicle Keeper", "10 entries of wisdom"),
    25:  ("Memory Weaver", "25 entries of growth"),
    50:  ("Journal Master", "50 entries of insight"),
    100: ("Word Wizard", "100 entries of healing"),
}

_STREAK_COPY = {
    3:  ("Streak Starter", "3 days in a row"),
    7:  ("Streak Warrior", "7 day streak"),
    14: ("Streak Master", "14 day streak"),
    30: ("Streak Legend", "30 day streak"),
}

_TENURE_COPY = {
    1:   ("First Step", "Your journey begins"),
    3:   ("Three Day Hero", "Building momentum"),
    7:   ("Week Warrior", "Seven days strong"),
    14:  ("Fortnight Fighter", "Two weeks of courage"),
    21:  ("Three Week Wonder", "21 days of growth"),
    30:  ("Monthly Master", "One month milestone"),
    60:  ("Two Month Titan", "60 days of strength"),
    90:  ("Quarter Year Queen", "90 days of transformation"),
    180: ("Half Year Hero", "Six months of healing"),
    365: ("Year of Triumph", "365 days of victory"),
}


def _table(category: str, thresholds: Tuple[int, ...], copy: Dict[int, Tuple[str, str]]) -> List[Achievement]:
    return [Achievement(category, n, *copy.get(n, (f"{n}", ""))) for n in sorted(thresholds)]


JOURNAL_ACHIEVEMENTS = _table("journal", JOURNAL_ACHIEVEMENT_THRESHOLDS, _JOURNAL_COPY)
STREAK_ACHIEVEMENTS = _table("streak", STREAK_ACHIEVEMENT_THRESHOLDS, _STREAK_COPY)
TENURE_ACHIEVEMENTS = _table("time", TENURE_ACHIEVEMENT_THRESHOLDS, _TENURE_COPY)


def get_achievement(achievement_id: str) -> Optional[Achievement]:
    for achievement in TENURE_ACHIEVEMENTS + STREAK_ACHIEVEMENTS + JOURNAL_ACHIEVEMENTS:
        if achievement.id == achievement_id:
            return achievement
    return None


class AchievementEngine:
    """
    Unlocks count‑threshold achievements. Unlike milestones, several may
    unlock in one call; re‑running with unchanged counts unlocks nothing.
    """

    def check_journal_achievements(self, profile: ProfileRecord) -> List[Achievement]:
        return self._unlock_reached(profile, JOURNAL_ACHIEVEMENTS, profile.journal_entries_count)

    def check_streak_achievements(self, profile: ProfileRecord, now: datetime) -> List[Achievement]:
        return self._unlock_reached(profile, STREAK_ACHIEVEMENTS, metrics.current_streak(profile, now))

    def check_tenure_achievements(self, profile: ProfileRecord, now: datetime) -> List[Achievement]:
        """
        Tenure tiers unlock in order: a tier is only eligible once the tier
        before it is unlocked.
        """
        days = metrics.days_since_no_contact(profile, now)
        unlocked: List[Achievement] = []
        previous: Optional[Achievement] = None

        for achievement in TENURE_ACHIEVEMENTS:
            if days < achievement.requirement:
                break
            if previous is not None and previous.id not in profile.unlocked_achievement_ids:
                break
            if profile.unlock_achievement(achievement.id):
                logger.info("Achievement unlocked: %s", achievement.id)
                unlocked.append(achievement)
            previous = achievement

        return unlocked

    def check_all(self, profile: ProfileRecord, now: datetime) -> List[Achievement]:
        unlocked = self.check_tenure_achievements(profile, now)
        unlocked += self.check_streak_achievements(profile, now)
        unlocked += self.check_journal_achievements(profile)
        return unlocked

    def _unlock_reached(
        self, profile: ProfileRecord, table: List[Achievement], current_value: int
    ) -> List[Achievement]:
        unlocked = []
        for achievement in table:
            if current_value < achievement.requirement:
                break
            if profile.unlock_achievement(achievement.id):
                logger.info("Achievement unlocked: %s", achievement.id)
                unlocked.append(achievement)
        return unlocked


# ---------------------------------------------------------------- #
#  Engagement flags – gate qualitative hints, never persisted
# ---------------------------------------------------------------- #
def has_positive_language_pattern(profile: ProfileRecord) -> bool:
    return (
        profile.journal_entries_count >= POSITIVE_LANGUAGE_MIN_ENTRIES
        and profile.consistency_score >= POSITIVE_LANGUAGE_MIN_CONSISTENCY
    )


def has_gratitude_pattern(profile: ProfileRecord) -> bool:
    return (
        profile.journal_entries_count >= GRATITUDE_MIN_ENTRIES
        and profile.self_care_score >= GRATITUDE_MIN_SELF_CARE
    )


def has_strength_language(profile: ProfileRecord, now: datetime) -> bool:
    return (
        metrics.days_since_no_contact(profile, now) >= STRENGTH_MIN_DAYS
        and profile.emotional_stability_score >= STRENGTH_MIN_STABILITY
    )


def has_self_compassion_language(profile: ProfileRecord) -> bool:
    return (
        profile.journal_entries_count >= SELF_COMPASSION_MIN_ENTRIES
        and profile.emotional_stability_score >= SELF_COMPASSION_MIN_STABILITY
    )


def has_growth_mindset_language(profile: ProfileRecord, now: datetime) -> bool:
    return (
        metrics.active_days_count(profile, now) >= GROWTH_MINDSET_MIN_ACTIVE_DAYS
        and profile.consistency_score >= GROWTH_MINDSET_MIN_CONSISTENCY
    )


def engagement_flags(profile: ProfileRecord, now: datetime) -> Dict[str, bool]:
    return {
        "positive_language": has_positive_language_pattern(profile),
        "gratitude": has_gratitude_pattern(profile),
        "strength": has_strength_language(profile, now),
        "self_compassion": has_self_compassion_language(profile),
        "growth_mindset": has_growth_mindset_language(profile, now),
    }
