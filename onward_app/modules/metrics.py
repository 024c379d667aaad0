# onward_app/modules/metrics.py
# =====================================================================
#  Metrics calculator – bounded 0‑to‑1 engagement scores and streaks
# =====================================================================
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from onward_app.config.constants import (
    CONSISTENCY_ACTIVITY_CAP,
    CONSISTENCY_ACTIVITY_SCALE,
    CONSISTENCY_JOURNAL_CAP,
    CONSISTENCY_JOURNAL_SCALE,
    CONSISTENCY_TIME_CAP,
    CONSISTENCY_TIME_HORIZON,
    SELF_CARE_ACHIEVEMENT_CAP,
    SELF_CARE_ACHIEVEMENT_SCALE,
    SELF_CARE_ACHIEVEMENT_TOTAL,
    SELF_CARE_CHAT_CAP,
    SELF_CARE_CHAT_SCALE,
    SELF_CARE_JOURNAL_CAP,
    SELF_CARE_JOURNAL_SCALE,
    STABILITY_CONSISTENCY_WEIGHT,
    STABILITY_SELF_CARE_WEIGHT,
    STABILITY_TIME_BASE,
    STABILITY_TIME_CAP,
    STABILITY_TIME_PER_DAY,
)
from onward_app.core.profile import ProfileRecord
from onward_app.core.utils import (
    capped,
    clamp01,
    elapsed_days,
    elapsed_months,
    previous_day,
    start_of_day,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


# ---------------------------------------------------------------- #
#  Durations since the no‑contact anchor
# ---------------------------------------------------------------- #
def days_since_no_contact(profile: ProfileRecord, now: datetime) -> int:
    return elapsed_days(profile.no_contact_start_date, now)


def weeks_since_no_contact(profile: ProfileRecord, now: datetime) -> int:
    return days_since_no_contact(profile, now) // 7


def months_since_no_contact(profile: ProfileRecord, now: datetime) -> int:
    return elapsed_months(profile.no_contact_start_date, now)


def hours_since_no_contact(profile: ProfileRecord, now: datetime) -> int:
    return max(0, int((now - profile.no_contact_start_date).total_seconds() // 3600))


def minutes_since_no_contact(profile: ProfileRecord, now: datetime) -> int:
    return max(0, int((now - profile.no_contact_start_date).total_seconds() // 60))


def _score_days(profile: ProfileRecord, now: datetime) -> int:
    # Floor at 1 so rates never divide by zero on day one
    return max(1, days_since_no_contact(profile, now))


# ---------------------------------------------------------------- #
#  Activity log
# ---------------------------------------------------------------- #
def active_days_count(profile: ProfileRecord, now: datetime) -> int:
    """Distinct logged days whose midnight lies in [now − elapsed days, now]."""
    cutoff = now - timedelta(days=days_since_no_contact(profile, now))
    return sum(
        1 for day in profile.daily_activity_log
        if cutoff <= start_of_day(day) <= now
    )


def current_streak(profile: ProfileRecord, now: datetime) -> int:
    """
    Consecutive activity days ending today or yesterday.

    The run is seeded at the latest of {today, yesterday} that is logged and
    walked backwards from the day before the seed; the seed day itself is
    then subtracted, so a lone active day yields 0 and a missed day is only
    forgiven once.
    """
    logged = profile.daily_activity_log
    if not logged:
        return 0

    today = now.date()
    yesterday = previous_day(today)

    if today in logged:
        cursor = yesterday
    elif yesterday in logged:
        cursor = previous_day(yesterday)
    else:
        return 0

    streak = 1
    while cursor in logged:
        streak += 1
        cursor = previous_day(cursor)

    return max(0, streak - 1)


# ---------------------------------------------------------------- #
#  Scores
# ---------------------------------------------------------------- #
def consistency_score(profile: ProfileRecord, now: datetime) -> float:
    """
    Journal rhythm (≤0.4) + share of active days (≤0.3) + persistence
    bonus growing with sqrt(days) (≤0.3).
    """
    days = _score_days(profile, now)

    journal_rate = profile.journal_entries_count / days
    journal_part = capped(CONSISTENCY_JOURNAL_SCALE * journal_rate, CONSISTENCY_JOURNAL_CAP)

    activity_rate = active_days_count(profile, now) / days
    activity_part = capped(CONSISTENCY_ACTIVITY_SCALE * activity_rate, CONSISTENCY_ACTIVITY_CAP)

    time_bonus = capped(
        CONSISTENCY_TIME_CAP * math.sqrt(days) / CONSISTENCY_TIME_HORIZON,
        CONSISTENCY_TIME_CAP,
    )

    return clamp01(journal_part + activity_part + time_bonus)


def self_care_score(profile: ProfileRecord, now: datetime) -> float:
    """Chat sessions (≤0.4) + journaling (≤0.3) + achievements unlocked (≤0.3)."""
    days = _score_days(profile, now)

    chat_part = capped(SELF_CARE_CHAT_SCALE * profile.total_chat_sessions / days, SELF_CARE_CHAT_CAP)
    journal_part = capped(
        SELF_CARE_JOURNAL_SCALE * profile.journal_entries_count / days, SELF_CARE_JOURNAL_CAP
    )
    achievement_rate = len(profile.unlocked_achievement_ids) / SELF_CARE_ACHIEVEMENT_TOTAL
    achievement_part = capped(SELF_CARE_ACHIEVEMENT_SCALE * achievement_rate, SELF_CARE_ACHIEVEMENT_CAP)

    return clamp01(chat_part + journal_part + achievement_part)


def emotional_stability_score(
    profile: ProfileRecord,
    now: datetime,
    consistency: float,
    self_care: float,
) -> float:
    """Time baseline (0.3 → 0.5) plus a quarter of each engagement score."""
    days = _score_days(profile, now)
    time_part = min(STABILITY_TIME_CAP, STABILITY_TIME_BASE + STABILITY_TIME_PER_DAY * days)
    return clamp01(
        time_part
        + STABILITY_CONSISTENCY_WEIGHT * consistency
        + STABILITY_SELF_CARE_WEIGHT * self_care
    )


def recompute_scores(profile: ProfileRecord, now: datetime) -> None:
    """Refresh all three cached scores. Stability reads the other two, so it goes last."""
    profile.consistency_score = consistency_score(profile, now)
    profile.self_care_score = self_care_score(profile, now)
    profile.emotional_stability_score = emotional_stability_score(
        profile, now, profile.consistency_score, profile.self_care_score
    )
    logger.info(
        "Scores recomputed: consistency=%.3f self_care=%.3f stability=%.3f",
        profile.consistency_score,
        profile.self_care_score,
        profile.emotional_stability_score,
    )


def recompute_self_care(profile: ProfileRecord, now: datetime) -> None:
    """Refresh self‑care and stability only; chat activity does not feed consistency."""
    profile.self_care_score = self_care_score(profile, now)
    profile.emotional_stability_score = emotional_stability_score(
        profile, now, profile.consistency_score, profile.self_care_score
    )
    logger.info(
        "Self-care recomputed: self_care=%.3f stability=%.3f",
        profile.self_care_score,
        profile.emotional_stability_score,
    )
