import pytest

from onward_app.modules import achievements
from onward_app.modules.achievements import AchievementEngine, engagement_flags, get_achievement

from conftest import days_back, make_profile


@pytest.fixture
def engine():
    return AchievementEngine()


@pytest.mark.parametrize("count,expected", [
    (0, []),
    (1, ["journal_1_entries"]),
    (6, ["journal_1_entries", "journal_5_entries"]),
    (100, [
        "journal_1_entries", "journal_5_entries", "journal_10_entries",
        "journal_25_entries", "journal_50_entries", "journal_100_entries",
    ]),
])
def test_journal_thresholds(engine, frozen_now, count, expected):
    profile = make_profile(frozen_now, journal_entries_count=count)
    unlocked = engine.check_journal_achievements(profile)
    assert [a.id for a in unlocked] == expected
    assert profile.unlocked_achievement_ids == expected


def test_journal_check_is_idempotent(engine, frozen_now):
    profile = make_profile(frozen_now, journal_entries_count=12)
    first = engine.check_journal_achievements(profile)
    second = engine.check_journal_achievements(profile)
    assert len(first) == 3
    assert second == []
    assert len(profile.unlocked_achievement_ids) == len(set(profile.unlocked_achievement_ids)) == 3


def test_lowering_count_revokes_nothing(engine, frozen_now):
    profile = make_profile(frozen_now, journal_entries_count=5)
    engine.check_journal_achievements(profile)
    profile.journal_entries_count = 0
    assert engine.check_journal_achievements(profile) == []
    assert "journal_5_entries" in profile.unlocked_achievement_ids


def test_streak_achievements(engine, frozen_now, today):
    # today + seven days back -> streak of 7
    profile = make_profile(frozen_now, daily_activity_log=days_back(today, *range(8)))
    unlocked = engine.check_streak_achievements(profile, frozen_now)
    assert [a.id for a in unlocked] == ["streak_3_days", "streak_7_days"]


def test_tenure_achievements_unlock_in_order(engine, frozen_now):
    profile = make_profile(frozen_now, days_since_anchor=30)
    unlocked = engine.check_tenure_achievements(profile, frozen_now)
    assert [a.id for a in unlocked] == [
        "time_1_days", "time_3_days", "time_7_days",
        "time_14_days", "time_21_days", "time_30_days",
    ]
    assert engine.check_tenure_achievements(profile, frozen_now) == []


def test_tenure_tier_needs_previous_tier(engine, frozen_now):
    # time_1 and time_3 are missing, so the chain restarts from the first tier
    profile = make_profile(frozen_now, days_since_anchor=8, unlocked_achievement_ids=["time_7_days"])
    unlocked = engine.check_tenure_achievements(profile, frozen_now)
    assert [a.id for a in unlocked] == ["time_1_days", "time_3_days"]
    assert profile.unlocked_achievement_ids == ["time_7_days", "time_1_days", "time_3_days"]


def test_check_all_combines_tables(engine, frozen_now, today):
    profile = make_profile(
        frozen_now,
        days_since_anchor=3,
        journal_entries_count=1,
        daily_activity_log=days_back(today, 0, 1, 2, 3),
    )
    ids = [a.id for a in engine.check_all(profile, frozen_now)]
    assert ids == ["time_1_days", "time_3_days", "streak_3_days", "journal_1_entries"]


def test_catalogue_lookup():
    achievement = get_achievement("streak_30_days")
    assert achievement.title == "Streak Legend"
    assert achievement.to_dict()["category"] == "streak"
    assert get_achievement("journal_7_entries") is None


# ── Engagement flags ────────────────────────────────────────────────────

def test_flags_all_false_for_new_profile(frozen_now):
    profile = make_profile(frozen_now, days_since_anchor=0)
    assert not any(engagement_flags(profile, frozen_now).values())


def test_positive_language_needs_entries_and_consistency(frozen_now):
    profile = make_profile(frozen_now, journal_entries_count=5, consistency_score=0.6)
    assert achievements.has_positive_language_pattern(profile)
    profile.journal_entries_count = 4
    assert not achievements.has_positive_language_pattern(profile)


def test_gratitude_and_self_compassion(frozen_now):
    profile = make_profile(
        frozen_now,
        journal_entries_count=10,
        self_care_score=0.7,
        emotional_stability_score=0.59,
    )
    assert achievements.has_gratitude_pattern(profile)
    assert not achievements.has_self_compassion_language(profile)
    profile.emotional_stability_score = 0.6
    assert achievements.has_self_compassion_language(profile)


def test_strength_needs_two_weeks(frozen_now):
    profile = make_profile(frozen_now, days_since_anchor=13, emotional_stability_score=0.9)
    assert not achievements.has_strength_language(profile, frozen_now)
    profile = make_profile(frozen_now, days_since_anchor=14, emotional_stability_score=0.9)
    assert achievements.has_strength_language(profile, frozen_now)


def test_growth_mindset_needs_active_days(frozen_now, today):
    profile = make_profile(
        frozen_now,
        days_since_anchor=10,
        consistency_score=0.85,
        daily_activity_log=days_back(today, *range(6)),
    )
    assert not achievements.has_growth_mindset_language(profile, frozen_now)
    profile.daily_activity_log = days_back(today, *range(7))
    assert achievements.has_growth_mindset_language(profile, frozen_now)
