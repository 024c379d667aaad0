from datetime import timedelta

import pytest

from onward_app.core.profile import GrowthStage
from onward_app.modules.milestones import MILESTONES, MilestoneEngine, get_milestone

from conftest import make_profile


@pytest.fixture
def engine():
    return MilestoneEngine()


def test_table_is_ascending():
    thresholds = [m.threshold_days for m in MILESTONES]
    assert thresholds == sorted(thresholds) == [1, 3, 7, 14, 30]


def test_dormant_install_unlocks_one_milestone_per_call(engine, frozen_now):
    profile = make_profile(frozen_now, days_since_anchor=40)

    awarded = []
    for _ in range(10):
        milestone = engine.check_and_award(profile, frozen_now)
        if milestone is None:
            break
        awarded.append(milestone.id)
        assert len(profile.achieved_milestone_ids) == len(awarded)

    assert awarded == ["24_hours", "3_days", "1_week", "2_weeks", "1_month"]
    assert profile.current_growth_stage is GrowthStage.SAPLING


def test_stage_advances_on_week_and_month(engine, frozen_now):
    profile = make_profile(frozen_now, days_since_anchor=8)
    engine.check_and_award(profile, frozen_now)  # 24_hours
    engine.check_and_award(profile, frozen_now)  # 3_days
    assert profile.current_growth_stage is GrowthStage.SEED
    assert engine.check_and_award(profile, frozen_now).id == "1_week"
    assert profile.current_growth_stage is GrowthStage.SPROUT
    assert engine.check_and_award(profile, frozen_now) is None


def test_nothing_before_twenty_four_hours(engine, frozen_now):
    profile = make_profile(frozen_now, days_since_anchor=0.99)
    assert engine.check_and_award(profile, frozen_now) is None
    assert engine.check_and_award(profile, frozen_now + timedelta(hours=1)).id == "24_hours"


def test_measured_from_install_not_no_contact_anchor(engine, frozen_now):
    profile = make_profile(frozen_now, days_since_anchor=0)
    profile.no_contact_start_date = frozen_now - timedelta(days=100)
    assert engine.check_and_award(profile, frozen_now) is None


def test_month_milestone_does_not_skip_a_stage(engine, frozen_now):
    profile = make_profile(
        frozen_now,
        days_since_anchor=31,
        achieved_milestone_ids=["24_hours", "3_days", "1_week", "2_weeks"],
    )
    assert engine.check_and_award(profile, frozen_now).id == "1_month"
    assert profile.current_growth_stage is GrowthStage.SEED


def test_week_milestone_never_regresses_stage(engine, frozen_now):
    profile = make_profile(
        frozen_now,
        days_since_anchor=10,
        achieved_milestone_ids=["24_hours", "3_days"],
        current_growth_stage=GrowthStage.SAPLING,
    )
    engine.check_and_award(profile, frozen_now)
    assert profile.current_growth_stage is GrowthStage.SAPLING


@pytest.mark.parametrize("days,stage,expected", [
    (3, GrowthStage.SEED, {"stage": "Seed", "next_stage": "Sprout", "progress": 0.4286}),
    (12, GrowthStage.SEED, {"stage": "Seed", "next_stage": "Sprout", "progress": 1.0}),
    (18, GrowthStage.SPROUT, {"stage": "Sprout", "next_stage": "Sapling", "progress": 0.4783}),
    (45, GrowthStage.SAPLING, {"stage": "Sapling", "next_stage": None, "progress": 1.0}),
])
def test_stage_progress(engine, frozen_now, days, stage, expected):
    profile = make_profile(frozen_now, days_since_anchor=days, current_growth_stage=stage)
    progress = engine.stage_progress(profile, frozen_now)
    assert {k: progress[k] for k in expected} == expected
    assert progress["days_since_start"] == days


def test_get_milestone():
    assert get_milestone("1_week").name == "1 Week"
    assert get_milestone("10_years") is None
