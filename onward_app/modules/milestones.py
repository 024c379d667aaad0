# onward_app/modules/milestones.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from onward_app.config.constants import (
    MILESTONE_THRESHOLD_DAYS,
    SECONDS_PER_DAY,
    STAGE_ADVANCE_ON_MILESTONE,
)
from onward_app.core.profile import GrowthStage, ProfileRecord
from onward_app.core.utils import elapsed_days

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class Milestone:
    """A one‑time, tenure‑based unlock."""

    def __init__(self, milestone_id: str, name: str, threshold_days: int):
        self.id = milestone_id
        self.name = name
        self.threshold_days = threshold_days

    @property
    def threshold_seconds(self) -> float:
        return float(self.threshold_days * SECONDS_PER_DAY)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "threshold_days": self.threshold_days}

    def __repr__(self) -> str:
        return f"<Milestone(id={self.id}, threshold_days={self.threshold_days})>"


MILESTONE_NAMES = {
    "24_hours": "24 Hours",
    "3_days":   "3 Days",
    "1_week":   "1 Week",
    "2_weeks":  "2 Weeks",
    "1_month":  "1 Month",
}

MILESTONES: List[Milestone] = sorted(
    (Milestone(mid, MILESTONE_NAMES[mid], days) for mid, days in MILESTONE_THRESHOLD_DAYS.items()),
    key=lambda m: m.threshold_days,
)


def get_milestone(milestone_id: str) -> Optional[Milestone]:
    for milestone in MILESTONES:
        if milestone.id == milestone_id:
            return milestone
    return None


class MilestoneEngine:
    """
    Awards tenure milestones measured from the install date and advances
    the plant's growth stage when a stage‑bearing milestone is reached.
    """

    # Days since install at which each stage is entered, used for the
    # garden progress bar.
    STAGE_WINDOWS = {
        GrowthStage.SEED:    {"from_day": 0,  "to_day": 7,  "next": GrowthStage.SPROUT},
        GrowthStage.SPROUT:  {"from_day": 7,  "to_day": 30, "next": GrowthStage.SAPLING},
        GrowthStage.SAPLING: {"from_day": 30, "to_day": None, "next": None},
    }

    def __init__(self, milestones: Optional[List[Milestone]] = None):
        self.milestones = milestones if milestones is not None else MILESTONES

    def check_and_award(self, profile: ProfileRecord, now: datetime) -> Optional[Milestone]:
        """
        Awards the first reached milestone not yet achieved and stops there,
        so a long‑dormant install surfaces its missed milestones one per call.
        """
        elapsed = (now - profile.start_date).total_seconds()

        for milestone in self.milestones:
            if milestone.id in profile.achieved_milestone_ids:
                continue
            if elapsed < milestone.threshold_seconds:
                # Thresholds ascend; nothing further can be reached
                break
            profile.add_milestone(milestone.id)
            self._advance_stage(profile, milestone)
            logger.info("Milestone unlocked: %s", milestone.id)
            return milestone

        return None

    def _advance_stage(self, profile: ProfileRecord, milestone: Milestone) -> None:
        transition = STAGE_ADVANCE_ON_MILESTONE.get(milestone.id)
        if not transition:
            return
        required, new_stage = (GrowthStage(s) for s in transition)
        profile.advance_growth_stage(required, new_stage)

    def stage_progress(self, profile: ProfileRecord, now: datetime) -> Dict[str, Any]:
        """
        Returns the current stage, the next stage (or None) and the fraction
        of the way there, in days since install.
        """
        stage = profile.current_growth_stage
        window = self.STAGE_WINDOWS[stage]
        days = elapsed_days(profile.start_date, now)

        if window["to_day"] is None:
            progress = 1.0
        else:
            span = window["to_day"] - window["from_day"]
            progress = min(1.0, max(0, days - window["from_day"]) / span)

        nxt = window["next"]
        return {
            "stage": stage.value,
            "next_stage": nxt.value if nxt else None,
            "progress": round(progress, 4),
            "days_since_start": days,
        }
