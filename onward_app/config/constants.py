# onward_app/config/constants.py

"""
Centralized configuration of all quantitative parameters used by the
Onward progress engine.
"""

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━ ACTIVITY LOG ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
ACTIVITY_RETENTION_DAYS = 90
# RATIONALE: Streaks and active-day rates never look further back than a quarter.

SECONDS_PER_DAY = 86400
# RATIONALE: Standard conversion factor.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━ CONSISTENCY SCORE ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
CONSISTENCY_JOURNAL_CAP    = 0.4
CONSISTENCY_JOURNAL_SCALE  = 3.0
# RATIONALE: Full 0.4 share at roughly one entry every 7.5 days; below that it scales linearly.

CONSISTENCY_ACTIVITY_CAP   = 0.3
CONSISTENCY_ACTIVITY_SCALE = 0.5
# RATIONALE: Opening the app on 60% of days earns the full activity share.

CONSISTENCY_TIME_CAP       = 0.3
CONSISTENCY_TIME_HORIZON   = 30.0
# RATIONALE: sqrt growth rewards persistence with diminishing returns.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━ SELF-CARE SCORE ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
SELF_CARE_CHAT_CAP           = 0.4
SELF_CARE_CHAT_SCALE         = 2.0
SELF_CARE_JOURNAL_CAP        = 0.3
SELF_CARE_JOURNAL_SCALE      = 5.0
SELF_CARE_ACHIEVEMENT_CAP    = 0.3
SELF_CARE_ACHIEVEMENT_SCALE  = 0.4
SELF_CARE_ACHIEVEMENT_TOTAL  = 20.0
# RATIONALE: Realistic number of basic achievements a user works towards.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━ EMOTIONAL STABILITY ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
STABILITY_TIME_BASE    = 0.3
STABILITY_TIME_PER_DAY = 0.005
STABILITY_TIME_CAP     = 0.5
# RATIONALE: Baseline grows slowly and tops out after forty days.

STABILITY_CONSISTENCY_WEIGHT = 0.25
STABILITY_SELF_CARE_WEIGHT   = 0.25
# RATIONALE: Remaining half is earned through engagement.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━ MILESTONES ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
MILESTONE_THRESHOLD_DAYS = {
    "24_hours": 1,
    "3_days":   3,
    "1_week":   7,
    "2_weeks":  14,
    "1_month":  30,
}
# RATIONALE: Measured from install date; ordered ascending.

STAGE_ADVANCE_ON_MILESTONE = {
    "1_week":  ("Seed", "Sprout"),
    "1_month": ("Sprout", "Sapling"),
}
# RATIONALE: (required current stage, new stage) so stages never skip.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━ ACHIEVEMENTS ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
JOURNAL_ACHIEVEMENT_THRESHOLDS = (1, 5, 10, 25, 50, 100)
STREAK_ACHIEVEMENT_THRESHOLDS  = (3, 7, 14, 30)
TENURE_ACHIEVEMENT_THRESHOLDS  = (1, 3, 7, 14, 21, 30, 60, 90, 180, 365)
# RATIONALE: Ascending order matters; tenure tiers unlock one after another.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━ ENGAGEMENT FLAGS ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
POSITIVE_LANGUAGE_MIN_ENTRIES     = 5
POSITIVE_LANGUAGE_MIN_CONSISTENCY = 0.6
GRATITUDE_MIN_ENTRIES             = 10
GRATITUDE_MIN_SELF_CARE           = 0.7
STRENGTH_MIN_DAYS                 = 14
STRENGTH_MIN_STABILITY            = 0.7
SELF_COMPASSION_MIN_ENTRIES       = 8
SELF_COMPASSION_MIN_STABILITY     = 0.6
GROWTH_MINDSET_MIN_ACTIVE_DAYS    = 7
GROWTH_MINDSET_MIN_CONSISTENCY    = 0.8
# RATIONALE: Each hint needs both sustained engagement and a healthy score.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━ JOURNAL ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
JOURNAL_DEFAULT_LIST_LIMIT = 15
# RATIONALE: Matches the free-tier journal list size.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━ CHAT PROXY ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
CHAT_MESSAGE_MAX_CHARS = 4000
# RATIONALE: Keeps upstream requests well inside the model's context.

CHAT_SYSTEM_PROMPT = (
    "You are a compassionate AI companion for the Onward healing app. You help users "
    "who are going through difficult times, particularly those healing from relationships "
    "or personal challenges.\n\n"
    "Your responses should be:\n"
    "- Warm, empathetic, and supportive\n"
    "- Focused on healing and personal growth\n"
    "- Encouraging but not dismissive of their feelings\n"
    "- Brief but meaningful (2-3 sentences max)\n"
    "- Avoid giving medical or professional therapy advice\n"
    "- Use gentle, nurturing language\n\n"
    "Remember: You're a supportive friend, not a therapist. Always encourage professional "
    "help for serious mental health concerns."
)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━ PROFILE ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
PRECISION_LEVELS = ("day", "hour", "minute")
DEFAULT_REMINDER_TIME = "20:00"
# RATIONALE: Evening reminder gives the day time to happen first.
