"""
Client-side reward estimate shown before the ledger confirms a claim.
"""

BASE_DAILY_REWARD = 10
STREAK_STEP_DAYS = 3
STREAK_STEP_BONUS = 5


def calculate_daily_reward(day_count: int) -> int:
    """Whole-token reward for the `day_count`-th consecutive day."""
    return BASE_DAILY_REWARD + (day_count // STREAK_STEP_DAYS) * STREAK_STEP_BONUS
