"""
Daily Streak Tracking

A streak counts consecutive calendar days with at least one XP-earning
activity. Only the first activity of a day moves the streak; later ones
on the same day are no-ops.

Bonus XP: 5 per streak day when the streak continues, capped at 25.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
import logging

logger = logging.getLogger(__name__)

STREAK_BONUS_PER_DAY = 5
MAX_STREAK_BONUS = 25


@dataclass(frozen=True)
class StreakEvaluation:
    """Result of evaluating one activity against the stored streak"""
    new_streak: int
    longest_streak: int
    bonus: int
    already_counted: bool
    streak_broken: bool = False


def calculate_streak_bonus(streak: int) -> int:
    """Bonus XP for reaching day `streak` of a continued streak"""
    return min(streak * STREAK_BONUS_PER_DAY, MAX_STREAK_BONUS)


def evaluate_streak(
    last_activity_date: Optional[date],
    today: date,
    current_streak: int,
    longest_streak: int = 0
) -> StreakEvaluation:
    """
    Evaluate an activity happening on `today`

    Logic:
    - Already active today: nothing changes, no bonus
    - Active yesterday: streak continues, bonus = min(streak * 5, 25)
    - No previous activity, a gap of more than one day, or a last activity
      dated after today (clock moved backward): streak restarts at 1

    Args:
        last_activity_date: Last day the streak was credited (None if never)
        today: Calendar day of the current activity
        current_streak: Stored streak length
        longest_streak: Stored best streak

    Returns:
        StreakEvaluation with the new streak, running best and bonus
    """
    # Drivers may hand back timestamps for date columns
    if isinstance(last_activity_date, datetime):
        last_activity_date = last_activity_date.date()

    if last_activity_date == today:
        return StreakEvaluation(
            new_streak=current_streak,
            longest_streak=max(current_streak, longest_streak),
            bonus=0,
            already_counted=True,
        )

    if last_activity_date is not None and (today - last_activity_date).days == 1:
        new_streak = current_streak + 1
        return StreakEvaluation(
            new_streak=new_streak,
            longest_streak=max(new_streak, longest_streak),
            bonus=calculate_streak_bonus(new_streak),
            already_counted=False,
        )

    streak_broken = last_activity_date is not None
    if streak_broken:
        gap_days = (today - last_activity_date).days
        logger.debug(f"Streak reset: was {current_streak}, gap was {gap_days} days")

    return StreakEvaluation(
        new_streak=1,
        longest_streak=max(1, longest_streak),
        bonus=0,
        already_counted=False,
        streak_broken=streak_broken,
    )
