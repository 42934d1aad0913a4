"""
XP and Leveling System

Leveling Curve:
- Every 100 XP raises the level by one
- Level 1 is the floor (0-99 XP)

XP Award Rules (see src/gamification/integrations.py):
- Lesson completed: 15 XP
- Course completed: 50 XP
- Quiz submitted: half the quiz score
- Daily streak bonus: 5 XP per streak day, capped at 25
"""

from typing import Dict

XP_PER_LEVEL = 100


def calculate_level(total_xp: int) -> int:
    """Level reached with total_xp accumulated points"""
    return total_xp // XP_PER_LEVEL + 1


def xp_for_next_level(current_level: int) -> int:
    """Cumulative XP at which the level after current_level starts"""
    return current_level * XP_PER_LEVEL


def calculate_level_progress(total_xp: int) -> Dict[str, int]:
    """
    Calculate level and progress toward the next one

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_to_next_level': int,
            'total_xp_for_next_level': int
        }
    """
    level = calculate_level(total_xp)
    next_threshold = xp_for_next_level(level)

    return {
        "current_level": level,
        "xp_in_current_level": total_xp - (level - 1) * XP_PER_LEVEL,
        "xp_to_next_level": next_threshold - total_xp,
        "total_xp_for_next_level": next_threshold,
    }
