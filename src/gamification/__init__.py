"""
Gamification system for BeeLearn

- XP and leveling (100 XP per level)
- Daily activity streaks with bonus XP
- Badges unlocked by XP thresholds or learning milestones
- Leaderboard

All writes go through the GamificationLedger.
"""

from src.gamification.level_system import calculate_level, calculate_level_progress, xp_for_next_level
from src.gamification.streak_system import StreakEvaluation, evaluate_streak
from src.gamification.badge_system import find_badge_by_name, find_badges_to_unlock
from src.gamification.ledger import GamificationLedger
from src.gamification.leaderboard import get_leaderboard

__all__ = [
    "calculate_level",
    "calculate_level_progress",
    "xp_for_next_level",
    "StreakEvaluation",
    "evaluate_streak",
    "find_badge_by_name",
    "find_badges_to_unlock",
    "GamificationLedger",
    "get_leaderboard",
]
