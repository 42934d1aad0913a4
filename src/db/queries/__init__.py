"""
Database queries - re-exported so callers can use 'from src.db import queries'.

Module organization:
- gamification.py: XP totals, streaks, badge catalog and unlocks, leaderboard
"""

from src.db.queries.gamification import (
    get_user_gamification,
    upsert_user_gamification,
    get_user_streak,
    upsert_user_streak,
    get_badge_catalog,
    get_user_badges,
    insert_user_badge,
    get_leaderboard,
)

__all__ = [
    "get_user_gamification",
    "upsert_user_gamification",
    "get_user_streak",
    "upsert_user_streak",
    "get_badge_catalog",
    "get_user_badges",
    "insert_user_badge",
    "get_leaderboard",
]
