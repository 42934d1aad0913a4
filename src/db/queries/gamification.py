"""Gamification database queries"""
import logging
from datetime import date
from functools import wraps
from typing import Optional

import psycopg

from src.db.connection import db
from src.exceptions import wrap_external_exception

logger = logging.getLogger(__name__)


def _db_operation(func):
    """Wrap psycopg errors raised by a query into DatabaseError subclasses"""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except psycopg.Error as e:
            user_id = kwargs.get("user_id")
            if user_id is None and args and func.__code__.co_varnames[0] == "user_id":
                user_id = args[0]
            raise wrap_external_exception(e, operation=func.__name__, user_id=user_id) from e
    return wrapper


# ==========================================
# XP / Level
# ==========================================

@_db_operation
async def get_user_gamification(user_id: str) -> Optional[dict]:
    """
    Get the user's XP record

    Returns:
        {'user_id': str, 'xp': int, 'level': int} or None if the user
        has never been awarded XP
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT user_id::text AS user_id, xp, level
                FROM user_gamification
                WHERE user_id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


@_db_operation
async def upsert_user_gamification(user_id: str, xp: int, level: int) -> None:
    """Insert or overwrite the user's XP total and level"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_gamification (user_id, xp, level)
                VALUES (%s, %s, %s)
                ON CONFLICT (user_id) DO UPDATE
                SET xp = EXCLUDED.xp,
                    level = EXCLUDED.level,
                    updated_at = now()
                """,
                (user_id, xp, level)
            )
            await conn.commit()


# ==========================================
# Streaks
# ==========================================

@_db_operation
async def get_user_streak(user_id: str) -> Optional[dict]:
    """
    Get the user's streak record

    Returns:
        {'current_streak': int, 'longest_streak': int, 'last_activity_date': date | None}
        or None if no streak has been recorded yet
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT current_streak, longest_streak, last_activity_date
                FROM user_streaks
                WHERE user_id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


@_db_operation
async def upsert_user_streak(
    user_id: str,
    current_streak: int,
    longest_streak: int,
    last_activity_date: date
) -> None:
    """Insert or overwrite the user's streak record"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_streaks (user_id, current_streak, longest_streak, last_activity_date)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (user_id) DO UPDATE
                SET current_streak = EXCLUDED.current_streak,
                    longest_streak = EXCLUDED.longest_streak,
                    last_activity_date = EXCLUDED.last_activity_date,
                    updated_at = now()
                """,
                (user_id, current_streak, longest_streak, last_activity_date)
            )
            await conn.commit()


# ==========================================
# Badges
# ==========================================

@_db_operation
async def get_badge_catalog() -> list[dict]:
    """Get all badge definitions ordered by XP threshold"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id::text AS id, name, description, icon, xp_required
                FROM badges
                ORDER BY xp_required ASC, name
                """
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


@_db_operation
async def get_user_badges(user_id: str) -> list[dict]:
    """
    Get the user's earned badges joined with their definitions

    Rows whose badge was deleted from the catalog are dropped by the join.
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT ub.badge_id::text AS badge_id, ub.earned_at,
                       b.name, b.description, b.icon, b.xp_required
                FROM user_badges ub
                JOIN badges b ON b.id = ub.badge_id
                WHERE ub.user_id = %s
                ORDER BY ub.earned_at
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


@_db_operation
async def insert_user_badge(user_id: str, badge_id: str) -> bool:
    """
    Record a badge for the user

    Returns:
        True if the row was inserted, False if the badge was already earned
        or no longer exists in the catalog
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_badges (user_id, badge_id)
                SELECT %s, b.id FROM badges b WHERE b.id = %s
                ON CONFLICT (user_id, badge_id) DO NOTHING
                RETURNING badge_id
                """,
                (user_id, badge_id)
            )
            result = await cur.fetchone()
            await conn.commit()

            if result:
                logger.info(f"User {user_id} earned badge {badge_id}")
                return True
            return False


# ==========================================
# Leaderboard
# ==========================================

@_db_operation
async def get_leaderboard(limit: int = 50) -> list[dict]:
    """Top users by XP with their display names"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT g.user_id::text AS user_id, g.xp, g.level, p.full_name
                FROM user_gamification g
                LEFT JOIN profiles p ON p.id = g.user_id
                ORDER BY g.xp DESC
                LIMIT %s
                """,
                (limit,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]
