"""XP leaderboard"""
import logging
from typing import Optional

from src.db import queries
from src.models.gamification import Leaderboard, LeaderboardEntry
from src.utils.cache import CacheConfig, cache_with_ttl

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 50
ANONYMOUS_NAME = "Anonymous Bee"


@cache_with_ttl(ttl=CacheConfig.LEADERBOARD_TTL, key_prefix="leaderboard")
async def _load_ranked_entries(limit: int) -> list[LeaderboardEntry]:
    rows = await queries.get_leaderboard(limit)
    return [
        LeaderboardEntry(
            user_id=row["user_id"],
            xp=row["xp"],
            level=row["level"],
            full_name=row.get("full_name") or ANONYMOUS_NAME,
            rank=index,
        )
        for index, row in enumerate(rows, start=1)
    ]


async def get_leaderboard(
    limit: int = DEFAULT_LEADERBOARD_SIZE,
    user_id: Optional[str] = None
) -> Leaderboard:
    """
    Top users ranked by XP

    Args:
        limit: Number of entries to return
        user_id: Requesting user; their rank is filled in if they are listed

    Returns:
        Leaderboard with 1-based ranks
    """
    entries = await _load_ranked_entries(limit)

    user_rank = None
    if user_id:
        user_rank = next((entry.rank for entry in entries if entry.user_id == user_id), None)

    return Leaderboard(entries=entries, user_rank=user_rank)
