"""
Gamification Ledger

Single writer of a user's XP total, level and streak, and the only place
badges get inserted. Every award runs the same sequence against the
database:

1. Evaluate the daily streak (bonus XP for consecutive days)
2. Add base + bonus XP and recompute the level
3. Persist the XP record
4. Insert any badges whose XP threshold is now met
5. Persist the streak (skipped for a second activity on the same day)

The steps are not one transaction. If a later step fails the earlier
writes stay, and the caller sees a failed, zero-valued result. XP and
badges are allowed to drift apart until the next award catches up.

Snapshots handed to the presentation layer are read through a TTL cache
that is invalidated after every mutation; mutations themselves always read
fresh rows.
"""

import asyncio
import logging
import weakref
from datetime import date
from typing import Callable, Optional

from src.db import queries
from src.exceptions import BeeLearnError, ValidationError
from src.gamification.badge_system import find_badge_by_name, find_badges_to_unlock
from src.gamification.level_system import calculate_level, xp_for_next_level
from src.gamification.streak_system import StreakEvaluation, evaluate_streak
from src.models.gamification import (
    AwardResult,
    Badge,
    EarnedBadge,
    GamificationSnapshot,
    StreakRecord,
)
from src.monitoring import (
    capture_exception,
    track_badge_unlock,
    track_ledger_error,
    track_streak_outcome,
    track_xp_award,
)
from src.utils.cache import (
    CacheConfig,
    get_cached,
    invalidate_cache,
    invalidate_user_cache,
    set_cached,
    user_key,
)
from src.utils.datetime_helpers import today_in_timezone

logger = logging.getLogger(__name__)

SNAPSHOT_CACHE_PREFIX = "gamification"


def _streak_outcome(evaluation: StreakEvaluation) -> str:
    if evaluation.already_counted:
        return "same_day"
    if evaluation.streak_broken:
        return "reset"
    if evaluation.new_streak == 1:
        return "started"
    return "continued"


class GamificationLedger:
    """
    Orchestrates XP, level, streak and badge bookkeeping per user.

    Mutations for the same user are serialized through a per-user lock, so
    two awards issued concurrently in this process never read the same
    starting total. Separate processes can still race (last write wins).
    """

    def __init__(self, today_provider: Callable[[], date] = today_in_timezone):
        """
        Args:
            today_provider: Returns the current calendar date for streaks
        """
        self._today = today_provider
        self._user_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock

    # ==========================================
    # Mutations
    # ==========================================

    async def add_points(
        self,
        user_id: Optional[str],
        amount: int,
        reason: Optional[str] = None,
        activity_date: Optional[date] = None
    ) -> AwardResult:
        """
        Award XP to a user, applying the daily streak bonus

        Args:
            user_id: User to award (None/empty when nobody is signed in)
            amount: Base XP, non-negative
            reason: Human-readable description for logs
            activity_date: Calendar day of the activity (defaults to today)

        Returns:
            AwardResult; on a store failure success=False with zero totals
        """
        if not user_id:
            logger.debug("add_points called without a user, ignoring")
            return AwardResult.empty()

        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValidationError(
                "XP amount must be a non-negative integer",
                field="amount",
                value=amount,
                user_id=user_id,
                operation="add_points",
            )

        today = activity_date or self._today()

        async with self._lock_for(user_id):
            try:
                return await self._apply_award(user_id, amount, reason, today)
            except BeeLearnError as e:
                logger.warning(f"Award of {amount} XP to user {user_id} aborted: {e.message}")
                track_ledger_error("add_points")
                capture_exception(e, operation="add_points", user_id=user_id)
                return AwardResult.empty(error=e.user_message)
            finally:
                invalidate_user_cache(user_id)
                invalidate_cache(pattern="leaderboard")

    async def _apply_award(
        self,
        user_id: str,
        amount: int,
        reason: Optional[str],
        today: date
    ) -> AwardResult:
        streak_row = await queries.get_user_streak(user_id) or {}
        evaluation = evaluate_streak(
            last_activity_date=streak_row.get("last_activity_date"),
            today=today,
            current_streak=streak_row.get("current_streak", 0),
            longest_streak=streak_row.get("longest_streak", 0),
        )

        xp_row = await queries.get_user_gamification(user_id)
        old_xp = xp_row["xp"] if xp_row else 0
        old_level = calculate_level(old_xp)

        total_awarded = amount + evaluation.bonus
        new_xp = old_xp + total_awarded
        new_level = calculate_level(new_xp)

        await queries.upsert_user_gamification(user_id, new_xp, new_level)

        unlocked = await self._unlock_threshold_badges(user_id, new_xp)

        if not evaluation.already_counted:
            await queries.upsert_user_streak(
                user_id,
                evaluation.new_streak,
                evaluation.longest_streak,
                today,
            )

        track_xp_award(amount, evaluation.bonus)
        track_streak_outcome(_streak_outcome(evaluation))
        track_badge_unlock("threshold", len(unlocked))

        logger.info(
            f"Awarded {total_awarded} XP to user {user_id} "
            f"({amount} base + {evaluation.bonus} streak bonus) for {reason or 'activity'}. "
            f"Total: {new_xp} XP, Level: {new_level}, Streak: {evaluation.new_streak}"
        )
        if new_level > old_level:
            logger.info(f"User {user_id} leveled up from {old_level} to {new_level}")

        return AwardResult(
            success=True,
            total_awarded=total_awarded,
            streak_bonus=evaluation.bonus,
            new_total_xp=new_xp,
            new_level=new_level,
            leveled_up=new_level > old_level,
            current_streak=evaluation.new_streak,
            badges_unlocked=unlocked,
        )

    async def _unlock_threshold_badges(self, user_id: str, current_xp: int) -> list[Badge]:
        catalog = [Badge(**row) for row in await queries.get_badge_catalog()]
        earned_ids = {row["badge_id"] for row in await queries.get_user_badges(user_id)}

        unlocked = []
        for badge in find_badges_to_unlock(current_xp, catalog, earned_ids):
            if await queries.insert_user_badge(user_id, badge.id):
                unlocked.append(badge)
                logger.info(f"User {user_id} unlocked badge '{badge.name}' at {current_xp} XP")
            else:
                # Earned meanwhile or removed from the catalog
                logger.debug(f"Skipped badge {badge.id} for user {user_id}")
        return unlocked

    async def award_badge_by_name(self, user_id: Optional[str], name: str) -> bool:
        """
        Grant a badge directly, bypassing its XP threshold

        No-op when nobody is signed in, the name is unknown or the badge is
        already earned.

        Returns:
            True if the badge was newly granted
        """
        if not user_id:
            return False

        async with self._lock_for(user_id):
            try:
                catalog = [Badge(**row) for row in await queries.get_badge_catalog()]
                badge = find_badge_by_name(catalog, name)
                if badge is None:
                    logger.warning(f"Unknown badge '{name}' requested for user {user_id}")
                    return False

                earned_ids = {row["badge_id"] for row in await queries.get_user_badges(user_id)}
                if badge.id in earned_ids:
                    return False

                granted = await queries.insert_user_badge(user_id, badge.id)
                if granted:
                    track_badge_unlock("direct")
                    logger.info(f"User {user_id} was granted badge '{name}'")
                return granted
            except BeeLearnError as e:
                logger.warning(f"Granting badge '{name}' to user {user_id} failed: {e.message}")
                track_ledger_error("award_badge_by_name")
                capture_exception(e, operation="award_badge_by_name", user_id=user_id)
                return False
            finally:
                invalidate_user_cache(user_id)

    # ==========================================
    # Read model
    # ==========================================

    async def get_snapshot(
        self,
        user_id: Optional[str],
        refresh: bool = False
    ) -> Optional[GamificationSnapshot]:
        """
        Current XP, level, badges and streak for the user

        Args:
            user_id: User to read (None/empty returns the default snapshot)
            refresh: Bypass the cache and re-read from the database

        Returns:
            A private copy of the snapshot, or None if the database could
            not be read
        """
        if not user_id:
            return GamificationSnapshot()

        cache_key = user_key(SNAPSHOT_CACHE_PREFIX, user_id)
        if not refresh:
            cached = get_cached(cache_key)
            if cached is not None:
                return cached.model_copy(deep=True)

        # Loading under the user's lock keeps an award from invalidating
        # the entry before this read stores it
        async with self._lock_for(user_id):
            if not refresh:
                cached = get_cached(cache_key)
                if cached is not None:
                    return cached.model_copy(deep=True)

            try:
                snapshot = await self._load_snapshot(user_id)
            except BeeLearnError as e:
                logger.warning(f"Loading gamification snapshot for user {user_id} failed: {e.message}")
                track_ledger_error("get_snapshot")
                return None

            set_cached(cache_key, snapshot, CacheConfig.SNAPSHOT_TTL)
            return snapshot.model_copy(deep=True)

    async def refresh(self, user_id: Optional[str]) -> Optional[GamificationSnapshot]:
        """Force a re-read of the user's snapshot"""
        return await self.get_snapshot(user_id, refresh=True)

    async def _load_snapshot(self, user_id: str) -> GamificationSnapshot:
        xp_row = await queries.get_user_gamification(user_id)
        catalog = [Badge(**row) for row in await queries.get_badge_catalog()]
        earned_rows = await queries.get_user_badges(user_id)
        streak_row = await queries.get_user_streak(user_id)

        xp = xp_row["xp"] if xp_row else 0
        level = (xp_row or {}).get("level") or calculate_level(xp)
        next_threshold = xp_for_next_level(level)

        badges = [
            EarnedBadge(
                badge_id=row["badge_id"],
                earned_at=row["earned_at"],
                badge=Badge(
                    id=row["badge_id"],
                    name=row["name"],
                    description=row.get("description"),
                    icon=row.get("icon") or "award",
                    xp_required=row.get("xp_required") or 0,
                ),
            )
            for row in earned_rows
        ]

        return GamificationSnapshot(
            user_id=user_id,
            xp=xp,
            level=level,
            xp_for_next_level=next_threshold,
            xp_to_next_level=max(next_threshold - xp, 0),
            badges=badges,
            all_badges=catalog,
            streak=StreakRecord(**streak_row) if streak_row else StreakRecord(),
        )


# Global ledger instance
ledger = GamificationLedger()
