"""
Caching utilities for gamification read models

TTL-based in-memory cache with user-scoped keys. The database stays the
source of truth: entries are only ever copies of what was last read, and
every write path invalidates the affected user's entries.

Key format: "<prefix>:<user_id>" or "<prefix>:<func>:<args>"
"""
import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple

from src.config import GAMIFICATION_CACHE_TTL
from src.monitoring.prometheus_metrics import track_cache_operation

logger = logging.getLogger(__name__)

# Cache storage: {cache_key: (value, expiry_timestamp)}
_cache: Dict[str, Tuple[Any, float]] = {}

_cache_stats = {
    "hits": 0,
    "misses": 0,
    "invalidations": 0,
    "total_queries": 0
}

# Stores since the last expired-entry sweep
_stores_since_sweep = 0


class CacheConfig:
    """Cache configuration constants"""
    DEFAULT_TTL = 300
    SNAPSHOT_TTL = GAMIFICATION_CACHE_TTL
    LEADERBOARD_TTL = 60

    # Expired entries are swept once every this many stores
    SWEEP_INTERVAL = 100

    # Enable/disable caching globally (useful for testing)
    ENABLED = True


def user_key(prefix: str, user_id: str) -> str:
    """Cache key for a user-scoped entry"""
    return f"{prefix}:{user_id}"


def get_cached(cache_key: str) -> Optional[Any]:
    """Return the cached value for cache_key, or None on miss/expiry"""
    _cache_stats["total_queries"] += 1

    if not CacheConfig.ENABLED:
        return None

    entry = _cache.get(cache_key)
    if entry is not None:
        value, expiry = entry
        if time.time() < expiry:
            _cache_stats["hits"] += 1
            track_cache_operation("hit")
            logger.debug(f"Cache HIT: {cache_key}")
            return value
        del _cache[cache_key]
        logger.debug(f"Cache EXPIRED: {cache_key}")

    _cache_stats["misses"] += 1
    track_cache_operation("miss")
    logger.debug(f"Cache MISS: {cache_key}")
    return None


def set_cached(cache_key: str, value: Any, ttl: int = CacheConfig.DEFAULT_TTL) -> None:
    """Store value under cache_key for ttl seconds"""
    global _stores_since_sweep

    if not CacheConfig.ENABLED or ttl <= 0:
        return
    _cache[cache_key] = (value, time.time() + ttl)
    logger.debug(f"Cache STORED: {cache_key} (TTL: {ttl}s)")

    _stores_since_sweep += 1
    if _stores_since_sweep >= CacheConfig.SWEEP_INTERVAL:
        _stores_since_sweep = 0
        clear_expired_entries()


def cache_with_ttl(ttl: int = CacheConfig.DEFAULT_TTL, key_prefix: str = ""):
    """
    Decorator to cache async function results with a TTL.

    Usage:
        @cache_with_ttl(ttl=60, key_prefix="leaderboard")
        async def load_top_users(limit: int) -> list:
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            args_key = "_".join(str(arg) for arg in args)
            kwargs_key = "_".join(f"{k}={v}" for k, v in sorted(kwargs.items()))
            cache_key = f"{key_prefix}:{func.__name__}:{args_key}:{kwargs_key}"

            cached = get_cached(cache_key)
            if cached is not None:
                return cached

            result = await func(*args, **kwargs)
            set_cached(cache_key, result, ttl)
            return result

        return wrapper
    return decorator


def invalidate_cache(pattern: Optional[str] = None, user_id: Optional[str] = None) -> int:
    """
    Invalidate cache entries by key prefix and/or user_id.

    Args:
        pattern: Key prefix to match (e.g. "leaderboard")
        user_id: Invalidate entries whose key contains this user ID segment

    Returns:
        Number of cache entries invalidated
    """
    if not pattern and not user_id:
        count = len(_cache)
        _cache.clear()
        _cache_stats["invalidations"] += count
        logger.info(f"Cleared entire cache ({count} entries)")
        return count

    keys_to_delete = []
    for key in _cache:
        segments = key.split(":")
        if pattern and segments[0] != pattern:
            continue
        if user_id and user_id not in segments:
            continue
        keys_to_delete.append(key)

    for key in keys_to_delete:
        del _cache[key]

    count = len(keys_to_delete)
    _cache_stats["invalidations"] += count

    if count > 0:
        logger.debug(f"Invalidated {count} cache entries (pattern='{pattern}', user_id='{user_id}')")

    return count


def invalidate_user_cache(user_id: str) -> int:
    """
    Invalidate all cache entries for a specific user.

    Called after every XP award, streak update and badge unlock.
    """
    return invalidate_cache(user_id=user_id)


def get_cache_stats() -> dict:
    """
    Get cache performance statistics.

    Returns:
        dict with hits, misses, hit_rate_percent, invalidations, total_queries, cache_size
    """
    hits = _cache_stats["hits"]
    total = _cache_stats["total_queries"]
    hit_rate = (hits / total * 100) if total > 0 else 0

    return {
        "hits": hits,
        "misses": _cache_stats["misses"],
        "hit_rate_percent": round(hit_rate, 2),
        "invalidations": _cache_stats["invalidations"],
        "total_queries": total,
        "cache_size": len(_cache),
    }


def reset_cache_stats() -> None:
    """Reset cache statistics and the sweep counter (useful for testing)"""
    global _stores_since_sweep

    for key in _cache_stats:
        _cache_stats[key] = 0
    _stores_since_sweep = 0


def clear_expired_entries() -> int:
    """
    Drop every expired entry.

    Reads only evict the key they look up, so entries for users who never
    come back are removed here. set_cached runs this every
    CacheConfig.SWEEP_INTERVAL stores; the health route runs it too.

    Returns:
        Number of expired entries removed
    """
    current_time = time.time()
    expired_keys = [
        key for key, (_, expiry) in _cache.items()
        if current_time >= expiry
    ]

    for key in expired_keys:
        del _cache[key]

    if expired_keys:
        logger.info(f"Cleared {len(expired_keys)} expired cache entries")

    return len(expired_keys)
