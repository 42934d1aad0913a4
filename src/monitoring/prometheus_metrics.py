"""
Prometheus metrics definitions for the gamification service.

Metrics are exposed at the /metrics endpoint for Prometheus scraping.
"""

import logging
from prometheus_client import Counter

logger = logging.getLogger(__name__)

# =============================================================================
# Gamification Metrics
# =============================================================================

xp_awarded_total = Counter(
    "beelearn_xp_awarded_total",
    "Total XP awarded to users",
    ["source"],  # source: base/streak_bonus
)

streak_updates_total = Counter(
    "beelearn_streak_updates_total",
    "Streak evaluations by outcome",
    ["outcome"],  # outcome: started/continued/reset/same_day
)

badges_unlocked_total = Counter(
    "beelearn_badges_unlocked_total",
    "Badges awarded to users",
    ["trigger"],  # trigger: threshold/direct
)

ledger_errors_total = Counter(
    "beelearn_ledger_errors_total",
    "Ledger operations aborted by a store failure",
    ["operation"],
)

# =============================================================================
# Cache Metrics
# =============================================================================

cache_operations_total = Counter(
    "beelearn_cache_operations_total",
    "Read-model cache lookups",
    ["result"],  # result: hit/miss
)


def track_xp_award(base: int, streak_bonus: int) -> None:
    """Record XP granted by one ledger award"""
    if base:
        xp_awarded_total.labels(source="base").inc(base)
    if streak_bonus:
        xp_awarded_total.labels(source="streak_bonus").inc(streak_bonus)


def track_streak_outcome(outcome: str) -> None:
    streak_updates_total.labels(outcome=outcome).inc()


def track_badge_unlock(trigger: str, count: int = 1) -> None:
    if count:
        badges_unlocked_total.labels(trigger=trigger).inc(count)


def track_ledger_error(operation: str) -> None:
    ledger_errors_total.labels(operation=operation).inc()


def track_cache_operation(result: str) -> None:
    cache_operations_total.labels(result=result).inc()
