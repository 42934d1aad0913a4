"""Monitoring infrastructure for the gamification service"""
from src.monitoring.sentry_config import init_sentry, capture_exception, set_user_context
from src.monitoring.prometheus_metrics import (
    track_xp_award,
    track_streak_outcome,
    track_badge_unlock,
    track_ledger_error,
    track_cache_operation,
)

__all__ = [
    "init_sentry",
    "capture_exception",
    "set_user_context",
    "track_xp_award",
    "track_streak_outcome",
    "track_badge_unlock",
    "track_ledger_error",
    "track_cache_operation",
]
