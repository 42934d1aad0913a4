"""
Date/time helpers for streak accounting

Streaks are counted in calendar days of GAMIFICATION_TIMEZONE (UTC unless
configured), so every "what day is it" question goes through here.
"""

from datetime import datetime, date, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from src.config import GAMIFICATION_TIMEZONE


def now_utc() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def today_in_timezone(tz_name: Optional[str] = None) -> date:
    """
    Current calendar date in tz_name

    Args:
        tz_name: IANA timezone name, defaults to GAMIFICATION_TIMEZONE

    Returns:
        Today's date in that timezone
    """
    return now_utc().astimezone(ZoneInfo(tz_name or GAMIFICATION_TIMEZONE)).date()
