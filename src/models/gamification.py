"""Gamification models (XP, streaks, badges, leaderboard)"""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Badge(BaseModel):
    """Badge definition from the read-only catalog"""
    id: str
    name: str
    description: Optional[str] = None
    icon: str = "award"
    xp_required: int = Field(default=0, ge=0)


class EarnedBadge(BaseModel):
    """A badge a user has earned"""
    badge_id: str
    earned_at: datetime
    badge: Optional[Badge] = None


class StreakRecord(BaseModel):
    """Daily activity streak for a user"""
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_activity_date: Optional[date] = None


class GamificationSnapshot(BaseModel):
    """Read model shown to the presentation layer"""
    user_id: Optional[str] = None
    xp: int = 0
    level: int = 1
    xp_for_next_level: int = 100
    xp_to_next_level: int = 100
    badges: list[EarnedBadge] = Field(default_factory=list)
    all_badges: list[Badge] = Field(default_factory=list)
    streak: StreakRecord = Field(default_factory=StreakRecord)


class AwardResult(BaseModel):
    """Outcome of a ledger add_points call"""
    success: bool
    total_awarded: int = 0
    streak_bonus: int = 0
    new_total_xp: Optional[int] = None
    new_level: Optional[int] = None
    leveled_up: bool = False
    current_streak: Optional[int] = None
    badges_unlocked: list[Badge] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def empty(cls, error: Optional[str] = None) -> "AwardResult":
        """Zero-valued result for no-ops and failures"""
        return cls(success=False, total_awarded=0, streak_bonus=0, error=error)


class ActivityType(str, Enum):
    """Learning activities that earn XP"""
    LESSON_COMPLETED = "lesson_completed"
    COURSE_COMPLETED = "course_completed"
    QUIZ_SUBMITTED = "quiz_submitted"


class ActivityResult(BaseModel):
    """Outcome of a learning activity hook"""
    activity_type: ActivityType
    award: Optional[AwardResult] = None
    badges_granted: list[str] = Field(default_factory=list)


class LeaderboardEntry(BaseModel):
    """One row of the XP leaderboard"""
    user_id: str
    xp: int
    level: int
    full_name: str
    rank: int


class Leaderboard(BaseModel):
    """Top users by XP"""
    entries: list[LeaderboardEntry] = Field(default_factory=list)
    user_rank: Optional[int] = None
