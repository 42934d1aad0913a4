"""Pydantic models for API request/response validation"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from src.models.gamification import ActivityType


class AddXPRequest(BaseModel):
    """Request to award XP"""
    amount: int = Field(..., ge=0, description="Base XP to award, before the streak bonus")
    reason: Optional[str] = Field(default=None, description="Why the XP is awarded")


class AwardBadgeRequest(BaseModel):
    """Request to grant a badge by name"""
    name: str = Field(..., min_length=1, description="Badge name from the catalog")


class AwardBadgeResponse(BaseModel):
    """Whether a badge was newly granted"""
    awarded: bool


class ActivityRequest(BaseModel):
    """A learning activity that may earn XP"""
    activity_type: ActivityType
    score: Optional[int] = Field(default=None, ge=0, description="Quiz score (quiz_submitted only)")
    passed: bool = Field(default=False, description="Quiz passed (quiz_submitted only)")
    first_completion: bool = Field(
        default=True,
        description="False if XP was already awarded for this lesson (lesson_completed only)"
    )


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: datetime
    database: str
    cache: dict = Field(default_factory=dict)
