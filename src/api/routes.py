"""API routes for the gamification service"""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.api.auth import verify_api_key
from src.api.middleware import limiter
from src.api.models import (
    ActivityRequest,
    AddXPRequest,
    AwardBadgeRequest,
    AwardBadgeResponse,
    HealthCheckResponse,
)
from src.db import queries
from src.db.connection import db
from src.gamification.integrations import (
    handle_course_completed,
    handle_lesson_completed,
    handle_quiz_submitted,
)
from src.gamification.leaderboard import DEFAULT_LEADERBOARD_SIZE, get_leaderboard
from src.gamification.ledger import ledger
from src.models.gamification import (
    ActivityResult,
    ActivityType,
    AwardResult,
    Badge,
    GamificationSnapshot,
    Leaderboard,
)
from src.monitoring import set_user_context
from src.utils.cache import clear_expired_entries, get_cache_stats

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/v1/badges", response_model=list[Badge])
@limiter.limit("60/minute")
async def list_badges(request: Request, api_key: str = Depends(verify_api_key)):
    """Badge catalog ordered by XP threshold (Rate limit: 60/minute)"""
    rows = await queries.get_badge_catalog()
    return [Badge(**row) for row in rows]


@router.get("/api/v1/users/{user_id}/gamification", response_model=GamificationSnapshot)
@limiter.limit("60/minute")
async def get_gamification(
    request: Request,
    user_id: str,
    refresh: bool = False,
    api_key: str = Depends(verify_api_key)
):
    """XP, level, badges and streak for a user (Rate limit: 60/minute)"""
    snapshot = await ledger.get_snapshot(user_id, refresh=refresh)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Gamification data is temporarily unavailable"
        )
    return snapshot


@router.post("/api/v1/users/{user_id}/xp", response_model=AwardResult)
@limiter.limit("30/minute")
async def add_xp(
    request: Request,
    user_id: str,
    payload: AddXPRequest,
    api_key: str = Depends(verify_api_key)
):
    """
    Award XP to a user (Rate limit: 30/minute)

    A failed award is reported in the body (success=false, zero totals),
    not as an HTTP error.
    """
    set_user_context(user_id)
    return await ledger.add_points(user_id, payload.amount, reason=payload.reason)


@router.post("/api/v1/users/{user_id}/badges", response_model=AwardBadgeResponse)
@limiter.limit("30/minute")
async def award_badge(
    request: Request,
    user_id: str,
    payload: AwardBadgeRequest,
    api_key: str = Depends(verify_api_key)
):
    """Grant a badge by name, ignoring its XP threshold (Rate limit: 30/minute)"""
    set_user_context(user_id)
    awarded = await ledger.award_badge_by_name(user_id, payload.name)
    return AwardBadgeResponse(awarded=awarded)


@router.post("/api/v1/users/{user_id}/activities", response_model=ActivityResult)
@limiter.limit("30/minute")
async def record_activity(
    request: Request,
    user_id: str,
    payload: ActivityRequest,
    api_key: str = Depends(verify_api_key)
):
    """Apply the XP and badge rules for a learning activity (Rate limit: 30/minute)"""
    set_user_context(user_id)

    if payload.activity_type == ActivityType.LESSON_COMPLETED:
        return await handle_lesson_completed(user_id, first_completion=payload.first_completion)

    if payload.activity_type == ActivityType.COURSE_COMPLETED:
        return await handle_course_completed(user_id)

    if payload.score is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="score is required for quiz_submitted"
        )
    return await handle_quiz_submitted(user_id, payload.score, payload.passed)


@router.get("/api/v1/leaderboard", response_model=Leaderboard)
@limiter.limit("30/minute")
async def leaderboard(
    request: Request,
    limit: int = Query(default=DEFAULT_LEADERBOARD_SIZE, ge=1, le=100),
    user_id: Optional[str] = None,
    api_key: str = Depends(verify_api_key)
):
    """Top users by XP (Rate limit: 30/minute)"""
    return await get_leaderboard(limit=limit, user_id=user_id)


@router.get("/api/health", response_model=HealthCheckResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint (Rate limit: 60/minute for monitoring systems)"""
    try:
        async with db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()

        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    clear_expired_entries()

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
        timestamp=datetime.now(timezone.utc),
        cache=get_cache_stats()
    )


@router.get("/metrics")
async def metrics():
    """Prometheus exposition endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
