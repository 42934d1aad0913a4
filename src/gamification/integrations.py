"""
Gamification Integration Hooks

Connect learning activities to the ledger. Call these after the activity
itself has been saved (lesson progress row, course completion, quiz
attempt) to award XP, move the streak and grant milestone badges.

Usage:
    from src.gamification.integrations import handle_lesson_completed

    # After saving lesson progress
    result = await handle_lesson_completed(user_id, first_completion=True)
"""

import logging
from typing import Optional

from src.exceptions import ValidationError
from src.gamification.ledger import GamificationLedger, ledger as default_ledger
from src.models.gamification import ActivityResult, ActivityType

logger = logging.getLogger(__name__)

LESSON_COMPLETED_XP = 15
COURSE_COMPLETED_XP = 50

FIRST_LESSON_BADGE = "Busy Bee"
QUIZ_PASSED_BADGE = "Quiz Whiz"
COURSE_COMPLETED_BADGE = "Honey Hunter"


def quiz_xp_for_score(score: int) -> int:
    """XP for a quiz attempt: half the score, rounded half up"""
    if score < 0:
        raise ValidationError("Quiz score must not be negative", field="score", value=score)
    return (score + 1) // 2


async def handle_lesson_completed(
    user_id: Optional[str],
    first_completion: bool = True,
    ledger: Optional[GamificationLedger] = None
) -> ActivityResult:
    """
    Handle gamification for a completed lesson

    XP is only awarded the first time a lesson is completed; re-opening a
    finished lesson earns nothing.

    Args:
        user_id: Student's user ID
        first_completion: False if XP was already awarded for this lesson
        ledger: Ledger to use (defaults to the global one)
    """
    ledger = ledger or default_ledger
    result = ActivityResult(activity_type=ActivityType.LESSON_COMPLETED)

    if not first_completion:
        logger.debug(f"Lesson already rewarded for user {user_id}, skipping XP")
        return result

    result.award = await ledger.add_points(user_id, LESSON_COMPLETED_XP, reason="Lesson completed")
    if await ledger.award_badge_by_name(user_id, FIRST_LESSON_BADGE):
        result.badges_granted.append(FIRST_LESSON_BADGE)

    return result


async def handle_course_completed(
    user_id: Optional[str],
    ledger: Optional[GamificationLedger] = None
) -> ActivityResult:
    """Handle gamification for completing every lesson of a course"""
    ledger = ledger or default_ledger
    result = ActivityResult(activity_type=ActivityType.COURSE_COMPLETED)

    result.award = await ledger.add_points(user_id, COURSE_COMPLETED_XP, reason="Course completed")
    if await ledger.award_badge_by_name(user_id, COURSE_COMPLETED_BADGE):
        result.badges_granted.append(COURSE_COMPLETED_BADGE)

    logger.info(f"Course completion processed for user {user_id}: {result.award.total_awarded} XP")
    return result


async def handle_quiz_submitted(
    user_id: Optional[str],
    score: int,
    passed: bool,
    ledger: Optional[GamificationLedger] = None
) -> ActivityResult:
    """
    Handle gamification for a graded quiz attempt

    Args:
        user_id: Student's user ID
        score: Points scored on the attempt
        passed: Whether the attempt reached the pass mark
        ledger: Ledger to use (defaults to the global one)
    """
    ledger = ledger or default_ledger
    result = ActivityResult(activity_type=ActivityType.QUIZ_SUBMITTED)

    xp = quiz_xp_for_score(score)
    if xp > 0:
        result.award = await ledger.add_points(user_id, xp, reason="Quiz submitted")

    if passed and await ledger.award_badge_by_name(user_id, QUIZ_PASSED_BADGE):
        result.badges_granted.append(QUIZ_PASSED_BADGE)

    return result
