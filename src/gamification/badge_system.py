"""
Badge System

Badges unlock once cumulative XP meets their threshold. Some badges are
also granted directly by name when a learning milestone happens (first
lesson, first passed quiz, completed course).
"""

from typing import Iterable, Optional, Sequence

from src.models.gamification import Badge


def find_badges_to_unlock(
    current_xp: int,
    catalog: Sequence[Badge],
    already_earned: Iterable[str]
) -> list[Badge]:
    """
    Badges newly qualifying at current_xp

    Args:
        current_xp: User's XP total after the latest award
        catalog: Badge definitions, ascending by xp_required
        already_earned: IDs of badges the user already holds

    Returns:
        Qualifying, not yet earned badges in catalog order
    """
    earned = set(already_earned)
    return [
        badge for badge in catalog
        if badge.xp_required <= current_xp and badge.id not in earned
    ]


def find_badge_by_name(catalog: Iterable[Badge], name: str) -> Optional[Badge]:
    """Look up a badge definition by its display name"""
    return next((badge for badge in catalog if badge.name == name), None)
