"""Achievement awarding and lookup."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import uuid
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db_errors import is_unique_violation_error
from ..models import Match, MatchPlayer, PlayerAchievement, SeasonPlayer
from ..scoring.achievements import (
    ACHIEVEMENTS_BY_TYPE,
    AchievementDefinition,
    detect_achievements,
)

logger = logging.getLogger(__name__)

ACHIEVEMENT_CONSTRAINT = "uq_player_achievement_player_id_type"


@dataclass
class PlayerHistory:
    player_id: str
    results: list[str]
    goals_scored: list[int]
    goals_conceded: list[int]


async def collect_history(
    session: AsyncSession, season_id: str, player_id: str
) -> PlayerHistory:
    """Load one player's season results oldest first, with goals per match."""
    rows = (
        await session.execute(
            select(MatchPlayer.result, MatchPlayer.home_team, Match.home_score, Match.away_score)
            .join(Match, Match.id == MatchPlayer.match_id)
            .join(SeasonPlayer, SeasonPlayer.id == MatchPlayer.season_player_id)
            .where(
                SeasonPlayer.season_id == season_id,
                SeasonPlayer.player_id == player_id,
            )
            .order_by(Match.created_at, Match.sequence)
        )
    ).all()

    history = PlayerHistory(player_id=player_id, results=[], goals_scored=[], goals_conceded=[])
    for result, home_team, home_score, away_score in rows:
        scored, conceded = (home_score, away_score) if home_team else (away_score, home_score)
        history.results.append(result)
        history.goals_scored.append(scored)
        history.goals_conceded.append(conceded)
    return history


async def _existing_types(session: AsyncSession, player_id: str) -> set[str]:
    return set(
        (
            await session.execute(
                select(PlayerAchievement.type).where(PlayerAchievement.player_id == player_id)
            )
        ).scalars()
    )


async def grant_achievements(
    session: AsyncSession,
    player_id: str,
    types: Iterable[str],
    *,
    season_id: str | None = None,
) -> list[str]:
    """Insert the types the player does not own yet and commit.

    Returns the newly granted types. A concurrent writer that granted the same
    (player, type) first leaves the existing row in place.
    """
    wanted = set(types)
    try:
        missing = await _insert_missing(session, player_id, wanted, season_id)
    except IntegrityError as exc:
        await session.rollback()
        if not _is_duplicate_achievement(exc):
            raise
        logger.info("Achievements for player %s granted concurrently; retrying", player_id)
        missing = await _insert_missing(session, player_id, wanted, season_id)

    if missing:
        logger.info("Granted achievements %s to player %s", ", ".join(missing), player_id)
    return missing


async def _insert_missing(
    session: AsyncSession, player_id: str, wanted: set[str], season_id: str | None
) -> list[str]:
    missing = sorted(wanted - await _existing_types(session, player_id))
    if not missing:
        return []
    for type_ in missing:
        session.add(
            PlayerAchievement(
                id=uuid.uuid4().hex,
                player_id=player_id,
                type=type_,
                season_id=season_id,
            )
        )
    await session.commit()
    return missing


def _is_duplicate_achievement(exc: IntegrityError) -> bool:
    # PostgreSQL names the constraint, SQLite names the columns.
    return is_unique_violation_error(exc, ACHIEVEMENT_CONSTRAINT) or is_unique_violation_error(
        exc, "player_achievement.player_id"
    )


async def award_achievements_for_player(
    session: AsyncSession, season_id: str, player_id: str
) -> list[str]:
    history = await collect_history(session, season_id, player_id)
    detected = detect_achievements(
        history.results,
        goals_conceded=history.goals_conceded,
        goals_scored=history.goals_scored,
    )
    return await grant_achievements(session, player_id, detected, season_id=season_id)


async def award_achievements_for_players(
    session: AsyncSession, season_id: str, player_ids: Iterable[str]
) -> dict[str, list[str]]:
    awarded: dict[str, list[str]] = {}
    for pid in player_ids:
        new_types = await award_achievements_for_player(session, season_id, pid)
        if new_types:
            awarded[pid] = new_types
    return awarded


async def load_player_achievements(
    session: AsyncSession, player_id: str
) -> list[tuple[PlayerAchievement, AchievementDefinition | None]]:
    rows = (
        await session.execute(
            select(PlayerAchievement)
            .where(PlayerAchievement.player_id == player_id)
            .order_by(PlayerAchievement.created_at.desc(), PlayerAchievement.type)
        )
    ).scalars().all()
    return [(row, ACHIEVEMENTS_BY_TYPE.get(row.type)) for row in rows]
