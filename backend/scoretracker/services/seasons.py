"""Season lifecycle: creation, enrollment, fixtures and closing."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..config import DEFAULT_INITIAL_SCORE, DEFAULT_K_FACTOR
from ..exceptions import PlayerNotFound, SeasonClosed, SeasonNotFound
from ..models import Fixture, Player, Season, SeasonPlayer
from ..scoring.achievements import SEASON_WINNER
from ..scoring.fixtures import generate_round_robin
from ..scoring.rating import SCORE_TYPE_POINTS, get_strategy
from .achievements import grant_achievements
from .locks import season_locks
from .standings import season_standings

logger = logging.getLogger(__name__)

POINTS_INITIAL_SCORE = 0
POINTS_K_FACTOR = -1


async def create_season(
    session: AsyncSession,
    name: str,
    score_type: str,
    *,
    initial_score: float | None = None,
    k_factor: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    rounds: int | None = None,
) -> Season:
    """Create a season and enroll every active player at the initial score.

    Points-table seasons always start at 0 and ignore the k-factor. When such
    a season has ``rounds`` a round-robin schedule is generated for it.
    """
    get_strategy(score_type, k_factor or DEFAULT_K_FACTOR)
    if score_type == SCORE_TYPE_POINTS:
        initial_score = POINTS_INITIAL_SCORE
        k_factor = POINTS_K_FACTOR
    else:
        rounds = None
    season = Season(
        id=uuid.uuid4().hex,
        name=name,
        score_type=score_type,
        initial_score=DEFAULT_INITIAL_SCORE if initial_score is None else initial_score,
        k_factor=DEFAULT_K_FACTOR if k_factor is None else k_factor,
        start_date=start_date,
        end_date=end_date,
        rounds=rounds,
        closed=False,
    )
    session.add(season)
    await session.flush()

    players = (
        await session.execute(
            select(Player).where(Player.disabled.is_(False)).order_by(Player.created_at, Player.id)
        )
    ).scalars().all()
    season_players = [
        SeasonPlayer(
            id=uuid.uuid4().hex,
            season_id=season.id,
            player_id=p.id,
            score=season.initial_score,
        )
        for p in players
    ]
    session.add_all(season_players)
    await session.flush()

    if rounds:
        session.add_all(_fixtures_for(season, season_players))

    await session.commit()
    logger.info(
        "Created season %s (%s) with %d players", season.id, score_type, len(season_players)
    )
    return season


def _fixtures_for(season: Season, season_players: list[SeasonPlayer]) -> list[Fixture]:
    return [
        Fixture(
            id=uuid.uuid4().hex,
            season_id=season.id,
            round=pairing.round,
            home_player_id=pairing.home_id,
            away_player_id=pairing.away_id,
        )
        for pairing in generate_round_robin([sp.id for sp in season_players], season.rounds)
    ]


async def get_season(session: AsyncSession, season_id: str) -> Season:
    season = await session.get(Season, season_id)
    if season is None:
        raise SeasonNotFound(season_id)
    return season


async def enroll_player(session: AsyncSession, season_id: str, player_id: str) -> SeasonPlayer:
    """Add a player to an open season; enrolling twice returns the existing entry."""
    season = await get_season(session, season_id)
    if season.closed:
        raise SeasonClosed(season_id)
    player = await session.get(Player, player_id)
    if player is None or player.disabled:
        raise PlayerNotFound(player_id)

    existing = (
        await session.execute(
            select(SeasonPlayer).where(
                SeasonPlayer.season_id == season_id, SeasonPlayer.player_id == player_id
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        return existing

    sp = SeasonPlayer(
        id=uuid.uuid4().hex,
        season_id=season_id,
        player_id=player_id,
        score=season.initial_score,
    )
    session.add(sp)
    await session.commit()
    await standings_cache.invalidate_season(season_id)
    logger.info("Enrolled player %s in season %s", player_id, season_id)
    return sp


async def list_fixtures(session: AsyncSession, season_id: str) -> list[tuple[Fixture, str, str]]:
    """Fixtures in round order with the home and away player ids."""
    await get_season(session, season_id)
    fixtures = (
        await session.execute(
            select(Fixture).where(Fixture.season_id == season_id).order_by(Fixture.round, Fixture.id)
        )
    ).scalars().all()
    player_ids = dict(
        (
            await session.execute(
                select(SeasonPlayer.id, SeasonPlayer.player_id).where(
                    SeasonPlayer.season_id == season_id
                )
            )
        ).all()
    )
    return [
        (f, player_ids[f.home_player_id], player_ids[f.away_player_id]) for f in fixtures
    ]


async def close_season(session: AsyncSession, season_id: str) -> str | None:
    """Close the season and grant ``season_winner`` to the leader.

    Returns the winning player id, or ``None`` when nobody played.
    """
    async with season_locks.hold(season_id):
        season = await get_season(session, season_id)
        if season.closed:
            raise SeasonClosed(season_id)
        standings = await season_standings(session, season_id, use_cache=False)
        season.closed = True
        await session.commit()

    await standings_cache.invalidate_season(season_id)
    winner = standings.on_fire
    logger.info(
        "Closed season %s; winner %s", season_id, winner.entrant_id if winner else None
    )
    if winner is None:
        return None
    try:
        await grant_achievements(
            session, winner.entrant_id, [SEASON_WINNER], season_id=season_id
        )
    except Exception:
        await session.rollback()
        logger.exception(
            "Granting %s to %s failed after closing season %s",
            SEASON_WINNER,
            winner.entrant_id,
            season_id,
        )
    return winner.entrant_id
