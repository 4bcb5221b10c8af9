"""Load a season's entrants and participations and fold them into standings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..config import FORM_LENGTH, STRUGGLING_MIN_MATCHES
from ..exceptions import SeasonNotFound
from ..models import Match, MatchPlayer, MatchTeam, Player, Season, SeasonPlayer, SeasonTeam, Team
from ..scoring.form import RatingChange, rating_progression
from ..scoring.standings import (
    Entrant,
    Participation,
    StandingRow,
    build_standings,
    on_fire,
    struggling,
)
from ..time_utils import day_window

logger = logging.getLogger(__name__)


@dataclass
class SeasonStandings:
    season_id: str
    rows: list[StandingRow]
    on_fire: StandingRow | None
    struggling: StandingRow | None


async def _require_season(session: AsyncSession, season_id: str) -> Season:
    season = await session.get(Season, season_id)
    if season is None:
        raise SeasonNotFound(season_id)
    return season


async def _player_entrants(session: AsyncSession, season_id: str) -> list[Entrant]:
    rows = (
        await session.execute(
            select(SeasonPlayer, Player)
            .join(Player, Player.id == SeasonPlayer.player_id)
            .where(
                SeasonPlayer.season_id == season_id,
                SeasonPlayer.disabled.is_(False),
                Player.disabled.is_(False),
            )
        )
    ).all()
    return [Entrant(id=p.id, name=p.name, rating=sp.score) for sp, p in rows]


async def _player_participations(session: AsyncSession, season_id: str) -> list[Participation]:
    rows = (
        await session.execute(
            select(MatchPlayer, Match, SeasonPlayer.player_id)
            .join(Match, Match.id == MatchPlayer.match_id)
            .join(SeasonPlayer, SeasonPlayer.id == MatchPlayer.season_player_id)
            .where(Match.season_id == season_id)
        )
    ).all()
    return [
        Participation(
            entrant_id=player_id,
            match_id=m.id,
            sequence=m.sequence,
            created_at=m.created_at,
            home_team=mp.home_team,
            rating_before=mp.score_before,
            rating_after=mp.score_after,
            result=mp.result,
        )
        for mp, m, player_id in rows
    ]


async def _team_entrants(session: AsyncSession, season_id: str) -> list[Entrant]:
    rows = (
        await session.execute(
            select(SeasonTeam, Team)
            .join(Team, Team.id == SeasonTeam.team_id)
            .where(SeasonTeam.season_id == season_id)
        )
    ).all()
    return [
        Entrant(id=t.id, name=t.name, rating=st.score, player_ids=tuple(t.player_ids or ()))
        for st, t in rows
    ]


async def _team_participations(session: AsyncSession, season_id: str) -> list[Participation]:
    rows = (
        await session.execute(
            select(MatchTeam, Match, SeasonTeam.team_id)
            .join(Match, Match.id == MatchTeam.match_id)
            .join(SeasonTeam, SeasonTeam.id == MatchTeam.season_team_id)
            .where(Match.season_id == season_id)
        )
    ).all()
    return [
        Participation(
            entrant_id=team_id,
            match_id=m.id,
            sequence=m.sequence,
            created_at=m.created_at,
            home_team=mt.home_team,
            rating_before=mt.score_before,
            rating_after=mt.score_after,
            result=mt.result,
        )
        for mt, m, team_id in rows
    ]


def _summarize(season_id: str, rows: list[StandingRow]) -> SeasonStandings:
    return SeasonStandings(
        season_id=season_id,
        rows=rows,
        on_fire=on_fire(rows),
        struggling=struggling(rows, STRUGGLING_MIN_MATCHES),
    )


async def season_standings(
    session: AsyncSession,
    season_id: str,
    *,
    use_cache: bool = True,
    now: datetime | None = None,
) -> SeasonStandings:
    """Ranked player standings with today's point swing per entrant."""
    cache_key = (season_id, "players")
    if use_cache and now is None:
        cached = await standings_cache.get(cache_key)
        if cached is not None:
            return cached
        logger.debug("Standings cache miss for season %s", season_id)

    await _require_season(session, season_id)
    rows = build_standings(
        await _player_entrants(session, season_id),
        await _player_participations(session, season_id),
        point_diff_window=day_window(now),
        form_length=FORM_LENGTH,
    )
    result = _summarize(season_id, rows)
    if use_cache and now is None:
        await standings_cache.set(cache_key, result)
    return result


async def team_standings(
    session: AsyncSession,
    season_id: str,
    *,
    use_cache: bool = True,
    now: datetime | None = None,
) -> SeasonStandings:
    cache_key = (season_id, "teams")
    if use_cache and now is None:
        cached = await standings_cache.get(cache_key)
        if cached is not None:
            return cached

    await _require_season(session, season_id)
    rows = build_standings(
        await _team_entrants(session, season_id),
        await _team_participations(session, season_id),
        point_diff_window=day_window(now),
        form_length=FORM_LENGTH,
    )
    result = _summarize(season_id, rows)
    if use_cache and now is None:
        await standings_cache.set(cache_key, result)
    return result


async def season_progression(
    session: AsyncSession, season_id: str
) -> dict[str, list[tuple[datetime, float]]]:
    """Rating after every match, per player, oldest first."""
    await _require_season(session, season_id)
    participations = sorted(
        await _player_participations(session, season_id),
        key=lambda p: p.sequence,
    )
    changes = [
        RatingChange(p.entrant_id, p.rating_before, p.rating_after, p.created_at)
        for p in participations
    ]
    return rating_progression(changes)
