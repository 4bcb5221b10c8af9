from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import MatchNotFound, SeasonNotFound
from ..models import Match, MatchPlayer, MatchTeam, Season, SeasonPlayer, SeasonTeam, Team
from ..rate_limit import limiter, match_rate_limit
from ..schemas import (
    MatchCreate,
    MatchCreateOut,
    MatchListOut,
    MatchOut,
    MatchPlayerOut,
    MatchRevertOut,
    MatchTeamOut,
)
from ..services.matches import register_match, revert_match

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/seasons/{season_id}/matches", tags=["matches"])


async def _require_season(session: AsyncSession, season_id: str) -> None:
    if await session.get(Season, season_id) is None:
        raise SeasonNotFound(season_id)


async def _match_out(session: AsyncSession, match: Match) -> MatchOut:
    players = (
        await session.execute(
            select(MatchPlayer, SeasonPlayer.player_id)
            .join(SeasonPlayer, SeasonPlayer.id == MatchPlayer.season_player_id)
            .where(MatchPlayer.match_id == match.id)
            .order_by(MatchPlayer.home_team.desc(), SeasonPlayer.player_id)
        )
    ).all()
    teams = (
        await session.execute(
            select(MatchTeam, Team)
            .join(SeasonTeam, SeasonTeam.id == MatchTeam.season_team_id)
            .join(Team, Team.id == SeasonTeam.team_id)
            .where(MatchTeam.match_id == match.id)
            .order_by(MatchTeam.home_team.desc())
        )
    ).all()
    return MatchOut(
        id=match.id,
        season_id=match.season_id,
        sequence=match.sequence,
        home_score=match.home_score,
        away_score=match.away_score,
        home_expected_elo=match.home_expected_elo,
        away_expected_elo=match.away_expected_elo,
        created_by=match.created_by,
        created_at=match.created_at,
        players=[
            MatchPlayerOut(
                player_id=player_id,
                home_team=mp.home_team,
                score_before=mp.score_before,
                score_after=mp.score_after,
                result=mp.result,
            )
            for mp, player_id in players
        ],
        teams=[
            MatchTeamOut(
                team_id=team.id,
                name=team.name,
                home_team=mt.home_team,
                score_before=mt.score_before,
                score_after=mt.score_after,
                result=mt.result,
            )
            for mt, team in teams
        ],
    )


# POST /api/v0/seasons/{season_id}/matches
@router.post("", response_model=MatchCreateOut)
@limiter.limit(match_rate_limit)
async def create_match(
    request: Request,
    season_id: str,
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
):
    registered = await register_match(
        session,
        season_id,
        body.home_player_ids,
        body.away_player_ids,
        body.home_score,
        body.away_score,
        created_by=body.created_by,
        fixture_id=body.fixture_id,
    )
    return MatchCreateOut(
        match=await _match_out(session, registered.match),
        achievements=registered.achievements,
    )


@router.get("", response_model=MatchListOut)
async def list_matches(
    season_id: str,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    await _require_season(session, season_id)
    total = (
        await session.execute(
            select(func.count()).select_from(Match).where(Match.season_id == season_id)
        )
    ).scalar()
    rows = (
        await session.execute(
            select(Match)
            .where(Match.season_id == season_id)
            .order_by(Match.sequence.desc())
            .limit(limit)
            .offset(offset)
        )
    ).scalars().all()
    return MatchListOut(
        matches=[await _match_out(session, m) for m in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/latest", response_model=MatchOut)
async def latest_match(season_id: str, session: AsyncSession = Depends(get_session)):
    await _require_season(session, season_id)
    match = (
        await session.execute(
            select(Match)
            .where(Match.season_id == season_id)
            .order_by(Match.sequence.desc())
            .limit(1)
        )
    ).scalar_one_or_none()
    if match is None:
        raise MatchNotFound("latest")
    return await _match_out(session, match)


@router.get("/{mid}", response_model=MatchOut)
async def get_match(season_id: str, mid: str, session: AsyncSession = Depends(get_session)):
    match = await session.get(Match, mid)
    if match is None or match.season_id != season_id:
        raise MatchNotFound(mid)
    return await _match_out(session, match)


# DELETE /api/v0/seasons/{season_id}/matches/{mid}
@router.delete("/{mid}", response_model=MatchRevertOut)
async def delete_match(season_id: str, mid: str, session: AsyncSession = Depends(get_session)):
    reverted = await revert_match(session, season_id, mid)
    return MatchRevertOut(
        match_id=reverted.match_id,
        player_ids=reverted.player_ids,
        team_ids=reverted.team_ids,
    )
