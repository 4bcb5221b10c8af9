from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..models import Season
from ..schemas import (
    FixtureOut,
    RecalculateOut,
    SeasonCloseOut,
    SeasonCreate,
    SeasonEnroll,
    SeasonOut,
    SeasonPlayerOut,
)
from ..services.matches import replay_season
from ..services.seasons import (
    close_season,
    create_season,
    enroll_player,
    get_season,
    list_fixtures,
)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/seasons", tags=["seasons"])


def _season_out(season: Season) -> SeasonOut:
    return SeasonOut(
        id=season.id,
        name=season.name,
        score_type=season.score_type,
        initial_score=season.initial_score,
        k_factor=season.k_factor,
        start_date=season.start_date,
        end_date=season.end_date,
        rounds=season.rounds,
        closed=season.closed,
    )


# POST /api/v0/seasons
@router.post("", response_model=SeasonOut)
async def create_season_route(
    body: SeasonCreate, session: AsyncSession = Depends(get_session)
):
    season = await create_season(
        session,
        body.name,
        body.score_type,
        initial_score=body.initial_score,
        k_factor=body.k_factor,
        start_date=body.start_date,
        end_date=body.end_date,
        rounds=body.rounds,
    )
    return _season_out(season)


@router.get("", response_model=list[SeasonOut])
async def list_seasons(session: AsyncSession = Depends(get_session)):
    rows = (
        await session.execute(select(Season).order_by(Season.created_at.desc(), Season.id))
    ).scalars().all()
    return [_season_out(s) for s in rows]


@router.get("/{season_id}", response_model=SeasonOut)
async def get_season_route(season_id: str, session: AsyncSession = Depends(get_session)):
    return _season_out(await get_season(session, season_id))


@router.post("/{season_id}/players", response_model=SeasonPlayerOut)
async def enroll_player_route(
    season_id: str, body: SeasonEnroll, session: AsyncSession = Depends(get_session)
):
    sp = await enroll_player(session, season_id, body.player_id)
    return SeasonPlayerOut(season_id=sp.season_id, player_id=sp.player_id, score=sp.score)


@router.post("/{season_id}/close", response_model=SeasonCloseOut)
async def close_season_route(season_id: str, session: AsyncSession = Depends(get_session)):
    winner_id = await close_season(session, season_id)
    return SeasonCloseOut(season_id=season_id, winner_id=winner_id)


@router.get("/{season_id}/fixtures", response_model=list[FixtureOut])
async def list_fixtures_route(season_id: str, session: AsyncSession = Depends(get_session)):
    return [
        FixtureOut(
            id=f.id,
            round=f.round,
            home_player_id=home_id,
            away_player_id=away_id,
            match_id=f.match_id,
            played=f.match_id is not None,
        )
        for f, home_id, away_id in await list_fixtures(session, season_id)
    ]


# POST /api/v0/seasons/{season_id}/recalculate
@router.post("/{season_id}/recalculate", response_model=RecalculateOut)
async def recalculate_season(season_id: str, session: AsyncSession = Depends(get_session)):
    result = await replay_season(session, season_id)
    return RecalculateOut(season_id=season_id, matches=result.matches)
