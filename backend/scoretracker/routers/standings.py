from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..schemas import (
    HighlightsOut,
    ProgressionOut,
    ProgressionPointOut,
    StandingOut,
    StandingsOut,
)
from ..scoring.standings import StandingRow
from ..services.standings import season_progression, season_standings, team_standings

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/seasons/{season_id}", tags=["standings"])


def _row_out(row: StandingRow | None) -> StandingOut | None:
    if row is None:
        return None
    return StandingOut(
        rank=row.rank,
        entrant_id=row.entrant_id,
        name=row.name,
        current_rating=row.current_rating,
        match_count=row.match_count,
        win_count=row.win_count,
        draw_count=row.draw_count,
        loss_count=row.loss_count,
        form=list(row.form),
        point_diff=row.point_diff,
        player_ids=list(row.player_ids),
    )


# GET /api/v0/seasons/{season_id}/standings
@router.get("/standings", response_model=StandingsOut)
async def get_standings(season_id: str, session: AsyncSession = Depends(get_session)):
    standings = await season_standings(session, season_id)
    return StandingsOut(season_id=season_id, rows=[_row_out(r) for r in standings.rows])


@router.get("/team-standings", response_model=StandingsOut)
async def get_team_standings(season_id: str, session: AsyncSession = Depends(get_session)):
    standings = await team_standings(session, season_id)
    return StandingsOut(season_id=season_id, rows=[_row_out(r) for r in standings.rows])


@router.get("/highlights", response_model=HighlightsOut)
async def get_highlights(season_id: str, session: AsyncSession = Depends(get_session)):
    standings = await season_standings(session, season_id)
    return HighlightsOut(
        season_id=season_id,
        on_fire=_row_out(standings.on_fire),
        struggling=_row_out(standings.struggling),
    )


@router.get("/progression", response_model=ProgressionOut)
async def get_progression(season_id: str, session: AsyncSession = Depends(get_session)):
    progression = await season_progression(session, season_id)
    return ProgressionOut(
        season_id=season_id,
        entrants={
            entrant_id: [
                ProgressionPointOut(timestamp=ts, rating=rating) for ts, rating in points
            ]
            for entrant_id, points in progression.items()
        },
    )
