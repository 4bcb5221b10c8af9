import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..db_errors import is_unique_violation_error
from ..exceptions import PlayerAlreadyExists, PlayerNotFound
from ..models import Player
from ..schemas import (
    AchievementOut,
    PlayerAchievementsOut,
    PlayerCreate,
    PlayerListOut,
    PlayerOut,
)
from ..scoring.achievements import top_achievements
from ..services.achievements import load_player_achievements

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/players", tags=["players"])


# POST /api/v0/players
@router.post("", response_model=PlayerOut)
async def create_player(
    body: PlayerCreate,
    session: AsyncSession = Depends(get_session),
):
    exists = (
        await session.execute(
            select(Player).where(func.lower(Player.name) == body.name.lower())
        )
    ).scalar_one_or_none()
    if exists:
        raise PlayerAlreadyExists(body.name)
    p = Player(id=uuid.uuid4().hex, name=body.name, disabled=False)
    session.add(p)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation_error(exc):
            raise PlayerAlreadyExists(body.name) from exc
        raise
    return PlayerOut(id=p.id, name=p.name, disabled=p.disabled)


@router.get("", response_model=PlayerListOut)
async def list_players(
    q: str = "",
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Player).where(Player.disabled.is_(False))
    count_stmt = select(func.count()).select_from(Player).where(Player.disabled.is_(False))
    if q:
        stmt = stmt.where(Player.name.ilike(f"%{q}%"))
        count_stmt = count_stmt.where(Player.name.ilike(f"%{q}%"))
    total = (await session.execute(count_stmt)).scalar()
    stmt = stmt.order_by(Player.name).limit(limit).offset(offset)
    rows = (await session.execute(stmt)).scalars().all()
    return PlayerListOut(
        players=[PlayerOut(id=p.id, name=p.name, disabled=p.disabled) for p in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{player_id}", response_model=PlayerOut)
async def get_player(player_id: str, session: AsyncSession = Depends(get_session)):
    p = await session.get(Player, player_id)
    if not p:
        raise PlayerNotFound(player_id)
    return PlayerOut(id=p.id, name=p.name, disabled=p.disabled)


@router.get("/{player_id}/achievements", response_model=PlayerAchievementsOut)
async def get_player_achievements(
    player_id: str, session: AsyncSession = Depends(get_session)
):
    if not await session.get(Player, player_id):
        raise PlayerNotFound(player_id)
    rows = await load_player_achievements(session, player_id)
    return PlayerAchievementsOut(
        player_id=player_id,
        achievements=[
            AchievementOut(
                type=row.type,
                group=definition.group if definition else None,
                title=definition.title if definition else None,
                icon=definition.icon if definition else None,
                season_id=row.season_id,
                created_at=row.created_at,
            )
            for row, definition in rows
        ],
        top=top_achievements([row.type for row, _ in rows]),
    )
