import asyncio
import os
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from scoretracker.db import normalize_database_url
from scoretracker.models import Player, Season
from scoretracker.services.seasons import create_season

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required")

engine = create_async_engine(
    normalize_database_url(DATABASE_URL), echo=False, pool_pre_ping=True
)
Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

DEMO_PLAYERS = [
    ("demo-alex", "Alex"),
    ("demo-bella", "Bella"),
    ("demo-carlos", "Carlos"),
    ("demo-diana", "Diana"),
    ("demo-eli", "Eli"),
    ("demo-fiona", "Fiona"),
]

DEMO_SEASONS = [
    ("Demo Elo", "elo", None),
    ("Demo League", "3-1-0", 2),
]


async def main():
    async with Session() as s:
        existing_players = {
            x.id for x in (await s.execute(select(Player))).scalars().all()
        }
        for pid, name in DEMO_PLAYERS:
            if pid not in existing_players:
                s.add(Player(id=pid, name=name, disabled=False))
        await s.commit()

        # Seasons enroll every active player, so create them after the players.
        existing_seasons = {
            x.name for x in (await s.execute(select(Season))).scalars().all()
        }
        for name, score_type, rounds in DEMO_SEASONS:
            if name not in existing_seasons:
                await create_season(s, name, score_type, rounds=rounds)
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main())
