#!/usr/bin/env python3
"""Admin helper to rebuild a season's ratings from its match history."""

from __future__ import annotations

import argparse
import asyncio
import json
import os

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from scoretracker.db import normalize_database_url
from scoretracker.models import SeasonPlayer
from scoretracker.services.matches import replay_season


async def _get_engine() -> AsyncEngine:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL environment variable is required")
    return create_async_engine(
        normalize_database_url(database_url), echo=False, pool_pre_ping=True
    )


async def _current_ratings(session: AsyncSession, season_id: str) -> dict[str, float]:
    rows = (
        await session.execute(
            select(SeasonPlayer.player_id, SeasonPlayer.score).where(
                SeasonPlayer.season_id == season_id
            )
        )
    ).all()
    return {player_id: score for player_id, score in rows}


async def main() -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Replay every match of a season from the initial scores and rewrite "
            "the stored ratings and participation rows."
        )
    )
    parser.add_argument("season_id", help="Identifier of the season to rebuild")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the recomputed ratings without writing them to the database.",
    )
    args = parser.parse_args()

    engine = await _get_engine()
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with Session() as session:
            before = await _current_ratings(session, args.season_id)
            result = await replay_season(session, args.season_id, dry_run=args.dry_run)

            changed = {
                player_id: {"before": before.get(player_id), "after": rating}
                for player_id, rating in result.ratings.items()
                if before.get(player_id) != rating
            }
            print(f"Replayed {result.matches} matches.")
            print(json.dumps(changed, indent=2, sort_keys=True))
            if args.dry_run:
                print("Dry run; no updates written.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
