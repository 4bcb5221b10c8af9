import asyncio
import os, sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from scoretracker.cache import TTLCache


def test_invalidate_season_drops_only_that_season():
    cache = TTLCache(ttl_seconds=60)

    async def run_test():
        await cache.set(("s1", "players"), "a")
        await cache.set(("s1", "teams"), "b")
        await cache.set(("s2", "players"), "c")
        await cache.invalidate_season("s1")
        return [await cache.get(k) for k in [("s1", "players"), ("s1", "teams"), ("s2", "players")]]

    assert asyncio.run(run_test()) == [None, None, "c"]


def test_entries_expire():
    cache = TTLCache(ttl_seconds=0)

    async def run_test():
        await cache.set(("s1", "players"), "a")
        return await cache.get(("s1", "players"))

    assert asyncio.run(run_test()) is None
