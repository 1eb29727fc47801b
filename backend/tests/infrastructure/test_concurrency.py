"""Concurrency — command-level isolation over one shared CaptchaStoreConnection.

Tests:
    - Gathered domain commands overlap in flight and each caller gets its own reply
    - Concurrent add_visitor calls are all counted (N adds → count N per captcha)
    - Exhausted BlockingConnectionPool: get_client() still succeeds, the command
      raises StoreError once the pool timeout expires

Design Decisions:
    - Pool exhaustion uses a real redis-py pool with its only connection checked out:
      the checkout never dials, so no server is needed
"""

import asyncio

import pytest

from captcha_cache.core.errors import StoreError
from captcha_cache.core.store_config import StoreConfig
from captcha_cache.infrastructure.captcha_store import CaptchaStore
from captcha_cache.infrastructure.store import Store, build_client
from captcha_cache.schemas.captcha import AddSite, AddVisitor, CaptchaConfig

SITES = ("site-a", "site-b", "site-c", "site-d")


def _add_site(captcha_id: str) -> AddSite:
    return AddSite(
        id=captcha_id,
        config=CaptchaConfig.model_validate({
            "levels": [{"visitor_threshold": 0, "difficulty_factor": 10}],
            "duration": 30,
        }),
    )


async def test_gathered_commands_get_their_own_replies(conn, fake_redis):
    await asyncio.gather(*(conn.add_captcha(_add_site(s)) for s in SITES[:2]))
    await conn.add_visitor(AddVisitor(id="site-b"))

    exists_a, missing, count_b, result_a = await asyncio.gather(
        conn.captcha_exists("site-a"),
        conn.captcha_exists("site-z"),
        conn.get_visitors("site-b"),
        conn.add_visitor(AddVisitor(id="site-a")),
    )

    assert fake_redis.max_in_flight > 1
    assert exists_a is True
    assert missing is False
    assert count_b == 1
    assert result_a.difficulty_factor == 10


async def test_concurrent_visitors_are_all_counted(conn, fake_redis):
    await asyncio.gather(*(conn.add_captcha(_add_site(s)) for s in SITES))
    adds_per_site = 5

    await asyncio.gather(*(
        conn.add_visitor(AddVisitor(id=site))
        for _ in range(adds_per_site)
        for site in SITES
    ))

    counts = await asyncio.gather(*(conn.get_visitors(site) for site in SITES))
    assert counts == [adds_per_site] * len(SITES)
    assert fake_redis.max_in_flight == len(SITES) * adds_per_site


async def test_pool_exhaustion_surfaces_from_command():
    config = StoreConfig.single(
        "redis://localhost:6379/0", max_connections=1, pool_timeout_seconds=0.01,
    )
    store = Store(build_client(config), config)
    pool = store.client.connection_pool
    pool.get_available_connection()
    try:
        conn = CaptchaStore(store).get_client()
        with pytest.raises(StoreError) as exc_info:
            await conn.get_visitors("site-a")
        assert exc_info.value.operation == "MCAPTCHA_CACHE.GET"
        assert "No connection available" in exc_info.value.message
    finally:
        await store.close()
