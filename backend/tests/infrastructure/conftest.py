"""Infrastructure test fixtures — fake redis-py client wired into Store / CaptchaStore.

Invariants:
    - Every test gets a fresh FakeRedis (no state shared between tests)
    - captcha_store fixture has already passed module verification
    - Fake client's verification calls are cleared before domain tests run

Design Decisions:
    - Store built directly around the fake: no network, no build_client patching
      (ADR: connect() paths patched explicitly in their own tests)
"""

import logging

import pytest

from captcha_cache.core.store_config import StoreConfig
from captcha_cache.infrastructure import observability
from captcha_cache.infrastructure.captcha_store import CaptchaStore
from captcha_cache.infrastructure.store import Store

from tests.infrastructure.fake_redis import FakeRedis


@pytest.fixture
def single_config():
    return StoreConfig.single("redis://fake:6379/")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis, single_config):
    return Store(fake_redis, single_config)


@pytest.fixture
async def captcha_store(store, fake_redis):
    verified = await CaptchaStore.verified(store)
    fake_redis.calls.clear()
    return verified


@pytest.fixture
def conn(captcha_store):
    return captcha_store.get_client()


@pytest.fixture(autouse=True)
def _restore_root_logging(monkeypatch):
    """setup_logging mutates the root logger; put it back after each test."""
    handlers = list(logging.root.handlers)
    level = logging.root.level
    monkeypatch.setattr(observability, "_installed", None)
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)
