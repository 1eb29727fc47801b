"""Root conftest — shared test configuration."""

import os

import pytest

from captcha_cache.config import get_settings

# Ensure tests never reach a real Redis from a developer's .env
os.environ.setdefault("REDIS_URL", "redis://test-redis:6379/")
os.environ.setdefault("REDIS_CLUSTER_URLS", "")


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
