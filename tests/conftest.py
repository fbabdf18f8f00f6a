"""Shared pytest fixtures.

Backend-backed tests run against fakeredis so no Redis server is needed.
"""

from unittest.mock import AsyncMock

import fakeredis
import pytest

from src.cache.connection import ConnectionRegistry
from src.cache.manager import CacheManager
from src.cache.retry import ReconnectionPolicy
from src.config import Settings


@pytest.fixture
def settings():
    """Settings with test-friendly backend addresses."""
    return Settings(redis_host="primary.test", redis_reader_host="reader.test")


@pytest.fixture
def fake_server():
    """One in-memory backend shared by every client of a test."""
    return fakeredis.FakeServer()


@pytest.fixture
def client_factory(fake_server):
    """Client factory producing fakeredis clients bound to fake_server."""

    def factory(**kwargs):
        return fakeredis.FakeAsyncRedis(server=fake_server, decode_responses=True)

    return factory


@pytest.fixture
def registry(settings, client_factory):
    """Connection registry backed by fakeredis."""
    return ConnectionRegistry(
        settings,
        policy=ReconnectionPolicy(),
        client_factory=client_factory,
        sleep=AsyncMock(),
    )


@pytest.fixture
def manager(registry):
    """Cache manager backed by fakeredis."""
    return CacheManager(registry)
