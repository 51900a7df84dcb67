"""Shared pytest fixtures for channel core tests."""

from __future__ import annotations

import os
from typing import AsyncGenerator

import pytest

from bichannel.infrastructure.database import DatabaseClient
from bichannel.infrastructure.storage import RedisKeyValueStore, register_ledger_scripts
from tests.fixtures import PartyActor


@pytest.fixture
def alice() -> PartyActor:
    """Channel creator (party A)."""
    return PartyActor()


@pytest.fixture
def bob() -> PartyActor:
    """Channel counterparty (party B)."""
    return PartyActor()


@pytest.fixture
def admin() -> PartyActor:
    """Owner allowed to run the emergency sweep."""
    return PartyActor()


class TestDatabaseSettings:
    """Test settings for Redis connection."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url


@pytest.fixture
async def redis_db_client() -> AsyncGenerator[DatabaseClient, None]:
    """Create a Redis database client for testing.

    Uses TEST_REDIS_URL if set, else localhost:6379/15. Skips when Redis is
    not reachable.
    """
    test_redis_url = os.getenv("TEST_REDIS_URL", "redis://localhost:6379/15")
    client = DatabaseClient(TestDatabaseSettings(database_url=test_redis_url))
    client.initialize_database()

    try:
        async with client.get_connection() as conn:
            await conn.ping()
    except Exception as e:
        await client.close()
        pytest.skip(f"Redis not available at {test_redis_url}: {e}")

    yield client

    async with client.get_connection() as conn:
        await conn.flushdb()
    await client.close()


@pytest.fixture
async def redis_store(redis_db_client: DatabaseClient) -> RedisKeyValueStore:
    """Create a Redis-backed key-value store with the ledger scripts loaded."""
    store = RedisKeyValueStore(redis_db_client)
    await register_ledger_scripts(store)
    return store
