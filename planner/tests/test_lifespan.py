"""Tests for lifespan management."""

from unittest.mock import AsyncMock, MagicMock, patch

import fakeredis.aioredis as fakeredis
import pytest

from planner import state
from planner.storage import MemoryStorage, PostgresStorage


class TestLifespanResources:
    def test_defaults(self):
        from planner.lifespan import LifespanResources

        resources = LifespanResources()
        assert resources.redis_client is None
        assert resources.session_store is None
        assert resources.storage is None
        assert resources.db_enabled is False


class TestBuildStorage:
    def test_memory(self):
        from planner.lifespan import build_storage

        assert isinstance(build_storage("memory"), MemoryStorage)

    def test_postgres(self):
        from planner.lifespan import build_storage

        assert isinstance(build_storage("postgres"), PostgresStorage)

    def test_unknown(self):
        from planner.lifespan import build_storage

        with pytest.raises(ValueError):
            build_storage("sqlite")


class TestInitRedis:
    @pytest.mark.asyncio
    async def test_init_redis_uses_settings(self):
        from planner.lifespan import init_redis

        mock_redis_class = MagicMock()
        with patch("planner.lifespan.redis.Redis", mock_redis_class), \
                patch("planner.lifespan.RedisConnectionPool") as mock_pool:
            await init_redis()

        pool_kwargs = mock_pool.call_args.kwargs
        assert pool_kwargs["host"] == "redis"
        assert pool_kwargs["port"] == 6379
        assert pool_kwargs["password"] is None
        mock_redis_class.assert_called_once_with(connection_pool=mock_pool.return_value, decode_responses=True)


class TestSetupAndCleanup:
    @pytest.mark.asyncio
    async def test_memory_backend_round_trip(self):
        from planner.lifespan import cleanup_resources, setup_resources

        fake = fakeredis.FakeRedis(decode_responses=True)
        with patch("planner.lifespan.init_redis", AsyncMock(return_value=fake)), \
                patch("planner.lifespan.db.init_pool", AsyncMock()) as init_pool:
            resources = await setup_resources()

            assert isinstance(state.storage, MemoryStorage)
            assert state.session_store is resources.session_store
            assert state.redis_client is fake
            init_pool.assert_not_called()

            await cleanup_resources(resources)

        assert state.storage is None
        assert state.session_store is None
        assert state.redis_client is None

    @pytest.mark.asyncio
    async def test_postgres_backend_opens_and_closes_pool(self, monkeypatch):
        from planner.config import clear_settings_cache
        from planner.lifespan import cleanup_resources, setup_resources

        monkeypatch.setenv("STORAGE_BACKEND", "postgres")
        clear_settings_cache()

        fake = fakeredis.FakeRedis(decode_responses=True)
        with patch("planner.lifespan.init_redis", AsyncMock(return_value=fake)), \
                patch("planner.lifespan.db.init_pool", AsyncMock()) as init_pool, \
                patch("planner.lifespan.db.close_pool", AsyncMock()) as close_pool:
            resources = await setup_resources()
            assert resources.db_enabled is True
            assert isinstance(state.storage, PostgresStorage)
            init_pool.assert_awaited_once()

            await cleanup_resources(resources)
            close_pool.assert_awaited_once()
