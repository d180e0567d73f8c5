"""Tests for the database migration system."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest


def _cursor(row):
    cur = MagicMock()
    cur.fetchone = AsyncMock(return_value=row)
    return cur


class TestMigrationSystem:
    @pytest.fixture
    def mock_connection(self):
        conn = MagicMock()
        conn.execute = AsyncMock(return_value=_cursor((0,)))
        tx = MagicMock()
        tx.__aenter__ = AsyncMock(return_value=None)
        tx.__aexit__ = AsyncMock(return_value=None)
        conn.transaction = MagicMock(return_value=tx)
        return conn

    @pytest.fixture
    def mock_get_connection(self, mock_connection):
        cm = MagicMock()
        cm.__aenter__ = AsyncMock(return_value=mock_connection)
        cm.__aexit__ = AsyncMock(return_value=None)
        return cm

    @pytest.mark.asyncio
    async def test_get_current_version_creates_table(self, mock_get_connection, mock_connection):
        with patch("planner.db.migrations._get_connection", return_value=mock_get_connection):
            from planner.db.migrations import get_current_version

            version = await get_current_version()

            create_call = mock_connection.execute.call_args_list[0]
            assert "CREATE TABLE IF NOT EXISTS schema_migrations" in create_call[0][0]
            assert version == 0

    @pytest.mark.asyncio
    async def test_get_current_version_returns_max(self, mock_get_connection, mock_connection):
        mock_connection.execute = AsyncMock(return_value=_cursor((5,)))

        with patch("planner.db.migrations._get_connection", return_value=mock_get_connection):
            from planner.db.migrations import get_current_version

            assert await get_current_version() == 5

    @pytest.mark.asyncio
    async def test_apply_migration_skips_if_already_applied(self, mock_get_connection, mock_connection):
        mock_connection.execute = AsyncMock(return_value=_cursor((5,)))

        with patch("planner.db.migrations._get_connection", return_value=mock_get_connection):
            from planner.db.migrations import apply_migration

            assert await apply_migration(3, "SELECT 1;", "test") is False

    @pytest.mark.asyncio
    async def test_apply_migration_records_version(self, mock_get_connection, mock_connection):
        mock_connection.execute = AsyncMock(return_value=_cursor((2,)))

        with patch("planner.db.migrations._get_connection", return_value=mock_get_connection):
            from planner.db.migrations import apply_migration

            assert await apply_migration(3, "CREATE TABLE t (id INT);", "test migration") is True

            statements = [c[0][0] for c in mock_connection.execute.call_args_list]
            assert "CREATE TABLE t (id INT);" in statements
            insert = next(c for c in mock_connection.execute.call_args_list if "INSERT INTO schema_migrations" in c[0][0])
            assert insert[0][1] == (3, "test migration")

    @pytest.mark.asyncio
    async def test_apply_migration_propagates_failures(self, mock_get_connection, mock_connection):
        async def execute(sql, params=None):
            if sql.startswith("BROKEN"):
                raise RuntimeError("syntax error")
            return _cursor((0,))

        mock_connection.execute = AsyncMock(side_effect=execute)

        with patch("planner.db.migrations._get_connection", return_value=mock_get_connection):
            from planner.db.migrations import apply_migration

            with pytest.raises(RuntimeError):
                await apply_migration(1, "BROKEN SQL", "bad")


class TestPendingMigrations:
    def test_initial_schema_is_pending_on_empty_database(self):
        from planner.db.migrations import get_pending_migrations

        pending = get_pending_migrations(0)
        assert pending[0]["version"] == 1
        assert pending[0]["description"] == "initial_schema"

    def test_nothing_pending_when_current(self):
        from planner.db.migrations import get_pending_migrations

        assert get_pending_migrations(10_000) == []

    def test_initial_schema_declares_unique_constraints(self):
        from planner.db.migrations import MIGRATIONS_DIR

        sql = (MIGRATIONS_DIR / "001_initial_schema.sql").read_text()
        assert "username TEXT NOT NULL UNIQUE" in sql
        assert "invite_code TEXT NOT NULL UNIQUE" in sql
