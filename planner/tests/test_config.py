"""Tests for centralized configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestStorageSettings:
    def test_defaults_to_memory(self):
        from planner.config import StorageSettings

        with patch.dict(os.environ, {}, clear=True):
            assert StorageSettings().backend == "memory"

    def test_postgres_from_environment(self):
        from planner.config import StorageSettings

        with patch.dict(os.environ, {"STORAGE_BACKEND": " Postgres "}, clear=True):
            assert StorageSettings().backend == "postgres"

    def test_unknown_backend_rejected(self):
        from planner.config import StorageSettings

        with patch.dict(os.environ, {"STORAGE_BACKEND": "sqlite"}, clear=True):
            with pytest.raises(ValidationError):
                StorageSettings()


class TestPostgresSettings:
    def test_dsn_generation(self):
        from planner.config import PostgresSettings

        env = {
            "POSTGRES_HOST": "dbhost",
            "POSTGRES_PORT": "5433",
            "POSTGRES_USER": "myuser",
            "POSTGRES_PASSWORD": "mypass",
            "POSTGRES_DB": "mydb",
        }
        with patch.dict(os.environ, env, clear=True):
            dsn = PostgresSettings().get_dsn()
            assert "host=dbhost" in dsn
            assert "port=5433" in dsn
            assert "user=myuser" in dsn
            assert "password=mypass" in dsn
            assert "dbname=mydb" in dsn


class TestSessionSettings:
    def test_defaults(self):
        from planner.config import SessionSettings

        with patch.dict(os.environ, {}, clear=True):
            settings = SessionSettings()
            assert settings.cookie_name == "planner_session"
            assert settings.ttl_sec == 7 * 24 * 3600
            assert settings.cookie_secure is False

    @pytest.mark.parametrize("raw,expected", [("1", True), ("yes", True), ("TRUE", True), ("0", False), ("no", False)])
    def test_secure_flag_parsing(self, raw, expected):
        from planner.config import SessionSettings

        with patch.dict(os.environ, {"SESSION_COOKIE_SECURE": raw}, clear=True):
            assert SessionSettings().cookie_secure is expected


class TestInviteSettings:
    def test_defaults_and_bounds(self):
        from planner.config import InviteSettings

        with patch.dict(os.environ, {}, clear=True):
            assert InviteSettings().length == 8
        with patch.dict(os.environ, {"INVITE_CODE_LENGTH": "3"}, clear=True):
            with pytest.raises(ValidationError):
                InviteSettings()


class TestCorsSettings:
    def test_origins_parsing(self):
        from planner.config import CorsSettings

        with patch.dict(os.environ, {"CORS_ORIGINS": "http://a.test, http://b.test,"}, clear=True):
            settings = CorsSettings()
            assert settings.origins == ["http://a.test", "http://b.test"]
            assert settings.allow_credentials is True

    def test_wildcard_disables_credentials(self):
        from planner.config import CorsSettings

        with patch.dict(os.environ, {"CORS_ORIGINS": "*"}, clear=True):
            assert CorsSettings().allow_credentials is False


class TestSettingsCache:
    def test_get_settings_is_cached_until_cleared(self):
        from planner.config import clear_settings_cache, get_settings

        first = get_settings()
        assert get_settings() is first
        clear_settings_cache()
        assert get_settings() is not first
