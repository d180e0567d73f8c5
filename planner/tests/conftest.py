import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest
from fastapi.testclient import TestClient
import fakeredis.aioredis as fakeredis

import planner.lifespan as lifespan
import planner.main as main
from planner.config import clear_settings_cache


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def client(monkeypatch):
    async def fake_init_redis():
        return fakeredis.FakeRedis(decode_responses=True)

    monkeypatch.setattr(lifespan, "init_redis", fake_init_redis)

    with TestClient(main.app) as c:
        yield c


@pytest.fixture
def signup(client):
    """Register (and thereby log in) a user; the client keeps that session cookie."""

    def _signup(username: str, password: str = "correct horse") -> dict:
        res = client.post("/api/register", json={"username": username, "password": password})
        assert res.status_code == 200, res.text
        return res.json()

    return _signup


@pytest.fixture
def login_as(client):
    def _login(username: str, password: str = "correct horse") -> dict:
        res = client.post("/api/login", json={"username": username, "password": password})
        assert res.status_code == 200, res.text
        return res.json()

    return _login
