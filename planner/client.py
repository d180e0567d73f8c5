"""HTTP client for the planner API.

GET responses are cached by path; every mutation invalidates the paths whose
data it changes, so the next read refetches. There is no other consistency
guarantee: concurrent writers simply overwrite each other.

Usage:
    client = PlannerClient("http://localhost:8000")
    client.login("alice", "secret")
    event = client.create_event("Rehearsal 1")
    client.join_event(event["id"], [date(2024, 6, 1)])
"""

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta
from typing import Any

import requests

from planner import availability as codec

logger = logging.getLogger("planner.client")


class PlannerClientError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class PlannerClient:
    def __init__(self, base_url: str, session: Any = None, timeout: float = 10) -> None:
        self._base_url = base_url.rstrip("/")
        # Any requests-compatible session works; tests pass a FastAPI TestClient.
        self._http = session if session is not None else requests.Session()
        self._timeout = timeout
        self._cache: dict[str, Any] = {}

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        kwargs: dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if isinstance(self._http, requests.Session):
            kwargs["timeout"] = self._timeout
        resp = self._http.request(method, self._url(path), **kwargs)
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail") or resp.text
            except ValueError:
                detail = resp.text
            logger.warning("%s %s failed status=%s detail=%s", method, path, resp.status_code, detail)
            raise PlannerClientError(resp.status_code, detail)
        if not resp.content:
            return None
        return resp.json()

    def _get(self, path: str) -> Any:
        if path not in self._cache:
            self._cache[path] = self._request("GET", path)
        return self._cache[path]

    def invalidate(self, *paths: str) -> None:
        """Drop cached reads; with no arguments, drop everything."""
        if not paths:
            self._cache.clear()
            return
        for path in paths:
            self._cache.pop(path, None)

    # auth

    def register(self, username: str, password: str) -> dict:
        self.invalidate()
        return self._request("POST", "/api/register", {"username": username, "password": password})

    def login(self, username: str, password: str) -> dict:
        self.invalidate()
        return self._request("POST", "/api/login", {"username": username, "password": password})

    def logout(self) -> None:
        self.invalidate()
        self._request("POST", "/api/logout")

    def me(self) -> dict:
        return self._get("/api/user")

    # events

    def list_events(self) -> list[dict]:
        return self._get("/api/events")

    def create_event(
        self,
        title: str,
        description: str | None = None,
        start: date | datetime | None = None,
        end: date | datetime | None = None,
    ) -> dict:
        """Create an event; the range defaults to the coming week."""
        start = start or datetime.now(UTC)
        end = end or _to_datetime(start) + timedelta(days=7)
        event = self._request(
            "POST",
            "/api/events",
            {"title": title, "description": description, "dateRange": codec.encode_date_range(start, end)},
        )
        self.invalidate("/api/events")
        return event

    def get_event(self, event_id: int) -> dict:
        return self._get(f"/api/events/{event_id}")

    def find_event(self, invite_code: str) -> dict:
        return self._get(f"/api/events/invite/{invite_code}")

    def participants(self, event_id: int) -> list[dict]:
        return self._get(f"/api/events/{event_id}/participants")

    def summary(self, event_id: int) -> dict:
        return self._get(f"/api/events/{event_id}/summary")

    def join_event(self, event_id: int, dates: Iterable[date | datetime] = ()) -> dict:
        participant = self._request(
            "POST", f"/api/events/{event_id}/participants", {"availability": codec.encode(dates)}
        )
        self._invalidate_event(event_id)
        self.invalidate("/api/events")
        return participant

    def update_availability(self, event_id: int, dates: Iterable[date | datetime]) -> None:
        self._request("PUT", f"/api/events/{event_id}/availability", {"availability": codec.encode(dates)})
        self._invalidate_event(event_id)

    def _invalidate_event(self, event_id: int) -> None:
        self.invalidate(
            f"/api/events/{event_id}/participants",
            f"/api/events/{event_id}/summary",
        )


def participant_availability(participant: dict) -> list[datetime]:
    """Decode a participant's availability; corrupt data reads as empty."""
    return codec.decode(participant.get("availability"))


def _to_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day, tzinfo=UTC)
