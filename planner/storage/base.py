"""Persistence gateway contract.

Both backends implement this protocol structurally; neither inherits from
it. Users, events and participants come back as pydantic models.
"""

import secrets
import string
from typing import Protocol, runtime_checkable

from planner.models.events import Event, Participant
from planner.models.users import UserRecord

INVITE_ALPHABET = string.ascii_uppercase + string.digits


def generate_invite_code(length: int = 8) -> str:
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(length))


@runtime_checkable
class Storage(Protocol):
    name: str

    async def get_user(self, user_id: int) -> UserRecord | None: ...

    async def get_user_by_username(self, username: str) -> UserRecord | None: ...

    async def create_user(self, username: str, password: str) -> UserRecord:
        """Raises ConflictError when the username is taken."""
        ...

    async def create_event(
        self,
        title: str,
        description: str | None,
        date_range: str,
        planner_id: int,
    ) -> Event:
        """Store an event under a freshly generated, unique invite code."""
        ...

    async def get_event(self, event_id: int) -> Event | None: ...

    async def get_event_by_invite_code(self, code: str) -> Event | None: ...

    async def get_user_events(self, user_id: int) -> list[Event]:
        """Events the user plans or participates in, each once, in id order."""
        ...

    async def add_participant(self, event_id: int, user_id: int, availability: str) -> Participant:
        """Always appends a new row; repeated joins are not deduplicated."""
        ...

    async def get_event_participants(self, event_id: int) -> list[Participant]: ...

    async def update_participant_availability(self, user_id: int, event_id: int, availability: str) -> None:
        """Update the first matching row; silently does nothing if none exists."""
        ...
