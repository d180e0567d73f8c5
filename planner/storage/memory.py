"""Volatile map-based storage for development and tests."""

import logging
import threading

from planner.errors import ConflictError, DatabaseError
from planner.models.events import Event, Participant
from planner.models.users import UserRecord
from planner.storage.base import generate_invite_code

logger = logging.getLogger("planner.storage.memory")


class IdSequence:
    """Monotonic id generator owned by a single store."""

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value


class MemoryStorage:
    name = "memory"

    def __init__(self, invite_code_length: int = 8, invite_code_attempts: int = 10) -> None:
        self._users: dict[int, UserRecord] = {}
        self._events: dict[int, Event] = {}
        self._participants: dict[int, Participant] = {}
        self._user_ids = IdSequence()
        self._event_ids = IdSequence()
        self._participant_ids = IdSequence()
        self._invite_code_length = invite_code_length
        self._invite_code_attempts = invite_code_attempts
        self._lock = threading.Lock()

    async def get_user(self, user_id: int) -> UserRecord | None:
        return self._users.get(user_id)

    def _find_user(self, username: str) -> UserRecord | None:
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        return self._find_user(username)

    async def create_user(self, username: str, password: str) -> UserRecord:
        with self._lock:
            if self._find_user(username) is not None:
                raise ConflictError(detail="Username already exists", username=username)
            user = UserRecord(id=self._user_ids.next(), username=username, password=password)
            self._users[user.id] = user
        logger.info("Created user id=%s", user.id)
        return user

    def _new_invite_code(self) -> str:
        taken = {e.invite_code for e in self._events.values()}
        for _ in range(self._invite_code_attempts):
            code = generate_invite_code(self._invite_code_length)
            if code not in taken:
                return code
            logger.warning("Invite code collision, retrying")
        raise DatabaseError(detail="Failed to generate unique invite code")

    async def create_event(
        self,
        title: str,
        description: str | None,
        date_range: str,
        planner_id: int,
    ) -> Event:
        with self._lock:
            event = Event(
                id=self._event_ids.next(),
                title=title,
                description=description,
                planner_id=planner_id,
                date_range=date_range,
                invite_code=self._new_invite_code(),
            )
            self._events[event.id] = event
        logger.info("Created event id=%s invite_code=%s", event.id, event.invite_code)
        return event

    async def get_event(self, event_id: int) -> Event | None:
        return self._events.get(event_id)

    async def get_event_by_invite_code(self, code: str) -> Event | None:
        for event in self._events.values():
            if event.invite_code == code:
                return event
        return None

    async def get_user_events(self, user_id: int) -> list[Event]:
        joined = {p.event_id for p in self._participants.values() if p.user_id == user_id}
        return [
            event
            for event in self._events.values()
            if event.planner_id == user_id or event.id in joined
        ]

    async def add_participant(self, event_id: int, user_id: int, availability: str) -> Participant:
        with self._lock:
            participant = Participant(
                id=self._participant_ids.next(),
                user_id=user_id,
                event_id=event_id,
                availability=availability,
            )
            self._participants[participant.id] = participant
        return participant

    async def get_event_participants(self, event_id: int) -> list[Participant]:
        return [p for p in self._participants.values() if p.event_id == event_id]

    async def update_participant_availability(self, user_id: int, event_id: int, availability: str) -> None:
        with self._lock:
            for participant in self._participants.values():
                if participant.user_id == user_id and participant.event_id == event_id:
                    self._participants[participant.id] = participant.model_copy(
                        update={"availability": availability}
                    )
                    return
        logger.debug("No participant row for user=%s event=%s; availability unchanged", user_id, event_id)
