"""Durable PostgreSQL-backed storage."""

import logging

from psycopg import errors as pg_errors

from planner.db.core import _get_connection
from planner.errors import ConflictError, DatabaseError
from planner.models.events import Event, Participant
from planner.models.users import UserRecord
from planner.storage.base import generate_invite_code

logger = logging.getLogger("planner.storage.postgres")

_EVENT_COLUMNS = "id, title, description, planner_id, date_range, invite_code"
_PARTICIPANT_COLUMNS = "id, user_id, event_id, availability"


def _user_from_row(row) -> UserRecord:
    return UserRecord(id=row[0], username=row[1], password=row[2])


def _event_from_row(row) -> Event:
    return Event(
        id=row[0],
        title=row[1],
        description=row[2],
        planner_id=row[3],
        date_range=row[4],
        invite_code=row[5],
    )


def _participant_from_row(row) -> Participant:
    return Participant(id=row[0], user_id=row[1], event_id=row[2], availability=row[3])


class PostgresStorage:
    name = "postgres"

    def __init__(self, invite_code_length: int = 8, invite_code_attempts: int = 10) -> None:
        self._invite_code_length = invite_code_length
        self._invite_code_attempts = invite_code_attempts

    async def get_user(self, user_id: int) -> UserRecord | None:
        async with _get_connection() as conn:
            cur = await conn.execute(
                "SELECT id, username, password FROM users WHERE id = %s",
                (user_id,),
            )
            row = await cur.fetchone()
            return _user_from_row(row) if row else None

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        async with _get_connection() as conn:
            cur = await conn.execute(
                "SELECT id, username, password FROM users WHERE username = %s",
                (username,),
            )
            row = await cur.fetchone()
            return _user_from_row(row) if row else None

    async def create_user(self, username: str, password: str) -> UserRecord:
        async with _get_connection() as conn:
            try:
                cur = await conn.execute(
                    "INSERT INTO users (username, password) VALUES (%s, %s) RETURNING id, username, password",
                    (username, password),
                )
            except pg_errors.UniqueViolation as e:
                raise ConflictError(detail="Username already exists", username=username) from e
            row = await cur.fetchone()
        logger.info("Created user id=%s", row[0])
        return _user_from_row(row)

    async def create_event(
        self,
        title: str,
        description: str | None,
        date_range: str,
        planner_id: int,
    ) -> Event:
        async with _get_connection() as conn:
            for _ in range(self._invite_code_attempts):
                invite_code = generate_invite_code(self._invite_code_length)
                try:
                    cur = await conn.execute(
                        f"""INSERT INTO events (title, description, planner_id, date_range, invite_code)
                            VALUES (%s, %s, %s, %s, %s)
                            RETURNING {_EVENT_COLUMNS}""",
                        (title, description, planner_id, date_range, invite_code),
                    )
                except pg_errors.UniqueViolation:
                    logger.warning("Invite code collision, retrying")
                    continue
                row = await cur.fetchone()
                logger.info("Created event id=%s invite_code=%s", row[0], row[5])
                return _event_from_row(row)
        raise DatabaseError(detail="Failed to generate unique invite code")

    async def get_event(self, event_id: int) -> Event | None:
        async with _get_connection() as conn:
            cur = await conn.execute(
                f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = %s",
                (event_id,),
            )
            row = await cur.fetchone()
            return _event_from_row(row) if row else None

    async def get_event_by_invite_code(self, code: str) -> Event | None:
        async with _get_connection() as conn:
            cur = await conn.execute(
                f"SELECT {_EVENT_COLUMNS} FROM events WHERE invite_code = %s",
                (code,),
            )
            row = await cur.fetchone()
            return _event_from_row(row) if row else None

    async def get_user_events(self, user_id: int) -> list[Event]:
        async with _get_connection() as conn:
            rows = await conn.execute(
                f"""SELECT {_EVENT_COLUMNS} FROM events e
                    WHERE e.planner_id = %s
                       OR EXISTS (
                           SELECT 1 FROM participants p
                           WHERE p.user_id = %s AND p.event_id = e.id
                       )
                    ORDER BY e.id""",
                (user_id, user_id),
            )
            return [_event_from_row(row) async for row in rows]

    async def add_participant(self, event_id: int, user_id: int, availability: str) -> Participant:
        async with _get_connection() as conn:
            cur = await conn.execute(
                f"""INSERT INTO participants (user_id, event_id, availability)
                    VALUES (%s, %s, %s)
                    RETURNING {_PARTICIPANT_COLUMNS}""",
                (user_id, event_id, availability),
            )
            row = await cur.fetchone()
            return _participant_from_row(row)

    async def get_event_participants(self, event_id: int) -> list[Participant]:
        async with _get_connection() as conn:
            rows = await conn.execute(
                f"SELECT {_PARTICIPANT_COLUMNS} FROM participants WHERE event_id = %s ORDER BY id",
                (event_id,),
            )
            return [_participant_from_row(row) async for row in rows]

    async def update_participant_availability(self, user_id: int, event_id: int, availability: str) -> None:
        async with _get_connection() as conn:
            await conn.execute(
                """UPDATE participants SET availability = %s
                   WHERE id = (
                       SELECT id FROM participants
                       WHERE user_id = %s AND event_id = %s
                       ORDER BY id LIMIT 1
                   )""",
                (availability, user_id, event_id),
            )
