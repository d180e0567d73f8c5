"""Availability codec.

Participant availability travels and is stored as a string: a JSON array of
ISO-8601 UTC instants such as ``["2024-06-01T00:00:00.000Z"]``. Event date
ranges use the same instant format inside a ``{"start": ..., "end": ...}``
object.

Decoding is lenient: stored data that cannot be parsed reads as "no
availability" so a single corrupt row never breaks an event page.
"""

import json
import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger("planner.availability")


def _to_utc(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return datetime.combine(value, time(), tzinfo=UTC)


def format_instant(value: date | datetime) -> str:
    """Render an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return _to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_instant(text: str) -> datetime:
    """Parse an ISO-8601 instant; naive values are taken as UTC.

    Raises ValueError (or TypeError for non-strings) on malformed input.
    """
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    return _to_utc(parsed)


def encode(dates: Iterable[date | datetime]) -> str:
    return json.dumps([format_instant(d) for d in dates])


def _decode_strict(text: Any) -> list[datetime]:
    items = json.loads(text)
    if not isinstance(items, list):
        raise ValueError("availability must be a JSON array")
    return [parse_instant(item) for item in items]


def decode(text: str | None) -> list[datetime]:
    """Decode an availability string, returning ``[]`` for anything malformed."""
    if text is None:
        return []
    try:
        return _decode_strict(text)
    except (TypeError, ValueError, OverflowError, RecursionError) as e:
        logger.debug("Ignoring malformed availability %r: %s", text, e)
        return []


def is_valid(text: str) -> bool:
    """True when ``text`` is exactly the encoded form (possibly empty)."""
    try:
        _decode_strict(text)
    except (TypeError, ValueError, OverflowError, RecursionError):
        return False
    return True


def decode_days(text: str | None) -> list[date]:
    """Distinct UTC calendar days in an availability string, sorted."""
    return sorted({d.date() for d in decode(text)})


def encode_date_range(start: date | datetime, end: date | datetime) -> str:
    return json.dumps({"start": format_instant(start), "end": format_instant(end)})


def decode_date_range(text: str | None) -> tuple[datetime, datetime] | None:
    """Return ``(start, end)`` or None when the range is malformed or inverted."""
    if text is None:
        return None
    try:
        raw = json.loads(text)
        if not isinstance(raw, dict):
            return None
        start = parse_instant(raw["start"])
        end = parse_instant(raw["end"])
    except (KeyError, TypeError, ValueError, OverflowError, RecursionError):
        return None
    if end < start:
        return None
    return start, end


class AvailabilitySummary(BaseModel):
    """Who is free on which day, for one event."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: int
    participant_count: int
    days: dict[str, list[int]] = Field(default_factory=dict)
    counts: dict[str, int] = Field(default_factory=dict)
    best_days: list[str] = Field(default_factory=list)


def summarize(event_id: int, participants: Sequence[Any]) -> AvailabilitySummary:
    """Aggregate participant rows into per-day lists of available user ids.

    A user with several rows for the same event is counted once, from their
    first row.
    """
    seen_users: set[int] = set()
    days: dict[str, list[int]] = {}
    for p in participants:
        if p.user_id in seen_users:
            continue
        seen_users.add(p.user_id)
        for day in decode_days(p.availability):
            days.setdefault(day.isoformat(), []).append(p.user_id)

    ordered = dict(sorted(days.items()))
    counts = {day: len(users) for day, users in ordered.items()}
    top = max(counts.values(), default=0)
    return AvailabilitySummary(
        event_id=event_id,
        participant_count=len(seen_users),
        days=ordered,
        counts=counts,
        best_days=[day for day, n in counts.items() if n == top] if top else [],
    )
