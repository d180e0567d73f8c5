"""Plain-text renderings of planner data, as shown to a signed-in user."""

from collections.abc import Sequence
from datetime import date, datetime

from planner import availability as codec
from planner.client import participant_availability


def format_day(value: date | datetime) -> str:
    """``June 1, 2024``"""
    return f"{value:%B} {value.day}, {value.year}"


def _date_range_text(event: dict) -> str:
    parsed = codec.decode_date_range(event.get("dateRange"))
    if parsed is None:
        return "Dates: unknown"
    start, end = parsed
    return f"Dates: {format_day(start)} - {format_day(end)}"


def render_event_list(events: Sequence[dict], username: str | None = None) -> str:
    lines = []
    if username:
        lines.append(f"Welcome, {username}!")
    if not events:
        lines.append("No events yet.")
    for event in events:
        line = f"#{event['id']} {event['title']}"
        if event.get("description"):
            line += f" - {event['description']}"
        lines.append(line)
    return "\n".join(lines)


def render_event_detail(event: dict, participants: Sequence[dict], viewer_id: int | None) -> str:
    role = "You are the planner" if event["plannerId"] == viewer_id else "You are a participant"
    lines = [event["title"]]
    if event.get("description"):
        lines.append(event["description"])
    lines += [
        role,
        _date_range_text(event),
        f"Invite Code: {event['inviteCode']}",
        f"{len(participants)} Participants",
    ]
    return "\n".join(lines)


def render_participant_availability(participant: dict) -> str:
    lines = [f"User {participant['userId']}"]
    dates = participant_availability(participant)
    if not dates:
        lines.append("  (no dates selected)")
    lines += [f"  {format_day(d)}" for d in dates]
    return "\n".join(lines)


def render_summary(summary: dict) -> str:
    lines = [f"{summary['participantCount']} participants responded"]
    for day, user_ids in summary.get("days", {}).items():
        users = ", ".join(f"User {u}" for u in user_ids)
        lines.append(f"{format_day(date.fromisoformat(day))}: {len(user_ids)} free ({users})")
    if summary.get("bestDays"):
        best = ", ".join(format_day(date.fromisoformat(d)) for d in summary["bestDays"])
        lines.append(f"Best: {best}")
    return "\n".join(lines)
