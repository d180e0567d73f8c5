"""Event routes: create and list events, join by invite code, submit availability.

Every route requires a session. The caller's identity is resolved before
anything else, so unauthenticated requests never reach storage.
"""

import logging
from typing import List

from fastapi import APIRouter, Response

from planner import availability as codec
from planner.dependencies import AuthenticatedUser, Store
from planner.errors import BadRequestError, NotFoundError
from planner.models.events import AvailabilityRequest, CreateEventRequest, Event, Participant

logger = logging.getLogger("planner.events")
router = APIRouter(prefix="/api/events", tags=["events"])

MAX_EVENT_ID = 2**31 - 1


def parse_event_id(raw: str) -> int:
    """Accept only plain positive decimal ids that fit a database integer."""
    if not raw.isascii() or not raw.isdigit():
        raise BadRequestError(detail=f"Invalid event id: {raw!r}")
    event_id = int(raw)
    if event_id < 1 or event_id > MAX_EVENT_ID:
        raise BadRequestError(detail=f"Invalid event id: {raw!r}")
    return event_id


async def _load_event(storage: Store, event_id: int) -> Event:
    event = await storage.get_event(event_id)
    if event is None:
        logger.warning("Event not found: %s", event_id)
        raise NotFoundError(detail="Event not found")
    return event


@router.post("", response_model=Event)
async def create_event(user: AuthenticatedUser, req: CreateEventRequest, storage: Store) -> Event:
    logger.info("POST /api/events title=%s planner=%s", req.title, user.id)
    event = await storage.create_event(
        title=req.title,
        description=req.description,
        date_range=req.date_range,
        planner_id=user.id,
    )
    return event


@router.get("", response_model=List[Event])
async def list_my_events(user: AuthenticatedUser, storage: Store) -> List[Event]:
    events = await storage.get_user_events(user.id)
    logger.info("GET /api/events user=%s count=%d", user.id, len(events))
    return events


@router.get("/invite/{code}", response_model=Event)
async def get_event_by_invite(user: AuthenticatedUser, code: str, storage: Store) -> Event:
    logger.info("GET /api/events/invite/%s user=%s", code, user.id)
    event = await storage.get_event_by_invite_code(code)
    if event is None:
        logger.warning("No event for invite code %s", code)
        raise NotFoundError(detail="Event not found")
    return event


@router.get("/{event_id}", response_model=Event)
async def get_event(user: AuthenticatedUser, event_id: str, storage: Store) -> Event:
    logger.info("GET /api/events/%s user=%s", event_id, user.id)
    return await _load_event(storage, parse_event_id(event_id))


@router.post("/{event_id}/participants", response_model=Participant)
async def join_event(
    user: AuthenticatedUser,
    event_id: str,
    req: AvailabilityRequest,
    storage: Store,
) -> Participant:
    event = await _load_event(storage, parse_event_id(event_id))
    participant = await storage.add_participant(event.id, user.id, req.availability)
    logger.info("User %s joined event %s as participant %s", user.id, event.id, participant.id)
    return participant


@router.get("/{event_id}/participants", response_model=List[Participant])
async def list_participants(user: AuthenticatedUser, event_id: str, storage: Store) -> List[Participant]:
    participants = await storage.get_event_participants(parse_event_id(event_id))
    logger.info("GET /api/events/%s/participants count=%d", event_id, len(participants))
    return participants


@router.put("/{event_id}/availability")
async def update_my_availability(
    user: AuthenticatedUser,
    event_id: str,
    req: AvailabilityRequest,
    storage: Store,
) -> Response:
    parsed_id = parse_event_id(event_id)
    await storage.update_participant_availability(user.id, parsed_id, req.availability)
    logger.info("PUT /api/events/%s/availability user=%s days=%d", parsed_id, user.id, len(codec.decode_days(req.availability)))
    return Response(status_code=200)


@router.get("/{event_id}/summary", response_model=codec.AvailabilitySummary)
async def get_availability_summary(user: AuthenticatedUser, event_id: str, storage: Store) -> codec.AvailabilitySummary:
    event = await _load_event(storage, parse_event_id(event_id))
    participants = await storage.get_event_participants(event.id)
    return codec.summarize(event.id, participants)
