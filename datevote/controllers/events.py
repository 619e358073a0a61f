import logging
from typing import Any

from fastapi import APIRouter, Query

from datevote import aggregate, events, recorder
from datevote.models.availability import (
    SCORE_LABELS,
    AttendeeResponse,
    CreateResponseRequest,
    EventAvailabilityResponse,
    SortOrder,
)
from datevote.models.events import CreateEventRequest, EventWithDates

logger = logging.getLogger("datevote.events")
router = APIRouter(tags=["events"])


@router.post("/events", status_code=201, response_model=EventWithDates)
async def create_event(req: CreateEventRequest) -> dict[str, Any]:
    logger.info("POST /events organizer=%s dates=%d", req.organizer_id, len(req.preferred_dates))
    return await events.create_event(
        organizer_id=req.organizer_id,
        name=req.name,
        preferred_dates=req.preferred_dates,
        details=req.details,
        location=req.location,
        suggested_time=req.suggested_time,
        duration_minutes=req.duration_minutes,
    )


@router.get("/events/by-token/{token}", response_model=EventWithDates)
async def get_event_by_token(token: str) -> dict[str, Any]:
    return await events.get_event_by_token(token)


@router.post("/events/by-token/{token}/responses", status_code=201, response_model=AttendeeResponse)
async def create_attendee_response(token: str, req: CreateResponseRequest) -> dict[str, Any]:
    logger.info(
        "POST /events/by-token/.../responses scores=%d new_dates=%d",
        len(req.date_availabilities),
        len(req.new_dates or []),
    )
    return await recorder.record_response(
        event_token=token,
        attendee_name=req.attendee_name,
        attendee_email=req.attendee_email,
        date_availabilities=req.date_availabilities,
        new_dates=req.new_dates,
    )


@router.get("/events/{event_id}/availability", response_model=EventAvailabilityResponse)
async def get_event_availability(
    event_id: int,
    sort: SortOrder = Query("date", description="Order dates by 'date' (ascending) or 'score' (best first)"),
) -> dict[str, Any]:
    return await aggregate.get_event_availability(event_id, order=sort)


@router.get("/organizers/{organizer_id}/events", response_model=list[EventWithDates])
async def get_events_by_organizer(organizer_id: int) -> list[dict[str, Any]]:
    return await events.get_events_by_organizer(organizer_id)


@router.get("/score-guide")
async def score_guide() -> list[dict[str, Any]]:
    return [{"score": score, "label": label} for score, label in SCORE_LABELS.items()]
