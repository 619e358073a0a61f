"""Event creation and lookup.

Events are resolved either by internal id (organizer dashboard) or by the
secret token shared with attendees.
"""

import logging
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

import psycopg
from psycopg import errors as pg_errors

from datevote import db
from datevote.config import get_settings
from datevote.errors import EventNotFoundError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _ordered_unique(dates: list[dict[str, Any]]) -> list[dict[str, Any]]:
    by_id = {d["id"]: d for d in dates}
    return sorted(by_id.values(), key=lambda d: (d["date"], d["id"]))


async def create_event(
    organizer_id: int,
    name: str,
    preferred_dates: Sequence[datetime | date],
    details: str | None = None,
    location: str | None = None,
    suggested_time: str | None = None,
    duration_minutes: int | None = None,
) -> dict[str, Any]:
    """Create an event and one organizer-suggested date per distinct day.

    Everything is written in one transaction.

    Raises:
        ValidationError: blank name, no preferred dates, too many dates or a
            non-positive duration.
        NotFoundError: the organizer does not exist.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError(detail="Event name must not be empty", field="name")
    if not preferred_dates:
        raise ValidationError(detail="At least one preferred date is required", field="preferred_dates")
    limit = get_settings().scheduling.max_dates_per_submission
    if len(preferred_dates) > limit:
        raise ValidationError(detail=f"At most {limit} preferred dates are allowed", field="preferred_dates")
    if duration_minutes is not None and duration_minutes <= 0:
        raise ValidationError(detail="Duration must be a positive number of minutes", field="duration_minutes")

    try:
        async with db.transaction() as conn:
            event = await db.insert_event(
                conn,
                organizer_id=organizer_id,
                name=name,
                details=details or None,
                location=location or None,
                suggested_time=suggested_time or None,
                duration_minutes=duration_minutes,
            )
            dates = [
                await db.get_or_create_date(conn, event["id"], when, suggested_by_organizer=True)
                for when in preferred_dates
            ]
    except pg_errors.ForeignKeyViolation:
        raise NotFoundError(
            detail="Organizer not found",
            error_code="ORGANIZER_NOT_FOUND",
            organizer_id=organizer_id,
        )

    event["dates"] = _ordered_unique(dates)
    logger.info(
        "Created event id=%s organizer=%s dates=%d", event["id"], organizer_id, len(event["dates"])
    )
    return event


async def require_event(event_id: int, conn: psycopg.AsyncConnection | None = None) -> dict[str, Any]:
    event = await db.fetch_event_by_id(event_id, conn)
    if not event:
        logger.warning("Event not found: id=%s", event_id)
        raise EventNotFoundError(event_id=event_id)
    return event


async def get_event_by_token(token: str) -> dict[str, Any]:
    """Resolve the attendee-facing view of an event, dates ascending."""
    event = await db.fetch_event_by_token(token)
    if not event:
        logger.warning("Event not found for token")
        raise EventNotFoundError()
    event["dates"] = _ordered_unique(await db.list_dates(event["id"]))
    return event


async def get_events_by_organizer(organizer_id: int) -> list[dict[str, Any]]:
    """All events of an organizer, each with its (possibly empty) date list."""
    events = await db.fetch_events_by_organizer(organizer_id)
    dates = await db.list_dates_for_events([e["id"] for e in events])
    for event in events:
        event["dates"] = _ordered_unique(dates.get(event["id"], []))
    return events
