"""Recording attendee submissions.

A submission names the event by its secret token and carries a score per
date, plus optional bare date suggestions. Dates the event does not have yet
are added to it as attendee-suggested; the response, the new dates and the
scores are written in a single transaction.
"""

import logging
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from datevote import db
from datevote.config import get_settings
from datevote.daykey import day_key
from datevote.errors import EventNotFoundError, ValidationError
from datevote.models.availability import DateScore

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5


def _validate_submission(
    attendee_name: str,
    date_availabilities: Sequence[DateScore],
    new_dates: Sequence[datetime | date],
) -> str:
    name = (attendee_name or "").strip()
    if not name:
        raise ValidationError(detail="Attendee name must not be empty", field="attendee_name")

    limit = get_settings().scheduling.max_dates_per_submission
    if len(date_availabilities) + len(new_dates) > limit:
        raise ValidationError(detail=f"At most {limit} dates are allowed per response")

    seen: set[str] = set()
    for entry in date_availabilities:
        score = entry.score
        if isinstance(score, bool) or not isinstance(score, int) or not MIN_SCORE <= score <= MAX_SCORE:
            raise ValidationError(
                detail=f"Score must be an integer between {MIN_SCORE} and {MAX_SCORE}",
                field="score",
                score=score,
            )
        key = day_key(entry.date)
        if key in seen:
            raise ValidationError(detail=f"Date {key} was scored more than once", field="date_availabilities")
        seen.add(key)
    return name


def _days_in_lock_order(dates: Sequence[datetime | date]) -> list[tuple[str, datetime | date]]:
    """One timestamp per calendar day, ascending by day key.

    Concurrent submissions resolve the days they share in the same order, so
    two inserts of new days never wait on each other in a cycle. The first
    timestamp given for a day is the one stored.
    """
    first: dict[str, datetime | date] = {}
    for when in dates:
        first.setdefault(day_key(when), when)
    return sorted(first.items())


async def record_response(
    event_token: str,
    attendee_name: str,
    date_availabilities: Sequence[DateScore],
    attendee_email: str | None = None,
    new_dates: Sequence[datetime | date] | None = None,
) -> dict[str, Any]:
    """Store one attendee submission and return the created response.

    Raises:
        EventNotFoundError: no event has ``event_token``.
        ValidationError: blank name, a score outside 1-5, or one calendar day
            scored twice. Nothing is written in that case.
    """
    new_dates = list(new_dates or [])
    event = await db.fetch_event_by_token(event_token)
    if not event:
        logger.warning("Response submitted for unknown event token")
        raise EventNotFoundError()

    name = _validate_submission(attendee_name, date_availabilities, new_dates)

    days = _days_in_lock_order([*new_dates, *(entry.date for entry in date_availabilities)])

    async with db.transaction() as conn:
        response = await db.insert_response(conn, event["id"], name, attendee_email or None)
        resolved = {}
        for key, when in days:
            candidate = await db.get_or_create_date(conn, event["id"], when, suggested_by_organizer=False)
            resolved[key] = candidate["id"]
        for entry in date_availabilities:
            await db.insert_availability(conn, response["id"], resolved[day_key(entry.date)], entry.score)

    logger.info(
        "Recorded response id=%s event=%s scores=%d new_dates=%d",
        response["id"],
        event["id"],
        len(date_availabilities),
        len(new_dates),
    )
    return response
