"""Candidate dates repository: the per-event catalog of proposed days.

At most one candidate date exists per event and calendar day; the
``ux_event_dates_event_day`` constraint enforces it across concurrent requests
and :func:`get_or_create_date` turns a lost race into a re-read.
"""

import logging
from collections import defaultdict
from datetime import UTC, date, datetime
from typing import Any

import psycopg
from psycopg import errors as pg_errors

from datevote.config import get_settings
from datevote.daykey import as_timestamp, day_of
from datevote.db.core import _use_connection
from datevote.errors import DatabaseError, EventNotFoundError

logger = logging.getLogger(__name__)

DATE_COLUMNS = "id, event_id, date, suggested_by_organizer, created_at"


def _date_from_row(row) -> dict[str, Any]:
    return {
        "id": row[0],
        "event_id": row[1],
        "date": row[2].astimezone(UTC),
        "suggested_by_organizer": row[3],
        "created_at": row[4].astimezone(UTC),
    }


async def list_dates(event_id: int, conn: psycopg.AsyncConnection | None = None) -> list[dict[str, Any]]:
    """Candidate dates of an event, ascending by timestamp."""
    async with _use_connection(conn) as c:
        rows = await c.execute(
            f"SELECT {DATE_COLUMNS} FROM event_dates WHERE event_id = %s ORDER BY date ASC, id ASC",
            (event_id,),
        )
        return [_date_from_row(row) async for row in rows]


async def list_dates_for_events(event_ids: list[int]) -> dict[int, list[dict[str, Any]]]:
    """Candidate dates for several events at once, grouped by event id."""
    grouped: dict[int, list[dict[str, Any]]] = defaultdict(list)
    if not event_ids:
        return grouped
    async with _use_connection(None) as conn:
        rows = await conn.execute(
            f"SELECT {DATE_COLUMNS} FROM event_dates WHERE event_id = ANY(%s) ORDER BY event_id, date ASC, id ASC",
            (list(event_ids),),
        )
        async for row in rows:
            grouped[row[1]].append(_date_from_row(row))
    return grouped


async def find_date_by_day(conn: psycopg.AsyncConnection, event_id: int, day: date) -> dict[str, Any] | None:
    row = await (await conn.execute(
        f"SELECT {DATE_COLUMNS} FROM event_dates WHERE event_id = %s AND day_key = %s",
        (event_id, day),
    )).fetchone()
    return _date_from_row(row) if row else None


async def get_or_create_date(
    conn: psycopg.AsyncConnection,
    event_id: int,
    when: datetime | date,
    suggested_by_organizer: bool,
) -> dict[str, Any]:
    """Return the event's candidate date for the day of ``when``, creating it if missing.

    An existing date is returned unchanged, so its ``suggested_by_organizer``
    flag is never rewritten. Must run inside a transaction: the insert is
    attempted in a savepoint, and a unique violation (another request created
    the same day first) rolls back only that savepoint before the lookup is
    repeated.

    Raises:
        EventNotFoundError: ``event_id`` does not reference an event.
        DatabaseError: the day could neither be found nor inserted after the
            configured number of retries.
    """
    when = as_timestamp(when)
    day = day_of(when)
    retries = get_settings().scheduling.date_conflict_retries

    for _ in range(retries + 1):
        existing = await find_date_by_day(conn, event_id, day)
        if existing:
            return existing
        try:
            async with conn.transaction():
                row = await (await conn.execute(
                    f"""
                    INSERT INTO event_dates (event_id, date, day_key, suggested_by_organizer)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {DATE_COLUMNS}
                    """,
                    (event_id, when, day, suggested_by_organizer),
                )).fetchone()
        except pg_errors.UniqueViolation:
            logger.info("Date %s of event %s was created concurrently, re-reading", day, event_id)
            continue
        except pg_errors.ForeignKeyViolation:
            raise EventNotFoundError(event_id=event_id)
        logger.info(
            "Added date %s to event %s (organizer=%s)", day, event_id, suggested_by_organizer
        )
        return _date_from_row(row)

    raise DatabaseError(
        detail="Candidate date could not be resolved",
        event_id=event_id,
        day=day.isoformat(),
    )
