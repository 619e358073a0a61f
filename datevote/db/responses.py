"""Attendee responses and their per-date availability scores."""

from datetime import UTC
from typing import Any

import psycopg
from psycopg import errors as pg_errors

from datevote.db.core import _use_connection
from datevote.errors import ValidationError

RESPONSE_COLUMNS = "id, event_id, attendee_name, attendee_email, created_at"


def _response_from_row(row) -> dict[str, Any]:
    return {
        "id": row[0],
        "event_id": row[1],
        "attendee_name": row[2],
        "attendee_email": row[3],
        "created_at": row[4].astimezone(UTC),
    }


async def insert_response(
    conn: psycopg.AsyncConnection,
    event_id: int,
    attendee_name: str,
    attendee_email: str | None = None,
) -> dict[str, Any]:
    row = await (await conn.execute(
        f"""
        INSERT INTO attendee_responses (event_id, attendee_name, attendee_email)
        VALUES (%s, %s, %s)
        RETURNING {RESPONSE_COLUMNS}
        """,
        (event_id, attendee_name, attendee_email),
    )).fetchone()
    return _response_from_row(row)


async def insert_availability(
    conn: psycopg.AsyncConnection,
    response_id: int,
    event_date_id: int,
    score: int,
) -> int:
    """Store one score; returns the new row id.

    A second score for the same (response, date) pair is rejected, never merged.
    """
    try:
        row = await (await conn.execute(
            """
            INSERT INTO date_availabilities (attendee_response_id, event_date_id, score)
            VALUES (%s, %s, %s)
            RETURNING id
            """,
            (response_id, event_date_id, score),
        )).fetchone()
    except pg_errors.UniqueViolation:
        raise ValidationError(
            detail="The same date was scored more than once",
            event_date_id=event_date_id,
        )
    except pg_errors.CheckViolation:
        raise ValidationError(detail="Score must be between 1 and 5", score=score)
    return row[0]


async def fetch_availability_rows(event_id: int, conn: psycopg.AsyncConnection | None = None) -> list[dict[str, Any]]:
    """Every candidate date of the event joined with its scores.

    Dates nobody scored yet appear once with ``attendee_name`` and ``score``
    set to None.
    """
    async with _use_connection(conn) as c:
        rows = await c.execute(
            """
            SELECT d.id, d.date, d.suggested_by_organizer, r.attendee_name, a.score
            FROM event_dates d
            LEFT JOIN date_availabilities a ON a.event_date_id = d.id
            LEFT JOIN attendee_responses r ON r.id = a.attendee_response_id
            WHERE d.event_id = %s
            ORDER BY d.date ASC, d.id ASC, a.id ASC
            """,
            (event_id,),
        )
        return [
            {
                "date_id": row[0],
                "date": row[1].astimezone(UTC),
                "suggested_by_organizer": row[2],
                "attendee_name": row[3],
                "score": row[4],
            }
            async for row in rows
        ]


async def count_responses(event_id: int, conn: psycopg.AsyncConnection | None = None) -> int:
    async with _use_connection(conn) as c:
        row = await (await c.execute(
            "SELECT COUNT(*) FROM attendee_responses WHERE event_id = %s",
            (event_id,),
        )).fetchone()
        return row[0] if row else 0
