"""Events repository module: event rows and their secret sharing tokens."""

import logging
import secrets
import string
from datetime import UTC
from typing import Any

import psycopg
from psycopg import errors as pg_errors

from datevote.config import get_settings
from datevote.db.core import _use_connection
from datevote.errors import DatabaseError

logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id, organizer_id, name, details, location, suggested_time, "
    "duration_minutes, secret_token, created_at"
)

_TOKEN_ALPHABET = string.ascii_letters + string.digits


def _generate_secret_token(length: int = 32) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def _event_from_row(row) -> dict[str, Any]:
    return {
        "id": row[0],
        "organizer_id": row[1],
        "name": row[2],
        "details": row[3],
        "location": row[4],
        "suggested_time": row[5],
        "duration_minutes": row[6],
        "secret_token": row[7],
        "created_at": row[8].astimezone(UTC),
    }


async def insert_event(
    conn: psycopg.AsyncConnection,
    organizer_id: int,
    name: str,
    details: str | None = None,
    location: str | None = None,
    suggested_time: str | None = None,
    duration_minutes: int | None = None,
) -> dict[str, Any]:
    """Insert an event under a freshly drawn secret token.

    Must run inside a transaction; each attempt is its own savepoint so a token
    collision does not abort the caller's work.
    """
    settings = get_settings().scheduling
    for _ in range(settings.token_attempts):
        token = _generate_secret_token(settings.token_length)
        try:
            async with conn.transaction():
                row = await (await conn.execute(
                    f"""
                    INSERT INTO events (organizer_id, name, details, location, suggested_time, duration_minutes, secret_token)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING {EVENT_COLUMNS}
                    """,
                    (organizer_id, name, details, location, suggested_time, duration_minutes, token),
                )).fetchone()
            return _event_from_row(row)
        except pg_errors.UniqueViolation:
            logger.warning("Secret token collision for organizer %s, drawing another", organizer_id)
            continue
    raise DatabaseError(detail="Failed to generate unique event token")


async def fetch_event_by_id(event_id: int, conn: psycopg.AsyncConnection | None = None) -> dict[str, Any] | None:
    async with _use_connection(conn) as c:
        row = await (await c.execute(
            f"SELECT {EVENT_COLUMNS} FROM events WHERE id = %s",
            (event_id,),
        )).fetchone()
        return _event_from_row(row) if row else None


async def fetch_event_by_token(token: str, conn: psycopg.AsyncConnection | None = None) -> dict[str, Any] | None:
    async with _use_connection(conn) as c:
        row = await (await c.execute(
            f"SELECT {EVENT_COLUMNS} FROM events WHERE secret_token = %s",
            (token,),
        )).fetchone()
        return _event_from_row(row) if row else None


async def fetch_events_by_organizer(organizer_id: int) -> list[dict[str, Any]]:
    """Events of one organizer, newest first."""
    async with _use_connection(None) as conn:
        rows = await conn.execute(
            f"SELECT {EVENT_COLUMNS} FROM events WHERE organizer_id = %s ORDER BY created_at DESC, id DESC",
            (organizer_id,),
        )
        return [_event_from_row(row) async for row in rows]
