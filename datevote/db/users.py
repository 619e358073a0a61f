"""Users repository module for organizer accounts."""

from datetime import UTC
from typing import Any

from psycopg import errors as pg_errors

from datevote.db.core import _get_connection
from datevote.errors import ConflictError

USER_COLUMNS = "id, email, password_hash, google_id, name, created_at"


def _user_from_row(row) -> dict[str, Any]:
    return {
        "id": row[0],
        "email": row[1],
        "password_hash": row[2],
        "google_id": row[3],
        "name": row[4],
        "created_at": row[5].astimezone(UTC),
    }


async def insert_user(
    email: str,
    name: str,
    password_hash: str | None = None,
    google_id: str | None = None,
) -> dict[str, Any]:
    async with _get_connection() as conn:
        try:
            row = await (await conn.execute(
                f"""
                INSERT INTO users (email, password_hash, google_id, name)
                VALUES (%s, %s, %s, %s)
                RETURNING {USER_COLUMNS}
                """,
                (email, password_hash, google_id, name),
            )).fetchone()
        except pg_errors.UniqueViolation as e:
            if e.diag.constraint_name == "ux_users_google_id":
                raise ConflictError(detail="This Google account is already linked to a user")
            raise ConflictError(detail="A user with this email already exists", email=email)
        return _user_from_row(row)


async def fetch_user_by_email(email: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (await conn.execute(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = %s",
            (email,),
        )).fetchone()
        return _user_from_row(row) if row else None


async def fetch_user_by_google_id(google_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (await conn.execute(
            f"SELECT {USER_COLUMNS} FROM users WHERE google_id = %s",
            (google_id,),
        )).fetchone()
        return _user_from_row(row) if row else None


async def link_google_id(user_id: int, google_id: str, name: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        try:
            row = await (await conn.execute(
                f"UPDATE users SET google_id = %s, name = %s WHERE id = %s RETURNING {USER_COLUMNS}",
                (google_id, name, user_id),
            )).fetchone()
        except pg_errors.UniqueViolation:
            raise ConflictError(detail="This Google account is already linked to a user")
        return _user_from_row(row) if row else None
