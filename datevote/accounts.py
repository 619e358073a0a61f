"""Organizer accounts: email/password signup and login, Google sign-in."""

import hashlib
import hmac
import logging
from typing import Any

from datevote import db
from datevote.errors import DatabaseError, UnauthorizedError

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid email or password"


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


async def create_user(
    email: str,
    name: str,
    password: str | None = None,
    google_id: str | None = None,
) -> dict[str, Any]:
    password_hash = _hash_password(password) if password else None
    user = await db.insert_user(email=email, name=name, password_hash=password_hash, google_id=google_id)
    logger.info("Created user id=%s", user["id"])
    return user


async def login(email: str, password: str) -> dict[str, Any]:
    user = await db.fetch_user_by_email(email)
    if not user or not user["password_hash"]:
        raise UnauthorizedError(detail=_INVALID_CREDENTIALS)
    if not hmac.compare_digest(_hash_password(password), user["password_hash"]):
        logger.warning("Wrong password for user id=%s", user["id"])
        raise UnauthorizedError(detail=_INVALID_CREDENTIALS)
    return user


async def google_login(google_id: str, email: str, name: str) -> dict[str, Any]:
    """Find the user by Google id, else link the id to the account with that email, else sign up."""
    user = await db.fetch_user_by_google_id(google_id)
    if user:
        return user

    existing = await db.fetch_user_by_email(email)
    if existing:
        linked = await db.link_google_id(existing["id"], google_id, name)
        if not linked:
            raise DatabaseError(detail="Failed to link Google account")
        logger.info("Linked Google account to user id=%s", existing["id"])
        return linked

    return await create_user(email=email, name=name, google_id=google_id)
