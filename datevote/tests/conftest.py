import copy
import os
import sys
from contextlib import asynccontextmanager
from datetime import UTC, datetime

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest
from fastapi.testclient import TestClient
from psycopg import errors as pg_errors

from datevote import db
from datevote.config import clear_settings_cache
from datevote.daykey import as_timestamp, day_of
from datevote.errors import ConflictError, EventNotFoundError, ValidationError


class FakeStore:
    """In-memory stand-in for the ``datevote.db`` repository functions.

    Honors the same constraints as the SQL schema (one date per event and day,
    one score per response and date) and rolls back on errors raised inside
    ``transaction()``.
    """

    def __init__(self):
        self.users: list[dict] = []
        self.events: list[dict] = []
        self.dates: list[dict] = []
        self.responses: list[dict] = []
        self.availabilities: list[dict] = []
        self._next_id = 1

    def _id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def _tables(self):
        return (self.users, self.events, self.dates, self.responses, self.availabilities)

    @asynccontextmanager
    async def transaction(self):
        saved = copy.deepcopy(self._tables())
        try:
            yield self
        except BaseException:
            (self.users, self.events, self.dates, self.responses, self.availabilities) = saved
            raise

    @asynccontextmanager
    async def snapshot(self):
        yield self

    async def ping(self):
        return True

    def get_pool_stats(self):
        return {"status": "not_initialized"}

    # users
    async def insert_user(self, email, name, password_hash=None, google_id=None):
        if any(u["email"] == email for u in self.users):
            raise ConflictError(detail="A user with this email already exists", email=email)
        user = {
            "id": self._id(),
            "email": email,
            "password_hash": password_hash,
            "google_id": google_id,
            "name": name,
            "created_at": datetime.now(UTC),
        }
        self.users.append(user)
        return dict(user)

    async def fetch_user_by_email(self, email):
        return next((dict(u) for u in self.users if u["email"] == email), None)

    async def fetch_user_by_google_id(self, google_id):
        return next((dict(u) for u in self.users if u["google_id"] == google_id), None)

    async def link_google_id(self, user_id, google_id, name):
        for u in self.users:
            if u["id"] == user_id:
                u["google_id"] = google_id
                u["name"] = name
                return dict(u)
        return None

    # events
    async def insert_event(self, conn, organizer_id, name, details=None, location=None,
                           suggested_time=None, duration_minutes=None):
        if not any(u["id"] == organizer_id for u in self.users):
            raise pg_errors.ForeignKeyViolation("organizer does not exist")
        event = {
            "id": self._id(),
            "organizer_id": organizer_id,
            "name": name,
            "details": details,
            "location": location,
            "suggested_time": suggested_time,
            "duration_minutes": duration_minutes,
            "secret_token": f"token{self._next_id:027d}",
            "created_at": datetime.now(UTC),
        }
        self.events.append(event)
        return dict(event)

    async def fetch_event_by_id(self, event_id, conn=None):
        return next((dict(e) for e in self.events if e["id"] == event_id), None)

    async def fetch_event_by_token(self, token, conn=None):
        return next((dict(e) for e in self.events if e["secret_token"] == token), None)

    async def fetch_events_by_organizer(self, organizer_id):
        found = [dict(e) for e in self.events if e["organizer_id"] == organizer_id]
        return sorted(found, key=lambda e: e["id"], reverse=True)

    # dates
    async def list_dates(self, event_id, conn=None):
        found = [dict(d) for d in self.dates if d["event_id"] == event_id]
        return sorted(found, key=lambda d: (d["date"], d["id"]))

    async def list_dates_for_events(self, event_ids):
        return {event_id: await self.list_dates(event_id) for event_id in event_ids}

    async def get_or_create_date(self, conn, event_id, when, suggested_by_organizer):
        if not any(e["id"] == event_id for e in self.events):
            raise EventNotFoundError(event_id=event_id)
        when = as_timestamp(when)
        for d in self.dates:
            if d["event_id"] == event_id and day_of(d["date"]) == day_of(when):
                return dict(d)
        candidate = {
            "id": self._id(),
            "event_id": event_id,
            "date": when,
            "suggested_by_organizer": suggested_by_organizer,
            "created_at": datetime.now(UTC),
        }
        self.dates.append(candidate)
        return dict(candidate)

    # responses
    async def insert_response(self, conn, event_id, attendee_name, attendee_email=None):
        response = {
            "id": self._id(),
            "event_id": event_id,
            "attendee_name": attendee_name,
            "attendee_email": attendee_email,
            "created_at": datetime.now(UTC),
        }
        self.responses.append(response)
        return dict(response)

    async def insert_availability(self, conn, response_id, event_date_id, score):
        if any(
            a["attendee_response_id"] == response_id and a["event_date_id"] == event_date_id
            for a in self.availabilities
        ):
            raise ValidationError(detail="The same date was scored more than once")
        row_id = self._id()
        self.availabilities.append({
            "id": row_id,
            "attendee_response_id": response_id,
            "event_date_id": event_date_id,
            "score": score,
        })
        return row_id

    async def fetch_availability_rows(self, event_id, conn=None):
        rows = []
        names = {r["id"]: r["attendee_name"] for r in self.responses}
        for d in await self.list_dates(event_id):
            scores = [a for a in self.availabilities if a["event_date_id"] == d["id"]]
            if not scores:
                rows.append({
                    "date_id": d["id"],
                    "date": d["date"],
                    "suggested_by_organizer": d["suggested_by_organizer"],
                    "attendee_name": None,
                    "score": None,
                })
            for a in scores:
                rows.append({
                    "date_id": d["id"],
                    "date": d["date"],
                    "suggested_by_organizer": d["suggested_by_organizer"],
                    "attendee_name": names[a["attendee_response_id"]],
                    "score": a["score"],
                })
        return rows

    async def count_responses(self, event_id, conn=None):
        return sum(1 for r in self.responses if r["event_id"] == event_id)

    def dates_of(self, event_id):
        return [d for d in self.dates if d["event_id"] == event_id]


_PATCHED = (
    "transaction",
    "snapshot",
    "ping",
    "get_pool_stats",
    "insert_user",
    "fetch_user_by_email",
    "fetch_user_by_google_id",
    "link_google_id",
    "insert_event",
    "fetch_event_by_id",
    "fetch_event_by_token",
    "fetch_events_by_organizer",
    "list_dates",
    "list_dates_for_events",
    "get_or_create_date",
    "insert_response",
    "insert_availability",
    "fetch_availability_rows",
    "count_responses",
)


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    for name in _PATCHED:
        monkeypatch.setattr(db, name, getattr(fake, name))
    return fake


@pytest.fixture
def organizer(store):
    store.users.append({
        "id": 999,
        "email": "organizer@example.com",
        "password_hash": None,
        "google_id": None,
        "name": "Olga Organizer",
        "created_at": datetime.now(UTC),
    })
    return store.users[-1]


@pytest.fixture
def client(monkeypatch, store):
    monkeypatch.setenv("ENABLE_DB", "0")
    clear_settings_cache()

    import datevote.main as main

    with TestClient(main.app) as c:
        yield c
    clear_settings_cache()
