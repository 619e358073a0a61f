from datetime import datetime

from pydantic import BaseModel, Field


class CandidateDate(BaseModel):
    id: int
    event_id: int
    date: datetime
    suggested_by_organizer: bool
    created_at: datetime


class Event(BaseModel):
    id: int
    organizer_id: int
    name: str
    details: str | None = None
    location: str | None = None
    suggested_time: str | None = None
    duration_minutes: int | None = None
    secret_token: str
    created_at: datetime


class EventWithDates(Event):
    dates: list[CandidateDate] = []


class CreateEventRequest(BaseModel):
    organizer_id: int
    name: str = Field(max_length=255)
    details: str | None = None
    location: str | None = Field(default=None, max_length=500)
    suggested_time: str | None = Field(default=None, max_length=50)
    duration_minutes: int | None = Field(default=None, gt=0)
    preferred_dates: list[datetime]
