from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, StrictInt, field_validator

from datevote.models.events import Event

SortOrder = Literal["date", "score"]

SCORE_LABELS: dict[int, str] = {
    1: "Can't make it",
    2: "Difficult",
    3: "Okay",
    4: "Good",
    5: "Perfect",
}


class DateScore(BaseModel):
    date: datetime
    score: StrictInt


class CreateResponseRequest(BaseModel):
    attendee_name: str = Field(max_length=255)
    attendee_email: EmailStr | None = None
    date_availabilities: list[DateScore] = Field(default_factory=list)
    new_dates: list[datetime] | None = None

    @field_validator("attendee_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class AttendeeResponse(BaseModel):
    id: int
    event_id: int
    attendee_name: str
    attendee_email: str | None = None
    created_at: datetime


class AttendeeScore(BaseModel):
    attendee_name: str
    score: int


class DateAvailability(BaseModel):
    id: int
    date: datetime
    suggested_by_organizer: bool
    responses: list[AttendeeScore]
    average_score: float
    response_count: int


class AvailabilitySummary(BaseModel):
    total_dates: int
    total_responses: int
    max_responses: int
    best_score: float | None = None
    best_date: datetime | None = None


class EventAvailabilityResponse(BaseModel):
    event: Event
    dates: list[DateAvailability]
    summary: AvailabilitySummary
