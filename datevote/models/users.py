from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class User(BaseModel):
    id: int
    email: str
    google_id: str | None = None
    name: str
    created_at: datetime


class CreateUserRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=6)
    google_id: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class GoogleLoginRequest(BaseModel):
    google_id: str = Field(min_length=1)
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
