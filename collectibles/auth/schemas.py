"""Pydantic schemas for sign-up, sign-in and sessions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credentials(BaseModel):
    """Email and password submitted to sign up or sign in."""

    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=1024)

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    created_at: datetime


class SessionResponse(BaseModel):
    """Returned on sign-in; the token is only shown once."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class CurrentSession(BaseModel):
    """The session attached to the current request, if any."""

    authenticated: bool
    user: UserResponse | None = None
