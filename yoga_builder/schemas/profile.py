import uuid
import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ClassEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = Field(..., min_length=1, max_length=200)
    is_recurring: bool = True
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)  # 0 = Sunday
    date: Optional[dt.date] = None
    start_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    end_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    location: Optional[str] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def _check_schedule(self) -> "ClassEvent":
        if self.is_recurring and self.day_of_week is None:
            raise ValueError("Recurring events need a day of week")
        if not self.is_recurring and self.date is None:
            raise ValueError("One-off events need a date")
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    bio: Optional[str] = None
    email: Optional[EmailStr] = None
    events: Optional[list[ClassEvent]] = None
    # "" resets to the default link (the user id)
    share_id: Optional[str] = None
    venmo_username: Optional[str] = Field(default=None, max_length=100)
    spotify_playlist_urls: Optional[list[HttpUrl]] = None

    @field_validator("share_id")
    @classmethod
    def _strip_share_id(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class ProfileRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    bio: str
    email: str
    events: list[dict]
    share_id: Optional[str]
    share_url: Optional[str] = None
    venmo_username: Optional[str]
    venmo_url: Optional[str] = None
    spotify_playlist_urls: list[str]
    profile_photo_url: Optional[str]
    is_admin: bool
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class AdminProfileRead(ProfileRead):
    is_banned: bool


class PublicSequenceSummary(BaseModel):
    id: uuid.UUID
    name: str
    total_seconds: int
    total_duration: str


class PublicProfileRead(BaseModel):
    name: str
    bio: str
    events: list[dict]
    share_id: str
    venmo_username: Optional[str]
    venmo_url: Optional[str]
    spotify_playlist_urls: list[str]
    profile_photo_url: Optional[str]
    sequences: list[PublicSequenceSummary]


class ContactIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    message: str = Field(..., min_length=1, max_length=5000)


class FlagIn(BaseModel):
    value: bool
