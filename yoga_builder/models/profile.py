import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from yoga_builder.models.base import Base, JSONType


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    # id of the user in the hosted auth service
    user_id: Mapped[uuid.UUID] = mapped_column(unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), default="")
    bio: Mapped[str] = mapped_column(Text, default="")
    email: Mapped[str] = mapped_column(String(320))
    events: Mapped[list[dict]] = mapped_column(JSONType, default=list)
    share_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True, index=True, nullable=True)
    venmo_username: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    spotify_playlist_urls: Mapped[list[str]] = mapped_column(JSONType, default=list)
    profile_photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
