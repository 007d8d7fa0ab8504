from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yoga_builder.models.base import Base, JSONType


class Pose(Base):
    __tablename__ = "poses"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    variations: Mapped[List["PoseVariation"]] = relationship(
        back_populates="pose",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PoseVariation.name",
    )


class PoseVariation(Base):
    __tablename__ = "pose_variations"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    pose_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("poses.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200))
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)

    # public URL inside the pose-images bucket
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    cue_1: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cue_2: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cue_3: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    breath_transition: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # either empty or exactly three bottom-to-top cues
    transitional_cues: Mapped[list[str]] = mapped_column(JSONType, default=list)

    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    pose: Mapped["Pose"] = relationship(back_populates="variations")
