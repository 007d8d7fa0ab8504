import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PoseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    create_default_variation: bool = True


class PoseUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class PoseRead(BaseModel):
    id: uuid.UUID
    name: str
    author_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


def _check_cues(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return v
    cleaned = [c.strip() for c in v]
    if len(cleaned) not in (0, 3):
        raise ValueError("transitional_cues must be empty or contain exactly 3 cues")
    if any(not c for c in cleaned):
        raise ValueError("transitional cues cannot be blank")
    return cleaned


class VariationCreate(BaseModel):
    pose_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=200)
    is_default: bool = False
    cue_1: Optional[str] = None
    cue_2: Optional[str] = None
    cue_3: Optional[str] = None
    breath_transition: Optional[str] = None
    transitional_cues: list[str] = Field(default_factory=list)

    @field_validator("transitional_cues")
    @classmethod
    def validate_cues(cls, v):
        return _check_cues(v)


class VariationUpdate(BaseModel):
    pose_id: Optional[uuid.UUID] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    is_default: Optional[bool] = None
    cue_1: Optional[str] = None
    cue_2: Optional[str] = None
    cue_3: Optional[str] = None
    breath_transition: Optional[str] = None
    transitional_cues: Optional[list[str]] = None

    @field_validator("transitional_cues")
    @classmethod
    def validate_cues(cls, v):
        return _check_cues(v)


class VariationRead(BaseModel):
    id: uuid.UUID
    pose_id: uuid.UUID
    name: str
    is_default: bool
    author_id: Optional[uuid.UUID]
    image_url: Optional[str]
    cue_1: Optional[str]
    cue_2: Optional[str]
    cue_3: Optional[str]
    breath_transition: Optional[str]
    transitional_cues: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
