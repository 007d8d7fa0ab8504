from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from yoga_builder.services.durations import parse_duration


class _CamelModel(BaseModel):
    # stored and served in the client's camelCase shape, python side is snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _new_id() -> str:
    return str(uuid.uuid4())


class PoseInstance(_CamelModel):
    type: Literal["pose_instance"] = "pose_instance"
    id: str = Field(default_factory=_new_id)
    pose_variation_id: str
    duration: str

    @field_validator("duration")
    @classmethod
    def _duration_parses(cls, v: str) -> str:
        parse_duration(v)
        return v.strip()


class ItemSubstitute(_CamelModel):
    round: int = Field(ge=1)
    item_index: int
    substitute_item: "SequenceItem"


class RoundOverride(_CamelModel):
    round: int = Field(ge=1)
    items: list["SequenceItem"] = Field(default_factory=list)
    sets: int = Field(default=1, ge=1)


class GroupBlock(_CamelModel):
    type: Literal["group_block"] = "group_block"
    id: str = Field(default_factory=_new_id)
    sets: int = Field(default=1, ge=1)
    items: list["SequenceItem"] = Field(default_factory=list)
    item_substitutes: list[ItemSubstitute] = Field(default_factory=list)
    round_overrides: list[RoundOverride] = Field(default_factory=list)


SequenceItem = Annotated[Union[PoseInstance, GroupBlock], Field(discriminator="type")]


class Section(_CamelModel):
    id: str = Field(default_factory=_new_id)
    name: str
    items: list[SequenceItem] = Field(default_factory=list)


ItemSubstitute.model_rebuild()
RoundOverride.model_rebuild()
GroupBlock.model_rebuild()
Section.model_rebuild()


def load_sections(raw: list[dict] | None) -> list[Section]:
    return [Section.model_validate(s) for s in (raw or [])]


def dump_sections(sections: list[Section]) -> list[dict]:
    return [s.model_dump(by_alias=True, mode="json") for s in sections]


class SequenceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sections: list[Section] = Field(default_factory=list)
    published_to_profile: bool = False


class SequenceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    sections: Optional[list[Section]] = None
    published_to_profile: Optional[bool] = None


class SequenceRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    sections: list[dict]
    published_to_profile: bool
    display_order: int
    total_seconds: int
    total_duration: str
    created_at: datetime
    updated_at: datetime


class SequenceOrderIn(BaseModel):
    sequence_ids: list[uuid.UUID]


class PublishIn(BaseModel):
    published: bool


class TimelineItemOut(BaseModel):
    id: str
    pose_instance_id: str
    pose_variation_id: str
    section_id: str
    start_time: int
    end_time: int
    spoken_name: Optional[str] = None


class TimelineOut(BaseModel):
    sequence_id: uuid.UUID
    total_seconds: int
    total_duration: str
    items: list[TimelineItemOut]
