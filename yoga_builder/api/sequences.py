import uuid
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.db import get_session
from yoga_builder.core.security import CurrentUser, get_current_user
from yoga_builder.models.sequence import Sequence
from yoga_builder.schemas.sequence import (
    PublishIn,
    SequenceCreate,
    SequenceOrderIn,
    SequenceRead,
    SequenceUpdate,
    TimelineItemOut,
    TimelineOut,
)
from yoga_builder.services import poses as pose_service
from yoga_builder.services import sequences as sequence_service
from yoga_builder.services.durations import format_duration
from yoga_builder.services.sequence_html import export_filename, render_sequence_html
from yoga_builder.services.timeline import PoseCatalog, spoken_name, timeline_total


router = APIRouter(prefix="/sequences", tags=["sequences"])


def to_read(seq: Sequence) -> SequenceRead:
    total = sequence_service.sequence_total_seconds(seq)
    return SequenceRead(
        id=seq.id,
        user_id=seq.user_id,
        name=seq.name,
        sections=seq.sections or [],
        published_to_profile=seq.published_to_profile,
        display_order=seq.display_order,
        total_seconds=total,
        total_duration=format_duration(total),
        created_at=seq.created_at,
        updated_at=seq.updated_at,
    )


def to_timeline(seq: Sequence, catalog: PoseCatalog) -> TimelineOut:
    timeline = sequence_service.sequence_timeline(seq)
    total = timeline_total(timeline)
    return TimelineOut(
        sequence_id=seq.id,
        total_seconds=total,
        total_duration=format_duration(total),
        items=[
            TimelineItemOut(
                id=t.id,
                pose_instance_id=t.pose_instance.id,
                pose_variation_id=t.pose_instance.pose_variation_id,
                section_id=t.section_id,
                start_time=t.start_time,
                end_time=t.end_time,
                spoken_name=spoken_name(catalog.get(t.pose_instance.pose_variation_id)),
            )
            for t in timeline
        ],
    )


@router.get("", response_model=List[SequenceRead])
async def list_sequences(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return [to_read(s) for s in await sequence_service.list_sequences(session, user.id)]


@router.post("", response_model=SequenceRead, status_code=201)
async def create_sequence(
    payload: SequenceCreate,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await sequence_service.create_sequence(session, payload, user.id))


# declared before /{sequence_id} so "order" is not parsed as an id
@router.put("/order", response_model=List[SequenceRead])
async def reorder_sequences(
    payload: SequenceOrderIn,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    rows = await sequence_service.reorder_sequences(session, user.id, payload.sequence_ids)
    return [to_read(s) for s in rows]


@router.get("/{sequence_id}", response_model=SequenceRead)
async def get_sequence(
    sequence_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await sequence_service.get_sequence(session, sequence_id, user.id))


@router.patch("/{sequence_id}", response_model=SequenceRead)
async def update_sequence(
    sequence_id: uuid.UUID,
    payload: SequenceUpdate,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await sequence_service.update_sequence(session, sequence_id, payload, user.id))


@router.delete("/{sequence_id}", status_code=204)
async def delete_sequence(
    sequence_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await sequence_service.delete_sequence(session, sequence_id, user.id)


@router.post("/{sequence_id}/duplicate", response_model=SequenceRead, status_code=201)
async def duplicate_sequence(
    sequence_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await sequence_service.duplicate_sequence(session, sequence_id, user.id))


@router.put("/{sequence_id}/publish", response_model=SequenceRead)
async def publish_sequence(
    sequence_id: uuid.UUID,
    payload: PublishIn,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    seq = await sequence_service.set_published(session, sequence_id, user.id, payload.published)
    return to_read(seq)


@router.get("/{sequence_id}/timeline", response_model=TimelineOut)
async def get_timeline(
    sequence_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    seq = await sequence_service.get_sequence(session, sequence_id, user.id)
    catalog = await pose_service.build_pose_catalog(session)
    return to_timeline(seq, catalog)


@router.get("/{sequence_id}/export.html", response_class=HTMLResponse)
async def export_sequence_html(
    sequence_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    seq = await sequence_service.get_sequence(session, sequence_id, user.id)
    catalog = await pose_service.build_pose_catalog(session)
    html = render_sequence_html(seq.name, sequence_service.sequence_sections(seq), catalog)
    return HTMLResponse(
        html,
        headers={"Content-Disposition": f'attachment; filename="{export_filename(seq.name)}"'},
    )
