from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.models.sequence import Sequence
from yoga_builder.schemas.sequence import (
    SequenceCreate,
    SequenceUpdate,
    Section,
    dump_sections,
    load_sections,
)
from yoga_builder.services.errors import NotFoundError, ValidationError
from yoga_builder.services.timeline import (
    TimelineItem,
    calculate_sequence_duration,
    flatten_sequence_to_timeline,
)


logger = logging.getLogger(__name__)


async def list_sequences(session: AsyncSession, user_id: uuid.UUID) -> list[Sequence]:
    rows = await session.execute(
        select(Sequence)
        .where(Sequence.user_id == user_id)
        .order_by(Sequence.display_order, Sequence.name)
    )
    return list(rows.scalars().all())


async def list_published(session: AsyncSession, user_id: uuid.UUID) -> list[Sequence]:
    rows = await session.execute(
        select(Sequence)
        .where(Sequence.user_id == user_id, Sequence.published_to_profile.is_(True))
        .order_by(Sequence.display_order, Sequence.name)
    )
    return list(rows.scalars().all())


async def get_sequence(session: AsyncSession, sequence_id: uuid.UUID, user_id: uuid.UUID) -> Sequence:
    seq = await session.scalar(
        select(Sequence).where(Sequence.id == sequence_id, Sequence.user_id == user_id)
    )
    if not seq:
        raise NotFoundError("Sequence not found")
    return seq


async def get_viewable_sequence(
    session: AsyncSession,
    sequence_id: uuid.UUID,
    viewer_id: Optional[uuid.UUID] = None,
) -> Sequence:
    """Owner sees everything, anyone else only sequences published to a profile."""
    seq = await session.get(Sequence, sequence_id)
    if not seq:
        raise NotFoundError("Sequence not found")
    if seq.user_id == viewer_id or seq.published_to_profile:
        return seq
    # hide existence from non-owners
    raise NotFoundError("Sequence not found")


async def _next_display_order(session: AsyncSession, user_id: uuid.UUID) -> int:
    current = await session.scalar(
        select(func.max(Sequence.display_order)).where(Sequence.user_id == user_id)
    )
    return 0 if current is None else current + 1


async def create_sequence(session: AsyncSession, payload: SequenceCreate, user_id: uuid.UUID) -> Sequence:
    seq = Sequence(
        user_id=user_id,
        name=payload.name.strip(),
        sections=dump_sections(payload.sections),
        published_to_profile=payload.published_to_profile,
        display_order=await _next_display_order(session, user_id),
    )
    session.add(seq)
    await session.commit()
    await session.refresh(seq)
    logger.info("Sequence %s created for user %s", seq.id, user_id)
    return seq


async def update_sequence(
    session: AsyncSession,
    sequence_id: uuid.UUID,
    payload: SequenceUpdate,
    user_id: uuid.UUID,
) -> Sequence:
    seq = await get_sequence(session, sequence_id, user_id)
    if payload.name is not None:
        seq.name = payload.name.strip()
    if payload.sections is not None:
        seq.sections = dump_sections(payload.sections)
    if payload.published_to_profile is not None:
        seq.published_to_profile = payload.published_to_profile
    await session.commit()
    await session.refresh(seq)
    return seq


async def delete_sequence(session: AsyncSession, sequence_id: uuid.UUID, user_id: uuid.UUID) -> None:
    seq = await get_sequence(session, sequence_id, user_id)
    await session.delete(seq)
    await session.commit()
    logger.info("Sequence %s deleted", sequence_id)


async def duplicate_sequence(session: AsyncSession, sequence_id: uuid.UUID, user_id: uuid.UUID) -> Sequence:
    source = await get_sequence(session, sequence_id, user_id)
    copy = Sequence(
        user_id=user_id,
        name=f"{source.name} (Copy)",
        sections=list(source.sections or []),
        published_to_profile=False,
        display_order=await _next_display_order(session, user_id),
    )
    session.add(copy)
    await session.commit()
    await session.refresh(copy)
    return copy


async def reorder_sequences(
    session: AsyncSession,
    user_id: uuid.UUID,
    sequence_ids: list[uuid.UUID],
) -> list[Sequence]:
    """Apply a new display order. Ids must be exactly the user's sequences."""
    owned = {s.id: s for s in await list_sequences(session, user_id)}
    if len(set(sequence_ids)) != len(sequence_ids) or set(sequence_ids) != set(owned):
        raise ValidationError("Order must list each of your sequences exactly once")

    for position, seq_id in enumerate(sequence_ids):
        owned[seq_id].display_order = position
    await session.commit()
    return await list_sequences(session, user_id)


async def set_published(
    session: AsyncSession,
    sequence_id: uuid.UUID,
    user_id: uuid.UUID,
    published: bool,
) -> Sequence:
    seq = await get_sequence(session, sequence_id, user_id)
    seq.published_to_profile = published
    await session.commit()
    await session.refresh(seq)
    return seq


def sequence_sections(seq: Sequence) -> list[Section]:
    return load_sections(seq.sections)


def sequence_total_seconds(seq: Sequence) -> int:
    return calculate_sequence_duration(sequence_sections(seq))


def sequence_timeline(seq: Sequence) -> list[TimelineItem]:
    return flatten_sequence_to_timeline(sequence_sections(seq))
