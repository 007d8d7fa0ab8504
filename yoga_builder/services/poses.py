from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.config import settings
from yoga_builder.models.pose import Pose, PoseVariation
from yoga_builder.schemas.pose import PoseCreate, PoseUpdate, VariationCreate, VariationUpdate
from yoga_builder.services import images
from yoga_builder.services.errors import ConflictError, NotFoundError, PermissionDeniedError, StorageError
from yoga_builder.services.timeline import PoseCatalog, PoseNames


logger = logging.getLogger(__name__)


def default_variation_name(pose_name: str) -> str:
    return f"{pose_name} (Default)"


async def list_poses(session: AsyncSession) -> list[Pose]:
    rows = await session.execute(select(Pose).order_by(Pose.name))
    return list(rows.scalars().all())


async def get_pose(session: AsyncSession, pose_id: uuid.UUID) -> Pose:
    pose = await session.get(Pose, pose_id)
    if not pose:
        raise NotFoundError("Pose not found")
    return pose


async def create_pose(
    session: AsyncSession,
    payload: PoseCreate,
    *,
    author_id: Optional[uuid.UUID] = None,
) -> Pose:
    name = payload.name.strip()
    exists = await session.scalar(select(Pose).where(Pose.name == name))
    if exists:
        raise ConflictError("A pose with this name already exists")

    pose = Pose(name=name, author_id=author_id)
    session.add(pose)
    await session.flush()  # need pose.id

    if payload.create_default_variation:
        session.add(
            PoseVariation(
                pose_id=pose.id,
                name=default_variation_name(name),
                is_default=True,
                author_id=author_id,
                transitional_cues=[],
            )
        )

    await _commit(session, "A pose with this name already exists")
    await session.refresh(pose)
    logger.info("Pose %s created (%s)", pose.id, pose.name)
    return pose


def _check_can_edit(obj: Pose | PoseVariation, user_id: uuid.UUID, is_admin: bool) -> None:
    # library entries without an author are shared and editable by anyone signed in
    if is_admin or obj.author_id is None or obj.author_id == user_id:
        return
    raise PermissionDeniedError("You can only modify entries you created")


async def update_pose(
    session: AsyncSession,
    pose_id: uuid.UUID,
    payload: PoseUpdate,
    *,
    user_id: uuid.UUID,
    is_admin: bool = False,
) -> Pose:
    pose = await get_pose(session, pose_id)
    _check_can_edit(pose, user_id, is_admin)
    pose.name = payload.name.strip()
    await _commit(session, "A pose with this name already exists")
    await session.refresh(pose)
    return pose


async def delete_pose(
    session: AsyncSession,
    pose_id: uuid.UUID,
    *,
    user_id: uuid.UUID,
    is_admin: bool = False,
) -> None:
    pose = await get_pose(session, pose_id)
    _check_can_edit(pose, user_id, is_admin)
    # variations go with it (ON DELETE CASCADE)
    await session.delete(pose)
    await session.commit()
    logger.info("Pose %s deleted", pose_id)


async def list_variations(
    session: AsyncSession,
    pose_id: Optional[uuid.UUID] = None,
) -> list[PoseVariation]:
    stmt = select(PoseVariation).order_by(PoseVariation.name)
    if pose_id is not None:
        stmt = stmt.where(PoseVariation.pose_id == pose_id)
    rows = await session.execute(stmt)
    return list(rows.scalars().all())


async def get_variation(session: AsyncSession, variation_id: uuid.UUID) -> PoseVariation:
    variation = await session.get(PoseVariation, variation_id)
    if not variation:
        raise NotFoundError("Pose variation not found")
    return variation


async def _clear_other_defaults(session: AsyncSession, pose_id: uuid.UUID, keep_id: uuid.UUID) -> None:
    await session.execute(
        update(PoseVariation)
        .where(PoseVariation.pose_id == pose_id, PoseVariation.id != keep_id)
        .values(is_default=False)
    )


async def create_variation(
    session: AsyncSession,
    payload: VariationCreate,
    *,
    author_id: Optional[uuid.UUID] = None,
) -> PoseVariation:
    await get_pose(session, payload.pose_id)

    variation = PoseVariation(author_id=author_id, **payload.model_dump())
    session.add(variation)
    await session.flush()
    if variation.is_default:
        await _clear_other_defaults(session, variation.pose_id, variation.id)

    await session.commit()
    await session.refresh(variation)
    return variation


async def update_variation(
    session: AsyncSession,
    variation_id: uuid.UUID,
    payload: VariationUpdate,
    *,
    user_id: uuid.UUID,
    is_admin: bool = False,
) -> PoseVariation:
    variation = await get_variation(session, variation_id)
    _check_can_edit(variation, user_id, is_admin)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("pose_id") is not None:
        await get_pose(session, changes["pose_id"])
    for key, value in changes.items():
        if key in ("pose_id", "name", "is_default") and value is None:
            continue
        setattr(variation, key, value)

    await session.flush()
    if variation.is_default:
        await _clear_other_defaults(session, variation.pose_id, variation.id)

    await session.commit()
    await session.refresh(variation)
    return variation


async def delete_variation(
    session: AsyncSession,
    variation_id: uuid.UUID,
    *,
    user_id: uuid.UUID,
    is_admin: bool = False,
) -> None:
    variation = await get_variation(session, variation_id)
    _check_can_edit(variation, user_id, is_admin)
    await session.delete(variation)
    await session.commit()


async def build_pose_catalog(session: AsyncSession) -> PoseCatalog:
    """variation id -> (pose name, variation name) for names in timelines and exports."""
    rows = await session.execute(
        select(PoseVariation.id, PoseVariation.name, Pose.name).join(Pose, Pose.id == PoseVariation.pose_id)
    )
    return {
        str(variation_id): PoseNames(pose_name=pose_name, variation_name=variation_name)
        for variation_id, variation_name, pose_name in rows.all()
    }


async def _commit(session: AsyncSession, conflict_message: str) -> None:
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning("Integrity error: %s", e.orig)
        raise ConflictError(conflict_message) from e


async def set_variation_image(
    session: AsyncSession,
    variation_id: uuid.UUID,
    data: bytes,
    content_type: str | None,
    *,
    user_id: uuid.UUID,
    is_admin: bool = False,
) -> PoseVariation:
    variation = await get_variation(session, variation_id)
    _check_can_edit(variation, user_id, is_admin)

    old_url = variation.image_url
    variation.image_url = await images.upload_pose_image(variation.id, data, content_type)
    await session.commit()
    await session.refresh(variation)

    if old_url and old_url != variation.image_url:
        try:
            await images.delete_image(settings.POSE_IMAGES_BUCKET, old_url)
        except StorageError:
            # new image already saved
            logger.warning("Could not remove old image %s", old_url)
    return variation


async def clear_variation_image(
    session: AsyncSession,
    variation_id: uuid.UUID,
    *,
    user_id: uuid.UUID,
    is_admin: bool = False,
) -> PoseVariation:
    variation = await get_variation(session, variation_id)
    _check_can_edit(variation, user_id, is_admin)
    if variation.image_url:
        await images.delete_image(settings.POSE_IMAGES_BUCKET, variation.image_url)
        variation.image_url = None
        await session.commit()
        await session.refresh(variation)
    return variation
