import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.config import settings
from yoga_builder.core.db import get_session
from yoga_builder.core.security import CurrentUser, get_current_user
from yoga_builder.schemas.pose import (
    PoseCreate,
    PoseRead,
    PoseUpdate,
    VariationCreate,
    VariationRead,
    VariationUpdate,
)
from yoga_builder.services import poses as pose_service


router = APIRouter(prefix="/poses", tags=["poses"])
variations_router = APIRouter(prefix="/variations", tags=["variations"])


@router.get("", response_model=List[PoseRead])
async def list_poses(session: AsyncSession = Depends(get_session)):
    return await pose_service.list_poses(session)


@router.post("", response_model=PoseRead, status_code=201)
async def create_pose(
    payload: PoseCreate,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await pose_service.create_pose(session, payload, author_id=user.id)


@router.get("/{pose_id}", response_model=PoseRead)
async def get_pose(pose_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await pose_service.get_pose(session, pose_id)


@router.patch("/{pose_id}", response_model=PoseRead)
async def update_pose(
    pose_id: uuid.UUID,
    payload: PoseUpdate,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await pose_service.update_pose(
        session, pose_id, payload, user_id=user.id, is_admin=user.is_admin
    )


@router.delete("/{pose_id}", status_code=204)
async def delete_pose(
    pose_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await pose_service.delete_pose(session, pose_id, user_id=user.id, is_admin=user.is_admin)


@router.get("/{pose_id}/variations", response_model=List[VariationRead])
async def list_pose_variations(pose_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    await pose_service.get_pose(session, pose_id)
    return await pose_service.list_variations(session, pose_id)


@variations_router.get("", response_model=List[VariationRead])
async def list_variations(
    pose_id: Optional[uuid.UUID] = None,
    session: AsyncSession = Depends(get_session),
):
    return await pose_service.list_variations(session, pose_id)


@variations_router.post("", response_model=VariationRead, status_code=201)
async def create_variation(
    payload: VariationCreate,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await pose_service.create_variation(session, payload, author_id=user.id)


@variations_router.get("/{variation_id}", response_model=VariationRead)
async def get_variation(variation_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await pose_service.get_variation(session, variation_id)


@variations_router.patch("/{variation_id}", response_model=VariationRead)
async def update_variation(
    variation_id: uuid.UUID,
    payload: VariationUpdate,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await pose_service.update_variation(
        session, variation_id, payload, user_id=user.id, is_admin=user.is_admin
    )


@variations_router.delete("/{variation_id}", status_code=204)
async def delete_variation(
    variation_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await pose_service.delete_variation(session, variation_id, user_id=user.id, is_admin=user.is_admin)


@variations_router.post("/{variation_id}/image", response_model=VariationRead)
async def upload_variation_image(
    variation_id: uuid.UUID,
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    data = await file.read(settings.MAX_IMAGE_BYTES + 1)
    return await pose_service.set_variation_image(
        session,
        variation_id,
        data,
        file.content_type,
        user_id=user.id,
        is_admin=user.is_admin,
    )


@variations_router.delete("/{variation_id}/image", response_model=VariationRead)
async def delete_variation_image(
    variation_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await pose_service.clear_variation_image(
        session, variation_id, user_id=user.id, is_admin=user.is_admin
    )
