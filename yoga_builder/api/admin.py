import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.db import get_session
from yoga_builder.core.security import CurrentUser, require_admin
from yoga_builder.models.profile import UserProfile
from yoga_builder.schemas.profile import AdminProfileRead, FlagIn
from yoga_builder.services import profiles as profile_service


router = APIRouter(prefix="/admin", tags=["admin"])


def to_read(profile: UserProfile) -> AdminProfileRead:
    return AdminProfileRead.model_validate(profile).model_copy(
        update={
            "share_url": profile_service.share_url(profile),
            "venmo_url": profile_service.venmo_link(profile.venmo_username),
        }
    )


@router.get("/profiles", response_model=List[AdminProfileRead])
async def list_profiles(
    _: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return [to_read(p) for p in await profile_service.list_profiles(session)]


@router.put("/profiles/{user_id}/ban", response_model=AdminProfileRead)
async def set_banned(
    user_id: uuid.UUID,
    payload: FlagIn,
    _: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await profile_service.set_banned(session, user_id, payload.value))


@router.put("/profiles/{user_id}/admin", response_model=AdminProfileRead)
async def set_admin(
    user_id: uuid.UUID,
    payload: FlagIn,
    _: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await profile_service.set_admin(session, user_id, payload.value))
