from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.config import settings
from yoga_builder.core.db import get_session
from yoga_builder.core.security import CurrentUser, get_current_user
from yoga_builder.models.profile import UserProfile
from yoga_builder.schemas.profile import ClassEvent, ProfileRead, ProfileUpdate
from yoga_builder.services import profiles as profile_service


router = APIRouter(prefix="/profile", tags=["profile"])


def to_read(profile: UserProfile) -> ProfileRead:
    out = ProfileRead.model_validate(profile)
    return out.model_copy(
        update={
            "share_url": profile_service.share_url(profile),
            "venmo_url": profile_service.venmo_link(profile.venmo_username),
        }
    )


@router.get("", response_model=ProfileRead)
async def get_profile(user: CurrentUser = Depends(get_current_user)):
    # get_current_user already created the row on first sign-in
    return to_read(user.profile)


@router.patch("", response_model=ProfileRead)
async def update_profile(
    payload: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await profile_service.update_profile(session, user.id, payload))


@router.post("/events", response_model=ProfileRead, status_code=201)
async def add_event(
    event: ClassEvent,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await profile_service.add_event(session, user.id, event))


@router.put("/events/{event_id}", response_model=ProfileRead)
async def update_event(
    event_id: str,
    event: ClassEvent,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await profile_service.update_event(session, user.id, event_id, event))


@router.delete("/events/{event_id}", response_model=ProfileRead)
async def delete_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await profile_service.delete_event(session, user.id, event_id))


@router.post("/photo", response_model=ProfileRead)
async def upload_photo(
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    data = await file.read(settings.MAX_IMAGE_BYTES + 1)
    return to_read(await profile_service.upload_profile_photo(session, user.id, data, file.content_type))


@router.delete("/photo", response_model=ProfileRead)
async def delete_photo(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return to_read(await profile_service.delete_profile_photo(session, user.id))
