from __future__ import annotations

import logging
import re
import uuid
from typing import Optional

from slugify import slugify
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.config import settings
from yoga_builder.models.profile import UserProfile
from yoga_builder.schemas.profile import ClassEvent, ProfileUpdate
from yoga_builder.services import images
from yoga_builder.services.errors import ConflictError, NotFoundError, StorageError, ValidationError


logger = logging.getLogger(__name__)


SLUG_TAKEN = "This custom link is already taken. Please choose another."
SLUG_MIN, SLUG_MAX = 3, 30

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
_SLUG_RE = re.compile(r"^[a-z0-9-]+$")


def is_default_share_id(share_id: Optional[str], user_id: uuid.UUID | str) -> bool:
    return bool(share_id) and share_id == str(user_id) and bool(_UUID_RE.match(share_id))


def share_id_error(slug: str, user_id: uuid.UUID | str) -> Optional[str]:
    """Why a custom profile link is not acceptable, or None when it is."""
    if not slug:
        return None  # custom link is optional
    if is_default_share_id(slug, user_id):
        return None
    if len(slug) < SLUG_MIN:
        return f"Custom link must be at least {SLUG_MIN} characters"
    if len(slug) > SLUG_MAX:
        return f"Custom link must be less than {SLUG_MAX} characters"
    if not _SLUG_RE.match(slug):
        return "Custom link can only contain lowercase letters, numbers, and hyphens"
    if slug.startswith("-") or slug.endswith("-"):
        return "Custom link cannot start or end with a hyphen"
    return None


def suggest_share_slug(name: str) -> Optional[str]:
    slug = slugify(name or "", max_length=SLUG_MAX, word_boundary=True).strip("-")
    return slug if len(slug) >= SLUG_MIN else None


def normalize_venmo(username: Optional[str]) -> Optional[str]:
    if username is None:
        return None
    username = username.strip().lstrip("@")
    return username or None


def venmo_link(username: Optional[str]) -> Optional[str]:
    username = normalize_venmo(username)
    if not username:
        return None
    return f"https://venmo.com/{username}?txn=pay"


def share_url(profile: UserProfile) -> str:
    return f"{settings.PUBLIC_SITE_URL}/profile/{profile.share_id or profile.user_id}"


async def get_by_user_id(session: AsyncSession, user_id: uuid.UUID) -> Optional[UserProfile]:
    return await session.scalar(select(UserProfile).where(UserProfile.user_id == user_id))


async def get_by_share_id(session: AsyncSession, share_id: str) -> Optional[UserProfile]:
    return await session.scalar(select(UserProfile).where(UserProfile.share_id == share_id))


async def require_profile(session: AsyncSession, user_id: uuid.UUID) -> UserProfile:
    profile = await get_by_user_id(session, user_id)
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


async def _ensure_share_id_free(session: AsyncSession, share_id: str, user_id: uuid.UUID) -> None:
    owner = await get_by_share_id(session, share_id)
    if owner and owner.user_id != user_id:
        raise ConflictError(SLUG_TAKEN)


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        if "share_id" in str(e.orig):
            raise ConflictError(SLUG_TAKEN) from e
        raise ConflictError("Profile could not be saved") from e


async def create_profile(
    session: AsyncSession,
    user_id: uuid.UUID,
    email: str,
    *,
    name: str = "",
    bio: str = "",
    share_id: Optional[str] = None,
) -> UserProfile:
    if share_id:
        error = share_id_error(share_id, user_id)
        if error:
            raise ValidationError(error)
        await _ensure_share_id_free(session, share_id, user_id)

    profile = UserProfile(
        user_id=user_id,
        email=email,
        name=name,
        bio=bio,
        events=[],
        spotify_playlist_urls=[],
        share_id=share_id or None,
    )
    session.add(profile)
    await _commit(session)
    await session.refresh(profile)
    logger.info("Profile created for user %s", user_id)
    return profile


async def get_or_create(session: AsyncSession, user_id: uuid.UUID, email: str) -> UserProfile:
    profile = await get_by_user_id(session, user_id)
    if profile is None:
        # the user id is the default share link until a custom one is chosen
        profile = await create_profile(session, user_id, email, share_id=str(user_id))
    return profile


async def update_profile(session: AsyncSession, user_id: uuid.UUID, payload: ProfileUpdate) -> UserProfile:
    profile = await require_profile(session, user_id)
    changes = payload.model_fields_set

    if "share_id" in changes and payload.share_id is not None:
        share_id = payload.share_id or str(user_id)
        error = share_id_error(share_id, user_id)
        if error:
            raise ValidationError(error)
        await _ensure_share_id_free(session, share_id, user_id)
        profile.share_id = share_id

    if payload.name is not None:
        profile.name = payload.name.strip()
    if payload.bio is not None:
        profile.bio = payload.bio
    if payload.email is not None:
        profile.email = str(payload.email)
    if payload.events is not None:
        profile.events = _dump_events(payload.events)
    if "venmo_username" in changes:
        profile.venmo_username = normalize_venmo(payload.venmo_username)
    if payload.spotify_playlist_urls is not None:
        profile.spotify_playlist_urls = [str(u) for u in payload.spotify_playlist_urls]

    await _commit(session)
    await session.refresh(profile)
    return profile


def _dump_events(events: list[ClassEvent]) -> list[dict]:
    return [e.model_dump(by_alias=True, mode="json") for e in events]


async def add_event(session: AsyncSession, user_id: uuid.UUID, event: ClassEvent) -> UserProfile:
    profile = await require_profile(session, user_id)
    profile.events = [*(profile.events or []), *_dump_events([event])]
    await session.commit()
    await session.refresh(profile)
    return profile


async def update_event(
    session: AsyncSession,
    user_id: uuid.UUID,
    event_id: str,
    event: ClassEvent,
) -> UserProfile:
    profile = await require_profile(session, user_id)
    events = list(profile.events or [])
    for idx, existing in enumerate(events):
        if existing.get("id") == event_id:
            updated = _dump_events([event.model_copy(update={"id": event_id})])[0]
            events[idx] = updated
            break
    else:
        raise NotFoundError("Event not found")
    profile.events = events
    await session.commit()
    await session.refresh(profile)
    return profile


async def delete_event(session: AsyncSession, user_id: uuid.UUID, event_id: str) -> UserProfile:
    profile = await require_profile(session, user_id)
    events = [e for e in (profile.events or []) if e.get("id") != event_id]
    if len(events) == len(profile.events or []):
        raise NotFoundError("Event not found")
    profile.events = events
    await session.commit()
    await session.refresh(profile)
    return profile


async def upload_profile_photo(
    session: AsyncSession,
    user_id: uuid.UUID,
    data: bytes,
    content_type: Optional[str],
) -> UserProfile:
    profile = await require_profile(session, user_id)
    old_url = profile.profile_photo_url

    profile.profile_photo_url = await images.upload_profile_photo(user_id, data, content_type)
    await session.commit()
    await session.refresh(profile)

    if old_url and old_url != profile.profile_photo_url:
        try:
            await images.delete_image(settings.PROFILE_PHOTOS_BUCKET, old_url)
        except StorageError:
            # new photo already saved
            logger.warning("Could not remove old photo %s", old_url)
    return profile


async def delete_profile_photo(session: AsyncSession, user_id: uuid.UUID) -> UserProfile:
    profile = await require_profile(session, user_id)
    if profile.profile_photo_url:
        await images.delete_image(settings.PROFILE_PHOTOS_BUCKET, profile.profile_photo_url)
        profile.profile_photo_url = None
        await session.commit()
        await session.refresh(profile)
    return profile


async def is_admin(session: AsyncSession, user_id: uuid.UUID) -> bool:
    profile = await get_by_user_id(session, user_id)
    return bool(profile and profile.is_admin)


async def get_public_profile(session: AsyncSession, share_id: str) -> UserProfile:
    profile = await get_by_share_id(session, share_id)
    # banned instructors disappear from public view
    if not profile or profile.is_banned:
        raise NotFoundError("Profile not found")
    return profile


async def list_profiles(session: AsyncSession) -> list[UserProfile]:
    rows = await session.execute(select(UserProfile).order_by(UserProfile.created_at))
    return list(rows.scalars().all())


async def set_banned(session: AsyncSession, user_id: uuid.UUID, banned: bool) -> UserProfile:
    profile = await require_profile(session, user_id)
    profile.is_banned = banned
    await session.commit()
    await session.refresh(profile)
    logger.warning("User %s %s", user_id, "banned" if banned else "unbanned")
    return profile


async def set_admin(session: AsyncSession, user_id: uuid.UUID, admin: bool) -> UserProfile:
    profile = await require_profile(session, user_id)
    profile.is_admin = admin
    await session.commit()
    await session.refresh(profile)
    logger.warning("User %s admin=%s", user_id, admin)
    return profile
