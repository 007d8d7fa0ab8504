import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.api.sequences import to_read as sequence_to_read
from yoga_builder.core.db import get_session
from yoga_builder.core.security import CurrentUser, get_optional_user
from yoga_builder.schemas.profile import ContactIn, PublicProfileRead, PublicSequenceSummary
from yoga_builder.schemas.sequence import SequenceRead
from yoga_builder.services import contact
from yoga_builder.services import profiles as profile_service
from yoga_builder.services import sequences as sequence_service
from yoga_builder.services.durations import format_duration


router = APIRouter(prefix="/public", tags=["public"])


@router.get("/profiles/{share_id}", response_model=PublicProfileRead)
async def get_public_profile(share_id: str, session: AsyncSession = Depends(get_session)):
    profile = await profile_service.get_public_profile(session, share_id)
    published = await sequence_service.list_published(session, profile.user_id)

    summaries = []
    for seq in published:
        total = sequence_service.sequence_total_seconds(seq)
        summaries.append(
            PublicSequenceSummary(id=seq.id, name=seq.name, total_seconds=total, total_duration=format_duration(total))
        )

    return PublicProfileRead(
        name=profile.name,
        bio=profile.bio,
        events=profile.events or [],
        share_id=profile.share_id or str(profile.user_id),
        venmo_username=profile.venmo_username,
        venmo_url=profile_service.venmo_link(profile.venmo_username),
        spotify_playlist_urls=profile.spotify_playlist_urls or [],
        profile_photo_url=profile.profile_photo_url,
        sequences=summaries,
    )


@router.post("/profiles/{share_id}/contact", status_code=202)
async def contact_instructor(
    share_id: str,
    payload: ContactIn,
    session: AsyncSession = Depends(get_session),
):
    profile = await profile_service.get_public_profile(session, share_id)
    contact.send_contact_message(profile, payload)
    return {"status": "sent"}


@router.get("/sequences/{sequence_id}", response_model=SequenceRead)
async def get_public_sequence(
    sequence_id: uuid.UUID,
    viewer: Optional[CurrentUser] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    seq = await sequence_service.get_viewable_sequence(session, sequence_id, viewer.id if viewer else None)
    return sequence_to_read(seq)
