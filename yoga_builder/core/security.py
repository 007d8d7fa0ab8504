import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.config import settings
from yoga_builder.core.db import get_session
from yoga_builder.models.profile import UserProfile
from yoga_builder.services import profiles


logger = logging.getLogger(__name__)

BANNED_MESSAGE = "Your account has been banned. Please contact support if you believe this is an error."

bearer_scheme = HTTPBearer()
optional_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: uuid.UUID
    email: str
    profile: UserProfile

    @property
    def is_admin(self) -> bool:
        return bool(self.profile.is_admin)


def decode_jwt_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _user_id_from(payload: dict) -> uuid.UUID:
    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Token payload invalid")


async def _resolve_user(token: str, db: AsyncSession) -> CurrentUser:
    payload = decode_jwt_token(token)
    user_id = _user_id_from(payload)
    email = payload.get("email") or ""

    profile = await profiles.get_or_create(db, user_id, email)
    if profile.is_banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=BANNED_MESSAGE)
    return CurrentUser(id=user_id, email=email, profile=profile)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_session),
) -> CurrentUser:
    return await _resolve_user(credentials.credentials, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
    db: AsyncSession = Depends(get_session),
) -> Optional[CurrentUser]:
    """Like get_current_user, but anonymous requests pass through as None.

    Rejected tokens count as anonymous.
    """
    if credentials is None:
        return None
    try:
        return await _resolve_user(credentials.credentials, db)
    except HTTPException as exc:
        logger.debug("Ignoring rejected optional credentials: %s", exc.detail)
        return None


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
