from __future__ import annotations

import logging
import uuid

from yoga_builder.core import storage
from yoga_builder.core.config import settings
from yoga_builder.services.errors import ValidationError


logger = logging.getLogger(__name__)


POSE_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"}
PROFILE_PHOTO_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def validate_image(content_type: str | None, size: int, allowed: set[str]) -> str:
    """Check type and size before anything is uploaded; returns the file extension."""
    content_type = (content_type or "").lower()
    if not content_type.startswith("image/"):
        raise ValidationError("Please select an image file")
    if content_type not in allowed:
        raise ValidationError(f"Unsupported image type: {content_type}")
    if size > settings.MAX_IMAGE_BYTES:
        limit_mb = settings.MAX_IMAGE_BYTES // (1024 * 1024)
        raise ValidationError(f"Image must be smaller than {limit_mb}MB")
    if size == 0:
        raise ValidationError("Image file is empty")
    return _EXTENSIONS[content_type]


def object_path(owner_id: uuid.UUID | str, extension: str) -> str:
    # first folder is the owner, storage policies key on it
    return f"{owner_id}/{uuid.uuid4()}.{extension}"


async def upload_image(
    bucket: str,
    owner_id: uuid.UUID | str,
    data: bytes,
    content_type: str | None,
    allowed: set[str],
) -> str:
    extension = validate_image(content_type, len(data), allowed)
    path = object_path(owner_id, extension)
    url = await storage.upload_object(bucket, path, data, content_type.lower())
    logger.info("Uploaded image %s/%s (%d bytes)", bucket, path, len(data))
    return url


async def delete_image(bucket: str, url: str | None) -> None:
    if not url:
        return
    path = storage.path_from_public_url(bucket, url)
    if path is None:
        # not one of ours (external URL), nothing to remove
        logger.info("Skipping delete of foreign image URL %s", url)
        return
    await storage.delete_object(bucket, path)


async def upload_pose_image(variation_id: uuid.UUID, data: bytes, content_type: str | None) -> str:
    return await upload_image(settings.POSE_IMAGES_BUCKET, variation_id, data, content_type, POSE_IMAGE_TYPES)


async def upload_profile_photo(user_id: uuid.UUID, data: bytes, content_type: str | None) -> str:
    return await upload_image(settings.PROFILE_PHOTOS_BUCKET, user_id, data, content_type, PROFILE_PHOTO_TYPES)
