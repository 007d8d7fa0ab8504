import logging

import httpx

from yoga_builder.core.config import settings
from yoga_builder.services.errors import StorageError


logger = logging.getLogger(__name__)


def _headers(content_type: str | None = None) -> dict:
    headers = {
        "Authorization": f"Bearer {settings.STORAGE_SERVICE_KEY}",
        "apikey": settings.STORAGE_SERVICE_KEY,
    }
    if content_type:
        headers["Content-Type"] = content_type
    return headers


def public_url(bucket: str, path: str) -> str:
    return f"{settings.STORAGE_URL}/storage/v1/object/public/{bucket}/{path}"


def path_from_public_url(bucket: str, url: str) -> str | None:
    marker = f"/storage/v1/object/public/{bucket}/"
    if marker not in url:
        return None
    return url.split(marker, 1)[1].split("?", 1)[0]


async def upload_object(
    bucket: str,
    path: str,
    data: bytes,
    content_type: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Upload bytes into a bucket and return the public URL."""
    async with httpx.AsyncClient(timeout=30, transport=transport) as c:
        r = await c.post(
            f"{settings.STORAGE_URL}/storage/v1/object/{bucket}/{path}",
            content=data,
            headers={**_headers(content_type), "x-upsert": "true"},
        )
    if r.is_error:
        logger.error("Upload to %s/%s failed: %s %s", bucket, path, r.status_code, r.text)
        raise StorageError("Failed to upload image. Please try again.")
    return public_url(bucket, path)


async def delete_object(
    bucket: str,
    path: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    async with httpx.AsyncClient(timeout=30, transport=transport) as c:
        r = await c.request(
            "DELETE",
            f"{settings.STORAGE_URL}/storage/v1/object/{bucket}",
            json={"prefixes": [path]},
            headers=_headers(),
        )
    if r.is_error:
        logger.error("Delete of %s/%s failed: %s %s", bucket, path, r.status_code, r.text)
        raise StorageError("Failed to delete image. Please try again.")
