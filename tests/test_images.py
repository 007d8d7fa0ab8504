import json

import httpx
import pytest

from yoga_builder.core import storage
from yoga_builder.core.config import settings
from yoga_builder.services import images
from yoga_builder.services.errors import StorageError, ValidationError


@pytest.mark.parametrize(
    "content_type, size, message",
    [
        (None, 10, "Please select an image file"),
        ("application/pdf", 10, "Please select an image file"),
        ("image/tiff", 10, "Unsupported image type: image/tiff"),
        ("image/png", settings.MAX_IMAGE_BYTES + 1, "Image must be smaller than 5MB"),
        ("image/png", 0, "Image file is empty"),
    ],
)
def test_validate_image_rejects(content_type, size, message):
    with pytest.raises(ValidationError) as exc:
        images.validate_image(content_type, size, images.POSE_IMAGE_TYPES)
    assert str(exc.value) == message


def test_validate_image_extension():
    assert images.validate_image("image/jpeg", 100, images.POSE_IMAGE_TYPES) == "jpg"
    assert images.validate_image("IMAGE/PNG", settings.MAX_IMAGE_BYTES, images.PROFILE_PHOTO_TYPES) == "png"
    with pytest.raises(ValidationError):
        images.validate_image("image/gif", 100, images.PROFILE_PHOTO_TYPES)


def test_public_url_round_trip():
    url = storage.public_url("pose-images", "abc/def.png")
    assert url == f"{settings.STORAGE_URL}/storage/v1/object/public/pose-images/abc/def.png"
    assert storage.path_from_public_url("pose-images", url + "?t=1") == "abc/def.png"
    assert storage.path_from_public_url("profile-photos", url) is None
    assert storage.path_from_public_url("pose-images", "https://example.com/cat.png") is None


async def test_upload_object_posts_bytes():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, json={"Key": "pose-images/a/b.png"})

    url = await storage.upload_object(
        "pose-images", "a/b.png", b"png-bytes", "image/png", transport=httpx.MockTransport(handler)
    )

    assert url == storage.public_url("pose-images", "a/b.png")
    assert seen["method"] == "POST"
    assert seen["url"].endswith("/storage/v1/object/pose-images/a/b.png")
    assert seen["headers"]["content-type"] == "image/png"
    assert seen["headers"]["x-upsert"] == "true"
    assert seen["body"] == b"png-bytes"


async def test_upload_failure_raises_storage_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(StorageError):
        await storage.upload_object("pose-images", "a/b.png", b"x", "image/png", transport=transport)


async def test_delete_object_sends_prefixes():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["json"] = json.loads(request.content)
        return httpx.Response(200, json=[])

    await storage.delete_object("profile-photos", "u/1.jpg", transport=httpx.MockTransport(handler))
    assert seen == {"method": "DELETE", "json": {"prefixes": ["u/1.jpg"]}}


async def test_delete_image_skips_foreign_urls(monkeypatch):
    calls = []

    async def delete_object(bucket, path, *, transport=None):
        calls.append((bucket, path))

    monkeypatch.setattr(storage, "delete_object", delete_object)

    await images.delete_image("pose-images", "https://example.com/cat.png")
    await images.delete_image("pose-images", None)
    await images.delete_image("pose-images", storage.public_url("pose-images", "v/1.png"))
    assert calls == [("pose-images", "v/1.png")]


async def test_upload_image_validates_before_upload(monkeypatch):
    calls = []

    async def upload_object(*args, **kwargs):
        calls.append(args)
        return "url"

    monkeypatch.setattr(storage, "upload_object", upload_object)
    with pytest.raises(ValidationError):
        await images.upload_pose_image("v", b"", "image/png")
    assert calls == []

    assert await images.upload_pose_image("v", b"data", "image/webp") == "url"
    bucket, path, _, content_type = calls[0]
    assert bucket == settings.POSE_IMAGES_BUCKET
    assert path.startswith("v/") and path.endswith(".webp")
    assert content_type == "image/webp"
