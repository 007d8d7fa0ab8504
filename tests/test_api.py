import uuid

import pytest

from conftest import auth_headers
from yoga_builder.core import storage
from yoga_builder.core.config import settings
from yoga_builder.services import profiles
from yoga_builder.services.errors import StorageError


async def create_pose(client, headers, name="Warrior II"):
    r = await client.post("/poses", json={"name": name}, headers=headers)
    assert r.status_code == 201, r.text
    pose = r.json()
    r = await client.get(f"/poses/{pose['id']}/variations")
    return pose, r.json()[0]


def sequence_body(variation_id, name="Morning Flow"):
    return {
        "name": name,
        "sections": [
            {
                "id": "s1",
                "name": "Warm up",
                "items": [
                    {"type": "pose_instance", "id": "p1", "poseVariationId": variation_id, "duration": "30s"},
                    {
                        "type": "group_block",
                        "id": "g1",
                        "sets": 2,
                        "items": [
                            {"type": "pose_instance", "id": "p2", "poseVariationId": variation_id, "duration": "10s"}
                        ],
                    },
                ],
            }
        ],
    }


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_auth_required(client):
    r = await client.get("/sequences")
    assert r.status_code in (401, 403)

    r = await client.get("/sequences", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


async def test_first_request_creates_profile(client, user_id):
    r = await client.get("/profile", headers=auth_headers(user_id, "jane@example.com"))
    assert r.status_code == 200
    body = r.json()
    assert body["user_id"] == str(user_id)
    assert body["email"] == "jane@example.com"
    assert body["share_id"] == str(user_id)
    assert body["share_url"].endswith(f"/profile/{user_id}")


async def test_pose_crud_and_permissions(client, user_id, other_user_id):
    headers = auth_headers(user_id)
    pose, default = await create_pose(client, headers)
    assert default["name"] == "Warrior II (Default)"
    assert default["is_default"] is True

    r = await client.post("/poses", json={"name": "Warrior II"}, headers=headers)
    assert r.status_code == 409

    r = await client.patch(f"/poses/{pose['id']}", json={"name": "Warrior 2"}, headers=auth_headers(other_user_id))
    assert r.status_code == 403

    r = await client.post(
        "/variations",
        json={
            "pose_id": pose["id"],
            "name": "Reverse",
            "transitional_cues": ["Ground your feet", "Engage your core", "Lift your arms"],
        },
        headers=headers,
    )
    assert r.status_code == 201
    variation = r.json()

    r = await client.get("/variations", params={"pose_id": pose["id"]})
    assert [v["name"] for v in r.json()] == ["Reverse", "Warrior II (Default)"]

    r = await client.patch(f"/variations/{variation['id']}", json={"transitional_cues": ["one"]}, headers=headers)
    assert r.status_code == 422

    r = await client.delete(f"/poses/{pose['id']}", headers=headers)
    assert r.status_code == 204
    r = await client.get(f"/variations/{variation['id']}")
    assert r.status_code == 404


async def test_sequence_lifecycle(client, user_id):
    headers = auth_headers(user_id)
    _, variation = await create_pose(client, headers)

    r = await client.post("/sequences", json=sequence_body(variation["id"]), headers=headers)
    assert r.status_code == 201, r.text
    seq = r.json()
    assert seq["total_seconds"] == 50
    assert seq["total_duration"] == "0:50"

    r = await client.get(f"/sequences/{seq['id']}/timeline", headers=headers)
    timeline = r.json()
    assert [i["id"] for i in timeline["items"]] == ["p1", "p2-round-1", "p2-round-2"]
    assert timeline["items"][0]["spoken_name"] == "Warrior II"
    assert timeline["total_seconds"] == 50

    r = await client.get(f"/sequences/{seq['id']}/export.html", headers=headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert 'filename="morning_flow.html"' in r.headers["content-disposition"]
    assert "Group:</strong> 2 sets" in r.text

    r = await client.post(f"/sequences/{seq['id']}/duplicate", headers=headers)
    copy = r.json()
    assert copy["name"] == "Morning Flow (Copy)"

    r = await client.put("/sequences/order", json={"sequence_ids": [copy["id"], seq["id"]]}, headers=headers)
    assert [s["id"] for s in r.json()] == [copy["id"], seq["id"]]

    r = await client.put("/sequences/order", json={"sequence_ids": [seq["id"]]}, headers=headers)
    assert r.status_code == 422

    r = await client.patch(f"/sequences/{seq['id']}", json={"name": "Evening"}, headers=headers)
    assert r.json()["name"] == "Evening"

    r = await client.delete(f"/sequences/{copy['id']}", headers=headers)
    assert r.status_code == 204
    r = await client.get("/sequences", headers=headers)
    assert [s["name"] for s in r.json()] == ["Evening"]


async def test_invalid_sequence_duration_rejected(client, user_id):
    body = sequence_body("v1")
    body["sections"][0]["items"][0]["duration"] = "a while"
    r = await client.post("/sequences", json=body, headers=auth_headers(user_id))
    assert r.status_code == 422


async def test_other_users_cannot_see_sequences(client, user_id, other_user_id):
    r = await client.post("/sequences", json=sequence_body("v1"), headers=auth_headers(user_id))
    seq_id = r.json()["id"]

    r = await client.get(f"/sequences/{seq_id}", headers=auth_headers(other_user_id))
    assert r.status_code == 404
    r = await client.get(f"/public/sequences/{seq_id}")
    assert r.status_code == 404

    r = await client.put(f"/sequences/{seq_id}/publish", json={"published": True}, headers=auth_headers(user_id))
    assert r.json()["published_to_profile"] is True
    r = await client.get(f"/public/sequences/{seq_id}")
    assert r.status_code == 200


async def test_public_profile_and_contact(client, user_id):
    headers = auth_headers(user_id, "jane@example.com")
    r = await client.patch(
        "/profile",
        json={"share_id": "jane-yoga", "name": "Jane", "venmo_username": "@jane"},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["venmo_url"] == "https://venmo.com/jane?txn=pay"

    r = await client.post("/sequences", json={**sequence_body("v1"), "published_to_profile": True}, headers=headers)
    await client.post("/sequences", json=sequence_body("v1", name="Private"), headers=headers)

    r = await client.get("/public/profiles/jane-yoga")
    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "Jane"
    assert [s["name"] for s in body["sequences"]] == ["Morning Flow"]
    assert "email" not in body

    r = await client.post(
        "/public/profiles/jane-yoga/contact",
        json={"name": "Sam", "email": "sam@example.com", "message": "Hello"},
    )
    assert r.status_code == 202

    r = await client.post(
        "/public/profiles/jane-yoga/contact",
        json={"name": "Sam", "email": "nope", "message": "Hello"},
    )
    assert r.status_code == 422

    r = await client.get("/public/profiles/nobody")
    assert r.status_code == 404


async def test_share_id_conflict(client, user_id, other_user_id):
    r = await client.patch("/profile", json={"share_id": "jane-yoga"}, headers=auth_headers(user_id))
    assert r.status_code == 200
    r = await client.patch("/profile", json={"share_id": "jane-yoga"}, headers=auth_headers(other_user_id))
    assert r.status_code == 409
    assert r.json()["detail"] == profiles.SLUG_TAKEN


async def test_profile_events(client, user_id):
    headers = auth_headers(user_id)
    event = {"id": "e1", "title": "Vinyasa", "isRecurring": True, "dayOfWeek": 3, "startTime": "07:00", "endTime": "08:00"}
    r = await client.post("/profile/events", json=event, headers=headers)
    assert r.status_code == 201
    assert r.json()["events"][0]["title"] == "Vinyasa"

    r = await client.put("/profile/events/e1", json={**event, "title": "Yin"}, headers=headers)
    assert r.json()["events"][0]["title"] == "Yin"

    r = await client.delete("/profile/events/e1", headers=headers)
    assert r.json()["events"] == []

    r = await client.delete("/profile/events/e1", headers=headers)
    assert r.status_code == 404


async def test_admin_can_ban(client, sessionmaker, user_id, other_user_id):
    await client.get("/profile", headers=auth_headers(other_user_id))

    r = await client.get("/admin/profiles", headers=auth_headers(user_id))
    assert r.status_code == 403

    async with sessionmaker() as s:
        await profiles.set_admin(s, user_id, True)

    r = await client.get("/admin/profiles", headers=auth_headers(user_id))
    assert r.status_code == 200
    assert {p["user_id"] for p in r.json()} == {str(user_id), str(other_user_id)}

    r = await client.put(f"/admin/profiles/{other_user_id}/ban", json={"value": True}, headers=auth_headers(user_id))
    assert r.json()["is_banned"] is True

    r = await client.get("/profile", headers=auth_headers(other_user_id))
    assert r.status_code == 403
    assert "banned" in r.json()["detail"]

    r = await client.put(f"/admin/profiles/{uuid.uuid4()}/admin", json={"value": True}, headers=auth_headers(user_id))
    assert r.status_code == 404


@pytest.fixture
def fake_storage(monkeypatch):
    calls = {"uploaded": [], "deleted": []}

    async def upload_object(bucket, path, data, content_type, *, transport=None):
        calls["uploaded"].append((bucket, path, content_type))
        return storage.public_url(bucket, path)

    async def delete_object(bucket, path, *, transport=None):
        calls["deleted"].append((bucket, path))

    monkeypatch.setattr(storage, "upload_object", upload_object)
    monkeypatch.setattr(storage, "delete_object", delete_object)
    return calls


async def test_variation_image_upload(client, user_id, fake_storage):
    headers = auth_headers(user_id)
    _, variation = await create_pose(client, headers)

    r = await client.post(
        f"/variations/{variation['id']}/image",
        files={"file": ("tree.png", b"\x89PNG fake", "image/png")},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    url = r.json()["image_url"]
    assert f"/storage/v1/object/public/pose-images/{variation['id']}/" in url
    assert url.endswith(".png")

    r = await client.post(
        f"/variations/{variation['id']}/image",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "Please select an image file"

    r = await client.delete(f"/variations/{variation['id']}/image", headers=headers)
    assert r.json()["image_url"] is None
    assert len(fake_storage["deleted"]) == 1


async def test_profile_photo_upload(client, user_id, fake_storage):
    headers = auth_headers(user_id)
    r = await client.post("/profile/photo", files={"file": ("me.gif", b"GIF89a", "image/gif")}, headers=headers)
    # gif is allowed for pose images only
    assert r.status_code == 422

    r = await client.post("/profile/photo", files={"file": ("me.jpg", b"\xff\xd8jpeg", "image/jpeg")}, headers=headers)
    assert r.status_code == 200
    assert r.json()["profile_photo_url"].startswith(storage.public_url("profile-photos", str(user_id)))

    r = await client.delete("/profile/photo", headers=headers)
    assert r.json()["profile_photo_url"] is None


async def test_profile_photo_replace_survives_delete_failure(client, user_id, fake_storage, monkeypatch):
    headers = auth_headers(user_id)
    r = await client.post("/profile/photo", files={"file": ("a.jpg", b"\xff\xd8one", "image/jpeg")}, headers=headers)
    first_url = r.json()["profile_photo_url"]

    async def delete_object(bucket, path, *, transport=None):
        raise StorageError("Failed to delete image. Please try again.")

    monkeypatch.setattr(storage, "delete_object", delete_object)

    r = await client.post("/profile/photo", files={"file": ("b.png", b"\x89PNGtwo", "image/png")}, headers=headers)
    assert r.status_code == 200, r.text
    new_url = r.json()["profile_photo_url"]
    assert new_url != first_url

    r = await client.get("/profile", headers=headers)
    assert r.json()["profile_photo_url"] == new_url


async def test_oversized_uploads_rejected(client, user_id, fake_storage):
    headers = auth_headers(user_id)
    _, variation = await create_pose(client, headers)
    big = b"x" * (settings.MAX_IMAGE_BYTES + 1024)

    r = await client.post(
        f"/variations/{variation['id']}/image",
        files={"file": ("big.png", big, "image/png")},
        headers=headers,
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "Image must be smaller than 5MB"

    r = await client.post("/profile/photo", files={"file": ("big.jpg", big, "image/jpeg")}, headers=headers)
    assert r.status_code == 422
    assert r.json()["detail"] == "Image must be smaller than 5MB"
    assert fake_storage["uploaded"] == []


async def test_public_sequence_ignores_bad_token(client, user_id):
    r = await client.post("/sequences", json=sequence_body("v1"), headers=auth_headers(user_id))
    seq_id = r.json()["id"]
    stale = {"Authorization": "Bearer not-a-jwt"}

    r = await client.get(f"/public/sequences/{seq_id}", headers=stale)
    assert r.status_code == 404

    await client.put(f"/sequences/{seq_id}/publish", json={"published": True}, headers=auth_headers(user_id))
    r = await client.get(f"/public/sequences/{seq_id}", headers=stale)
    assert r.status_code == 200
    assert r.json()["id"] == seq_id


async def test_public_sequence_banned_viewer_reads_as_anonymous(client, sessionmaker, user_id, other_user_id):
    r = await client.post("/sequences", json=sequence_body("v1"), headers=auth_headers(user_id))
    seq_id = r.json()["id"]
    await client.put(f"/sequences/{seq_id}/publish", json={"published": True}, headers=auth_headers(user_id))

    await client.get("/profile", headers=auth_headers(other_user_id))
    async with sessionmaker() as s:
        await profiles.set_banned(s, other_user_id, True)

    r = await client.get(f"/public/sequences/{seq_id}", headers=auth_headers(other_user_id))
    assert r.status_code == 200
