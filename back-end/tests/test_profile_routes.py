import io
import shutil

import pytest
from PIL import Image


def png_bytes(size=(8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(0, 51, 102)).save(buffer, format="PNG")
    return buffer.getvalue()


async def upload(client, headers, content, filename="avatar.png", content_type="image/png"):
    return await client.post(
        "/profiles/me/avatar",
        files={"file": (filename, content, content_type)},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_get_own_profile(client, user, user_headers):
    response = await client.get("/profiles/me", headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(user.id)
    assert body["email"] == "harry@example.com"
    assert body["initials"] == "HM"


@pytest.mark.asyncio
async def test_patch_profile_leaves_email_alone(client, user_headers):
    response = await client.patch(
        "/profiles/me",
        json={"location": "Jakarta, Indonesia", "email": "changed@example.com"},
        headers=user_headers,
    )

    assert response.status_code == 200
    assert response.json()["location"] == "Jakarta, Indonesia"
    assert response.json()["email"] == "harry@example.com"
    assert response.json()["full_name"] == "Harry Maguire Johnson"


@pytest.mark.asyncio
async def test_avatar_upload_stores_file_and_url(client, user, user_headers, storage):
    response = await upload(client, user_headers, png_bytes())

    assert response.status_code == 200, response.text
    url = response.json()["avatar_url"]
    assert url.startswith(f"/uploads/avatars/{user.id}/")
    assert url.endswith(".png")
    stored = storage.root / url.removeprefix("/uploads/")
    assert stored.is_file()


@pytest.mark.asyncio
async def test_new_avatar_replaces_previous_file(client, user_headers, storage):
    first = (await upload(client, user_headers, png_bytes())).json()["avatar_url"]
    second = (await upload(client, user_headers, png_bytes((4, 4)))).json()["avatar_url"]

    assert first != second
    assert not (storage.root / first.removeprefix("/uploads/")).exists()
    assert (storage.root / second.removeprefix("/uploads/")).is_file()


@pytest.mark.asyncio
async def test_non_image_upload_is_rejected(client, user_headers):
    response = await upload(client, user_headers, b"%PDF-1.4", filename="cv.pdf", content_type="application/pdf")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_fake_image_content_is_rejected(client, user_headers, storage):
    response = await upload(client, user_headers, b"definitely not a png")

    assert response.status_code == 400
    assert not any(p.is_file() for p in (storage.root / "avatars").rglob("*"))


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(client, user_headers, storage):
    response = await upload(client, user_headers, b"\x89PNG" + b"0" * storage.max_size)

    assert response.status_code == 413


@pytest.mark.asyncio
async def test_missing_bucket_reports_storage_not_configured(client, user_headers, storage):
    shutil.rmtree(storage.root / "avatars")

    response = await upload(client, user_headers, png_bytes())

    assert response.status_code == 503
    assert response.json()["detail"] == "Avatar storage is not configured"
