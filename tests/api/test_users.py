# tests/api/test_users.py
import pytest
from httpx import AsyncClient
from fastapi import status

from buzzly.errors import MediaUploadFailed
from buzzly.services.media_service import media_service

USERS_URL = "/api/v1/users"


@pytest.mark.asyncio
async def test_follow_toggle_and_counts(client: AsyncClient, member, author, auth_headers):
    response = await client.post(f"{USERS_URL}/{author.id}/follow", headers=auth_headers(member))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["following"] is True
    assert response.json()["follower_count"] == 1

    profile = (await client.get(f"{USERS_URL}/{author.id}", headers=auth_headers(member))).json()
    assert profile["follower_count"] == 1
    assert profile["following_count"] == 0

    followers = await client.get(f"{USERS_URL}/{author.id}/followers", headers=auth_headers(member))
    following = await client.get(f"{USERS_URL}/{member.id}/following", headers=auth_headers(member))
    assert [u["username"] for u in followers.json()] == ["member"]
    assert [u["username"] for u in following.json()] == ["author"]

    response = await client.post(f"{USERS_URL}/{author.id}/follow", headers=auth_headers(member))
    assert response.json()["following"] is False
    assert response.json()["follower_count"] == 0


@pytest.mark.asyncio
async def test_follow_sends_notification(client: AsyncClient, member, author, auth_headers):
    await client.post(f"{USERS_URL}/{author.id}/follow", headers=auth_headers(member))

    response = await client.get("/api/v1/notifications", headers=auth_headers(author))
    [notification] = response.json()
    assert notification["notification_type"] == "follow"
    assert notification["content"] == "member started following you."
    assert notification["sender"]["username"] == "member"


@pytest.mark.asyncio
async def test_cannot_follow_self_or_missing_user(client: AsyncClient, member, auth_headers):
    self_follow = await client.post(f"{USERS_URL}/{member.id}/follow", headers=auth_headers(member))
    missing = await client.post(f"{USERS_URL}/missing/follow", headers=auth_headers(member))

    assert self_follow.status_code == status.HTTP_400_BAD_REQUEST
    assert missing.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_search_is_case_insensitive_and_literal(client: AsyncClient, make_user, member, auth_headers):
    await make_user("Alice_Wonder")
    await make_user("bob")

    found = await client.get(f"{USERS_URL}/search", params={"q": "ALICE"}, headers=auth_headers(member))
    wildcard = await client.get(f"{USERS_URL}/search", params={"q": "%"}, headers=auth_headers(member))
    empty = await client.get(f"{USERS_URL}/search", params={"q": " "}, headers=auth_headers(member))

    assert [u["username"] for u in found.json()] == ["Alice_Wonder"]
    assert wildcard.json() == []
    assert empty.json() == []


@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient, member, auth_headers):
    response = await client.patch(f"{USERS_URL}/me", json={"bio": "I like bees"}, headers=auth_headers(member))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["bio"] == "I like bees"

    empty = await client.patch(f"{USERS_URL}/me", json={}, headers=auth_headers(member))
    assert empty.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_profile_picture_upload(client: AsyncClient, member, auth_headers, monkeypatch):
    uploaded = {}

    async def fake_upload(file, content_type, user_id):
        uploaded.update(content=file.read(), content_type=content_type, user_id=user_id)
        return "https://cdn.buzzly.io/profile_pictures/me.png"

    monkeypatch.setattr(media_service, "upload_profile_picture", fake_upload)

    response = await client.post(
        f"{USERS_URL}/me/profile-picture",
        files={"file": ("me.png", b"\x89PNG fake", "image/png")},
        headers=auth_headers(member),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["profile_picture"] == "https://cdn.buzzly.io/profile_pictures/me.png"
    assert uploaded == {"content": b"\x89PNG fake", "content_type": "image/png", "user_id": member.id}


@pytest.mark.asyncio
async def test_profile_picture_rejects_non_images(client: AsyncClient, member, auth_headers):
    response = await client.post(
        f"{USERS_URL}/me/profile-picture",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(member),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_profile_picture_storage_failure(client: AsyncClient, member, auth_headers, monkeypatch):
    async def failing_upload(file, content_type, user_id):
        raise MediaUploadFailed()

    monkeypatch.setattr(media_service, "upload_profile_picture", failing_upload)

    response = await client.post(
        f"{USERS_URL}/me/profile-picture",
        files={"file": ("me.png", b"\x89PNG fake", "image/png")},
        headers=auth_headers(member),
    )
    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["error_code"] == "media_upload_failed"
