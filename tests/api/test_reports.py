# tests/api/test_reports.py
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import status

from buzzly.db.models import Report, ReportStatus

REPORTS_URL = "/api/v1/reports"


async def _file_report(client: AsyncClient, headers: dict, post_id: str, reason: str = "Spam") -> str:
    response = await client.post(
        REPORTS_URL,
        json={"post_id": post_id, "reason": reason, "description": "same link everywhere"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["report_id"]


@pytest.mark.asyncio
async def test_report_moderation_walkthrough(client: AsyncClient, make_post, author, member, moderator, auth_headers):
    post = await make_post(author, content="Click here for free stuff")

    response = await client.post(
        REPORTS_URL,
        json={"post_id": post.id, "reason": "Spam", "description": "same link everywhere"},
        headers=auth_headers(member),
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["status"] is True
    report_id = body["report_id"]

    response = await client.get(f"{REPORTS_URL}/{report_id}", headers=auth_headers(moderator))
    assert response.status_code == status.HTTP_200_OK
    report = response.json()
    assert report["status"] == "pending"
    assert report["reason"] == "Spam"
    assert report["description"] == "same link everywhere"
    assert report["content_snapshot"]["content"] == "Click here for free stuff"
    assert report["content_snapshot"]["author"]["username"] == "author"
    assert report["reporter"]["username"] == "member"
    assert report["post_exists"] is True
    assert report["current_post"]["id"] == post.id
    assert report["current_post"]["author"]["username"] == "author"

    response = await client.patch(
        f"{REPORTS_URL}/{report_id}",
        json={"status": "reviewed", "admin_notes": "asked the author"},
        headers=auth_headers(moderator),
    )
    assert response.status_code == status.HTTP_200_OK
    updated = response.json()["report"]
    assert updated["status"] == "reviewed"
    assert updated["admin_notes"] == "asked the author"
    assert updated["reviewed_by"] == moderator.id
    assert updated["reviewed_by_user"]["username"] == "moderator"
    assert updated["reviewed_at"] is not None

    response = await client.patch(
        f"{REPORTS_URL}/{report_id}", json={"status": "resolved"}, headers=auth_headers(moderator)
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["report"]["status"] == "resolved"
    assert response.json()["report"]["admin_notes"] == "asked the author"

    # A closed decision is not edited in place
    response = await client.patch(
        f"{REPORTS_URL}/{report_id}", json={"status": "dismissed"}, headers=auth_headers(moderator)
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error_code"] == "invalid_transition"

    response = await client.patch(
        f"{REPORTS_URL}/{report_id}", json={"status": "pending"}, headers=auth_headers(moderator)
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["report"]["status"] == "pending"


@pytest.mark.asyncio
async def test_submit_requires_authentication(client: AsyncClient, make_post, author):
    post = await make_post(author)

    response = await client.post(REPORTS_URL, json={"post_id": post.id, "reason": "Spam"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error_code"] == "unauthenticated"


@pytest.mark.asyncio
async def test_submit_with_garbage_token(client: AsyncClient, make_post, author):
    post = await make_post(author)

    response = await client.post(
        REPORTS_URL,
        json={"post_id": post.id, "reason": "Spam"},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", ["", "spam", "Annoying"])
async def test_submit_rejects_unknown_reason(client: AsyncClient, make_post, author, member, auth_headers, reason):
    post = await make_post(author)

    response = await client.post(
        REPORTS_URL, json={"post_id": post.id, "reason": reason}, headers=auth_headers(member)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error_code"] == "invalid_argument"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"reason": "Spam"}, {"post_id": None, "reason": "Spam"}])
async def test_submit_without_post_id(client: AsyncClient, member, auth_headers, payload):
    response = await client.post(REPORTS_URL, json=payload, headers=auth_headers(member))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error_code"] == "invalid_argument"


@pytest.mark.asyncio
async def test_submit_without_reason(client: AsyncClient, make_post, author, member, auth_headers):
    post = await make_post(author)

    response = await client.post(REPORTS_URL, json={"post_id": post.id}, headers=auth_headers(member))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error_code"] == "invalid_argument"
    assert response.json()["message"] == "A report reason is required"


@pytest.mark.asyncio
async def test_submit_against_missing_post(client: AsyncClient, member, auth_headers):
    response = await client.post(
        REPORTS_URL, json={"post_id": "does-not-exist", "reason": "Spam"}, headers=auth_headers(member)
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error_code"] == "post_not_found"


@pytest.mark.asyncio
async def test_members_cannot_moderate(client: AsyncClient, make_post, author, member, auth_headers, db_session: AsyncSession):
    post = await make_post(author)
    report_id = await _file_report(client, auth_headers(member), post.id)

    responses = [
        await client.get(REPORTS_URL, headers=auth_headers(member)),
        await client.get(f"{REPORTS_URL}/{report_id}", headers=auth_headers(member)),
        await client.get(f"{REPORTS_URL}/post/{post.id}", headers=auth_headers(member)),
        await client.patch(f"{REPORTS_URL}/{report_id}", json={"status": "dismissed"}, headers=auth_headers(author)),
    ]

    assert [r.status_code for r in responses] == [status.HTTP_403_FORBIDDEN] * 4
    report = await db_session.get(Report, report_id, populate_existing=True)
    assert report.status == ReportStatus.PENDING


@pytest.mark.asyncio
async def test_update_with_unknown_status(client: AsyncClient, make_post, author, member, moderator, auth_headers):
    post = await make_post(author)
    report_id = await _file_report(client, auth_headers(member), post.id)

    response = await client.patch(
        f"{REPORTS_URL}/{report_id}", json={"status": "closed"}, headers=auth_headers(moderator)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error_code"] == "invalid_argument"


@pytest.mark.asyncio
async def test_update_without_status(client: AsyncClient, make_post, author, member, moderator, auth_headers, db_session: AsyncSession):
    post = await make_post(author)
    report_id = await _file_report(client, auth_headers(member), post.id)

    response = await client.patch(
        f"{REPORTS_URL}/{report_id}", json={"admin_notes": "looked at it"}, headers=auth_headers(moderator)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Status is required"
    report = await db_session.get(Report, report_id, populate_existing=True)
    assert report.status == ReportStatus.PENDING
    assert report.admin_notes is None


@pytest.mark.asyncio
async def test_unknown_report(client: AsyncClient, moderator, auth_headers):
    get_response = await client.get(f"{REPORTS_URL}/missing", headers=auth_headers(moderator))
    patch_response = await client.patch(
        f"{REPORTS_URL}/missing", json={"status": "reviewed"}, headers=auth_headers(moderator)
    )

    assert get_response.status_code == status.HTTP_404_NOT_FOUND
    assert patch_response.status_code == status.HTTP_404_NOT_FOUND
    assert patch_response.json()["error_code"] == "report_not_found"


@pytest.mark.asyncio
async def test_list_filters_by_status(client: AsyncClient, make_post, author, member, moderator, auth_headers):
    post = await make_post(author)
    first = await _file_report(client, auth_headers(member), post.id)
    second = await _file_report(client, auth_headers(member), post.id, reason="Hate speech")
    await client.patch(f"{REPORTS_URL}/{first}", json={"status": "dismissed"}, headers=auth_headers(moderator))

    everything = await client.get(REPORTS_URL, headers=auth_headers(moderator))
    pending = await client.get(REPORTS_URL, params={"status": "pending"}, headers=auth_headers(moderator))
    bogus = await client.get(REPORTS_URL, params={"status": "open"}, headers=auth_headers(moderator))

    assert [r["id"] for r in everything.json()] == [second, first]
    assert [r["id"] for r in pending.json()] == [second]
    assert bogus.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_snapshot_survives_post_deletion(client: AsyncClient, make_post, author, member, moderator, auth_headers):
    post = await make_post(author, content="gone soon", image="https://img.buzzly.io/a.png")
    report_id = await _file_report(client, auth_headers(member), post.id, reason="Violence")

    response = await client.delete(f"/api/v1/posts/{post.id}", headers=auth_headers(author))
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = await client.get(f"{REPORTS_URL}/{report_id}", headers=auth_headers(moderator))
    assert response.status_code == status.HTTP_200_OK
    report = response.json()
    assert report["post_exists"] is False
    assert report["current_post"] is None
    assert report["content_snapshot"]["content"] == "gone soon"
    assert report["content_snapshot"]["image"] == "https://img.buzzly.io/a.png"

    by_post = await client.get(f"{REPORTS_URL}/post/{post.id}", headers=auth_headers(moderator))
    assert [r["id"] for r in by_post.json()] == [report_id]

    response = await client.patch(
        f"{REPORTS_URL}/{report_id}", json={"status": "resolved"}, headers=auth_headers(moderator)
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["report"]["content_snapshot"]["content"] == "gone soon"


@pytest.mark.asyncio
async def test_pending_reports_show_in_admin_stats(client: AsyncClient, make_post, author, member, moderator, auth_headers):
    post = await make_post(author)
    await _file_report(client, auth_headers(member), post.id)
    resolved = await _file_report(client, auth_headers(member), post.id)
    await client.patch(f"{REPORTS_URL}/{resolved}", json={"status": "resolved"}, headers=auth_headers(moderator))

    response = await client.get("/api/v1/admin/stats", headers=auth_headers(moderator))

    assert response.json()["pending_reports"] == 1
