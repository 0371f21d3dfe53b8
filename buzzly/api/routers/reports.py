# buzzly/api/routers/reports.py
from fastapi import APIRouter, Depends, status
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.db.session import get_session
from buzzly.core.auth import get_current_user
from buzzly.schemas.auth import TokenUser
from buzzly.schemas.reports import (
    ReportCreate,
    ReportDetail,
    ReportStatusUpdate,
    ReportSubmitResponse,
    ReportUpdateResponse,
)
from buzzly.services.report_service import report_service

router = APIRouter()


@router.post("", response_model=ReportSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_report(
    report_in: ReportCreate,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Report a post for moderation.

    The post's current content is captured with the report, so moderators
    see what was reported even if the post is later edited or deleted.
    """
    report = await report_service.submit(
        session,
        post_id=report_in.post_id,
        reporter_id=current_user.id,
        reason=report_in.reason,
        description=report_in.description,
    )
    return ReportSubmitResponse(
        status=True,
        message="Report submitted successfully",
        report_id=report.id,
    )


@router.get("", response_model=List[ReportDetail])
async def list_reports(
    status: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    (Admin) List reports newest first, optionally filtered by status.
    """
    reports = await report_service.list_reports(
        session, actor_is_moderator=current_user.is_moderator, status=status
    )
    return await report_service.describe(session, reports)


@router.get("/post/{post_id}", response_model=List[ReportDetail])
async def list_reports_for_post(
    post_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    (Admin) Every report filed against one post.
    """
    reports = await report_service.list_for_post(
        session, post_id=post_id, actor_is_moderator=current_user.is_moderator
    )
    return await report_service.describe(session, reports)


@router.get("/{report_id}", response_model=ReportDetail)
async def get_report(
    report_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    (Admin) A single report, with whether its post still exists.
    """
    report = await report_service.get_report(
        session, report_id=report_id, actor_is_moderator=current_user.is_moderator
    )
    [detail] = await report_service.describe(session, [report], with_post_state=True)
    return detail


@router.patch("/{report_id}", response_model=ReportUpdateResponse)
async def update_report_status(
    report_id: str,
    update_in: ReportStatusUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    (Admin) Move a report through its review lifecycle.

    `admin_notes`, when given, replaces any earlier notes.
    """
    report = await report_service.transition(
        session,
        report_id=report_id,
        actor_id=current_user.id,
        actor_is_moderator=current_user.is_moderator,
        new_status=update_in.status,
        notes=update_in.admin_notes,
    )
    [detail] = await report_service.describe(session, [report])
    return ReportUpdateResponse(
        status=True,
        message=f"Report marked as {detail.status.value}",
        report=detail,
    )
