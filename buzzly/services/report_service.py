"""Report lifecycle: submission, moderator transitions and moderator reads."""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.core.config import settings
from buzzly.core import metrics
from buzzly.db.models import Post, Report, ReportReason, ReportStatus, utcnow
from buzzly.db.repositories.post_repo import post_repo, like_repo
from buzzly.db.repositories.report_repo import ReportRepository, report_repo
from buzzly.db.repositories.user_repo import user_repo
from buzzly.errors import (
    Forbidden,
    InvalidArgument,
    InvalidTransition,
    PostNotFound,
    ReportNotFound,
)
from buzzly.schemas.auth import UserPublic
from buzzly.schemas.post import PostPublic
from buzzly.schemas.reports import ContentSnapshot, ReportDetail

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.REVIEWED, ReportStatus.RESOLVED, ReportStatus.DISMISSED}),
    ReportStatus.REVIEWED: frozenset({ReportStatus.RESOLVED, ReportStatus.DISMISSED}),
    # Closed decisions are re-triaged from pending, never amended in place.
    ReportStatus.RESOLVED: frozenset({ReportStatus.PENDING}),
    ReportStatus.DISMISSED: frozenset({ReportStatus.PENDING}),
}


def can_transition(current: ReportStatus, new_status: ReportStatus) -> bool:
    return new_status in ALLOWED_TRANSITIONS[current]


def parse_reason(value: Optional[str]) -> ReportReason:
    if not value or not value.strip():
        raise InvalidArgument(message="A report reason is required")
    try:
        return ReportReason(value)
    except ValueError:
        allowed = ", ".join(reason.value for reason in ReportReason)
        raise InvalidArgument(message=f"Invalid reason. Must be one of: {allowed}")


def parse_status(value: Optional[str]) -> ReportStatus:
    if not value:
        raise InvalidArgument(message="Status is required")
    try:
        return ReportStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in ReportStatus)
        raise InvalidArgument(message=f"Invalid status. Must be one of: {allowed}")


def snapshot_post(post: Post) -> dict:
    """Copy of the reported post as evidence, independent of later edits or deletion."""
    return {
        "content": post.content,
        "image": post.image,
        "author_id": post.author_id,
        "created_at": post.created_at.isoformat() if post.created_at else None,
    }


def _ensure_moderator(actor_is_moderator: bool) -> None:
    if not actor_is_moderator:
        raise Forbidden(message="Access denied. Admin privileges required.")


class ReportService:
    def __init__(self, repository: ReportRepository, max_retries: int):
        self.repository = repository
        self.max_retries = max_retries

    async def submit(
        self,
        session: AsyncSession,
        *,
        post_id: Optional[str],
        reporter_id: str,
        reason: Optional[str],
        description: Optional[str] = None,
    ) -> Report:
        if not post_id:
            raise InvalidArgument(message="Post ID is required")
        parsed_reason = parse_reason(reason)

        post = await post_repo.get(session, post_id)
        if not post:
            raise PostNotFound()

        report = Report(
            post_id=post.id,
            reporter_id=reporter_id,
            reason=parsed_reason,
            description=description or "",
            status=ReportStatus.PENDING,
            content_snapshot=snapshot_post(post),
        )
        report = await self.repository.create(session, obj_in=report)
        metrics.REPORTS_SUBMITTED.labels(reason=parsed_reason.value).inc()
        logger.info(f"Report {report.id} filed by {reporter_id} against post {post_id} ({parsed_reason.value})")
        return report

    async def transition(
        self,
        session: AsyncSession,
        *,
        report_id: str,
        actor_id: str,
        actor_is_moderator: bool,
        new_status: Optional[str],
        notes: Optional[str] = None,
    ) -> Report:
        """
        Move a report to `new_status` on behalf of a moderator.

        The legality check is bound to the status it was made against: the
        write is a compare-and-set on that status, and when another moderator
        got there first the report is re-read and checked again.
        """
        _ensure_moderator(actor_is_moderator)
        target = parse_status(new_status)

        for attempt in range(self.max_retries + 1):
            report = await self.repository.get_fresh(session, report_id)
            if not report:
                raise ReportNotFound()

            current = ReportStatus(report.status)
            if not can_transition(current, target):
                raise InvalidTransition(current.value, target.value)

            updated = await self.repository.update_status_if(
                session,
                id=report_id,
                expected=current,
                new_status=target,
                reviewed_by=actor_id,
                reviewed_at=utcnow(),
                admin_notes=notes,
            )
            if updated:
                metrics.REPORT_TRANSITIONS.labels(from_status=current.value, to_status=target.value).inc()
                logger.info(f"Report {report_id} moved {current.value} -> {target.value} by {actor_id}")
                return await self.repository.get_fresh(session, report_id)

            metrics.REPORT_TRANSITION_CONFLICTS.inc()
            logger.warning(
                f"Report {report_id} changed while moving {current.value} -> {target.value} "
                f"(attempt {attempt + 1}), re-checking"
            )

        raise InvalidTransition(current.value, target.value)

    async def list_reports(
        self,
        session: AsyncSession,
        *,
        actor_is_moderator: bool,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Report]:
        _ensure_moderator(actor_is_moderator)
        status_filter = parse_status(status) if status else None
        return await self.repository.list_reports(
            session, status=status_filter, limit=limit or settings.REPORT_LIST_LIMIT
        )

    async def get_report(self, session: AsyncSession, *, report_id: str, actor_is_moderator: bool) -> Report:
        _ensure_moderator(actor_is_moderator)
        report = await self.repository.get_fresh(session, report_id)
        if not report:
            raise ReportNotFound()
        return report

    async def list_for_post(self, session: AsyncSession, *, post_id: str, actor_is_moderator: bool) -> List[Report]:
        _ensure_moderator(actor_is_moderator)
        return await self.repository.list_for_post(session, post_id=post_id)

    async def describe(
        self, session: AsyncSession, reports: List[Report], *, with_post_state: bool = False
    ) -> List[ReportDetail]:
        """Attach reporter, snapshot author and reviewer summaries for moderator views."""
        user_ids = set()
        for report in reports:
            user_ids.add(report.reporter_id)
            if report.reviewed_by:
                user_ids.add(report.reviewed_by)
            if report.content_snapshot.get("author_id"):
                user_ids.add(report.content_snapshot["author_id"])
        users = await user_repo.get_many(session, ids=user_ids)

        def summary(user_id: Optional[str]) -> Optional[UserPublic]:
            user = users.get(user_id) if user_id else None
            return UserPublic.model_validate(user) if user else None

        details = []
        for report in reports:
            snapshot = ContentSnapshot(
                **report.content_snapshot,
                author=summary(report.content_snapshot.get("author_id")),
            )
            detail = ReportDetail.model_validate(report).model_copy(
                update={
                    "content_snapshot": snapshot,
                    "reporter": summary(report.reporter_id),
                    "reviewed_by_user": summary(report.reviewed_by),
                }
            )
            if with_post_state:
                post = await post_repo.get_by_id_with_author(session, id=report.post_id)
                detail.post_exists = post is not None
                if post:
                    like_count = await like_repo.count_for(session, post_id=post.id)
                    detail.current_post = PostPublic.model_validate(post).model_copy(update={"like_count": like_count})
            details.append(detail)
        return details

report_service = ReportService(report_repo, max_retries=settings.REPORT_TRANSITION_MAX_RETRIES)
