# buzzly/db/repositories/report_repo.py
from datetime import datetime
from typing import List, Optional
from sqlmodel import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.db.models import Report, ReportStatus
from buzzly.db.repositories.base import BaseRepository

class ReportRepository(BaseRepository[Report]):
    async def get_fresh(self, session: AsyncSession, id: str) -> Optional[Report]:
        """Load a report bypassing the identity map, so a concurrent write is visible."""
        return await session.get(Report, id, populate_existing=True)

    async def list_reports(
        self, session: AsyncSession, *, status: Optional[ReportStatus] = None, limit: int = 50
    ) -> List[Report]:
        statement = select(Report).order_by(Report.created_at.desc()).limit(limit)
        if status is not None:
            statement = statement.where(Report.status == status)
        result = await session.execute(statement)
        return result.scalars().all()

    async def list_for_post(self, session: AsyncSession, *, post_id: str) -> List[Report]:
        statement = (
            select(Report)
            .where(Report.post_id == post_id)
            .order_by(Report.created_at.desc())
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def count_by_status(self, session: AsyncSession, *, status: ReportStatus) -> int:
        statement = select(func.count()).select_from(Report).where(Report.status == status)
        return (await session.execute(statement)).scalar_one()

    async def update_status_if(
        self,
        session: AsyncSession,
        *,
        id: str,
        expected: ReportStatus,
        new_status: ReportStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_notes: Optional[str] = None,
    ) -> bool:
        """
        Compare-and-set on the status column.

        The row is only written when its stored status still equals `expected`;
        the check and the write happen in a single UPDATE statement.
        Returns True when the row was updated.
        """
        values = {
            "status": new_status,
            "reviewed_by": reviewed_by,
            "reviewed_at": reviewed_at,
        }
        if admin_notes is not None:
            values["admin_notes"] = admin_notes

        statement = (
            update(Report)
            .where(Report.id == id, Report.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(statement)
        await session.commit()
        return result.rowcount == 1

report_repo = ReportRepository(Report)
