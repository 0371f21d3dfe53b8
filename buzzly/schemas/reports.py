from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from buzzly.db.models import ReportReason, ReportStatus
from buzzly.schemas.auth import UserPublic
from buzzly.schemas.post import PostPublic


# --- Report Schemas ---
# Input fields stay optional plain strings so that a missing or unknown value
# reaches the service and is rejected as a 400 rather than a 422.
class ReportCreate(BaseModel):
    post_id: Optional[str] = None
    reason: Optional[str] = None
    description: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "post_id": "3f9a3c1e-6f0e-4f49-9d5b-0c1f7c3e2a11",
                "reason": "Spam",
                "description": "Same link posted in every thread",
            }
        }
    }


class ReportStatusUpdate(BaseModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = None


class ContentSnapshot(BaseModel):
    content: Optional[str] = None
    image: Optional[str] = None
    author_id: Optional[str] = None
    created_at: Optional[datetime] = None
    author: Optional[UserPublic] = None


class ReportPublic(BaseModel):
    id: str
    post_id: str
    reporter_id: str
    reason: ReportReason
    description: str
    status: ReportStatus
    content_snapshot: ContentSnapshot
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    admin_notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ReportDetail(ReportPublic):
    reporter: Optional[UserPublic] = None
    reviewed_by_user: Optional[UserPublic] = None
    post_exists: Optional[bool] = None
    # live post next to the snapshot, single-report reads only
    current_post: Optional[PostPublic] = None


class ReportSubmitResponse(BaseModel):
    status: bool
    message: str
    report_id: str


class ReportUpdateResponse(BaseModel):
    status: bool
    message: str
    report: ReportDetail
