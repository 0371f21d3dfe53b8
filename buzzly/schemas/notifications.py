from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from buzzly.db.models import NotificationType
from buzzly.schemas.auth import UserPublic


# --- Notification Schemas ---
class NotificationPublic(BaseModel):
    id: str
    notification_type: NotificationType
    content: str
    reference_id: Optional[str] = None
    sender: Optional[UserPublic] = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UnreadCount(BaseModel):
    count: int
