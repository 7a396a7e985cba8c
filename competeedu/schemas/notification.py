from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from competeedu.models.enums import UserRole


class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: str = Field("event_alert", max_length=50)
    recipient_role: UserRole
    event_id: Optional[UUID] = None


class NotificationResponse(BaseModel):
    id: UUID
    title: str
    message: str
    type: str
    recipient_role: UserRole
    event_id: Optional[UUID] = None
    event_title: Optional[str] = None
    sender_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True
