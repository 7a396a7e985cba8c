from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from competeedu.models.enums import MediaType, SubmissionStatus


class SubmissionCreate(BaseModel):
    event_id: UUID
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    media_type: MediaType
    media_url: Optional[str] = Field(None, max_length=1024)


class SubmissionResponse(BaseModel):
    id: UUID
    event_id: UUID
    student_id: UUID
    title: Optional[str] = None
    description: Optional[str] = None
    media_type: MediaType
    media_url: Optional[str] = None
    status: SubmissionStatus
    created_at: datetime

    class Config:
        from_attributes = True
