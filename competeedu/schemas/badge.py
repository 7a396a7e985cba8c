from datetime import datetime
from uuid import UUID
from pydantic import BaseModel

from competeedu.models.enums import BadgeTier


class BadgeResponse(BaseModel):
    credential_id: str
    event_id: UUID
    tier: BadgeTier
    rank: int
    weighted_score: float
    student_name: str
    school_name: str
    event_name: str
    issued_by: str
    is_public: bool
    issued_at: datetime

    class Config:
        from_attributes = True


class BadgeVerificationResponse(BaseModel):
    is_valid: bool
    badge: BadgeResponse
    image_url: str
