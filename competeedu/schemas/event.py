from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from competeedu.models.enums import ResultsStatus


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    scoring_deadline: Optional[datetime] = None
    public_vote_weight: int = Field(0, ge=0, le=100, description="Percent of the final score taken from public votes")


class EventUpdate(BaseModel):
    """Partial update; fields left out keep their value"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    scoring_deadline: Optional[datetime] = None
    public_vote_weight: Optional[int] = Field(None, ge=0, le=100)


class EventResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    scoring_deadline: Optional[datetime] = None
    results_status: ResultsStatus
    public_vote_weight: int
    results_published_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ResultsStatusChange(BaseModel):
    status: ResultsStatus
    override: bool = Field(False, description="Allow moving back to an earlier status")


class ResultsStatusChangeResponse(BaseModel):
    message: str
    previous_status: ResultsStatus
    event: EventResponse


class ScoringAlert(BaseModel):
    """Overdue scoring reminder, for display only"""
    id: UUID
    title: str
    end_date: Optional[datetime] = None
    scoring_deadline: Optional[datetime] = None
    results_status: ResultsStatus
    days_overdue: int
    urgent: bool


class JudgeProgressResponse(BaseModel):
    judge_id: UUID
    full_name: str
    email: str
    scored_count: int
    total_submissions: int

    class Config:
        from_attributes = True


class EventJudgeResponse(BaseModel):
    event_id: UUID
    judge_id: UUID
    assigned_at: datetime

    class Config:
        from_attributes = True
