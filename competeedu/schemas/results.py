from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel

from competeedu.models.enums import BadgeTier, ResultsStatus
from competeedu.schemas.badge import BadgeResponse


class SubmissionResultResponse(BaseModel):
    submission_id: UUID
    student_id: UUID
    student_name: Optional[str] = None
    school_name: Optional[str] = None
    submission_title: Optional[str] = None
    weighted_score: float
    public_vote_count: int
    public_vote_score: float
    final_score: float
    judge_count: int
    rank: int
    tier: BadgeTier
    computed_at: Optional[datetime] = None


class ComputeResultsResponse(BaseModel):
    event_id: UUID
    results_status: ResultsStatus
    count: int
    results: List[SubmissionResultResponse]


class PublishResultsResponse(BaseModel):
    event_id: UUID
    results_status: ResultsStatus
    badge_count: int
    created_count: int
    badges: List[BadgeResponse]


class EventResultsResponse(BaseModel):
    event_id: UUID
    title: str
    results_status: ResultsStatus
    results_published_at: Optional[datetime] = None
    results: List[SubmissionResultResponse]
