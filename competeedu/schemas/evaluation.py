from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class ScoreEntry(BaseModel):
    criterion_id: UUID
    score: float = Field(..., ge=0, le=100, description="Score from 0 to 100")
    feedback: Optional[str] = None


class ScoresSubmit(BaseModel):
    scores: List[ScoreEntry] = Field(..., min_length=1)


class SubmissionScoreResponse(BaseModel):
    id: UUID
    submission_id: UUID
    criterion_id: UUID
    judge_id: UUID
    score: float
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubmissionScoresResponse(BaseModel):
    submission_id: UUID
    weighted_score: Optional[float] = None
    scores: List[SubmissionScoreResponse]
