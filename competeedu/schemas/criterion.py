from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class CriterionInput(BaseModel):
    """Rubric line; an id updates an existing criterion, no id creates one"""
    id: Optional[UUID] = None
    label: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    weight: float = Field(..., ge=0, le=100)
    display_order: int = 0


class RubricSave(BaseModel):
    criteria: List[CriterionInput] = Field(..., min_length=1)


class CriterionResponse(BaseModel):
    id: UUID
    event_id: UUID
    label: str
    description: Optional[str] = None
    weight: float
    display_order: int

    class Config:
        from_attributes = True


class RubricResponse(BaseModel):
    event_id: UUID
    criteria: List[CriterionResponse]
    total_weight: float
    # Weights are normalized at aggregation time, this is informational
    weights_sum_to_100: bool
