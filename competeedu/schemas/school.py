from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class SchoolCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = None


class SchoolResponse(BaseModel):
    id: UUID
    name: str
    address: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
