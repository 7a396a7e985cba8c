import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field


class RoleResponse(BaseModel):
    id: UUID
    name: str  # super_admin, school_admin, teacher, student, judge
    description: Optional[str] = None

    class Config:
        from_attributes = True


class UserBase(BaseModel):
    email: EmailStr


class UserLogin(UserBase):
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str


class JudgeCreate(UserBase):
    full_name: str
    password: str = Field(..., min_length=8)
    expertise: Optional[str] = None
    bio: Optional[str] = None


class JudgeUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    expertise: Optional[str] = None
    bio: Optional[str] = None


class StudentCreate(UserBase):
    full_name: str
    password: str = Field(..., min_length=8)
    school_id: Optional[UUID] = None


class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    school_id: Optional[UUID] = None
    expertise: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime.datetime
    roles: List[RoleResponse] = []

    class Config:
        from_attributes = True
