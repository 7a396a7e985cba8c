from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.jwt import get_current_user
from competeedu.auth.policy import Action, require_action
from competeedu.db import get_session
from competeedu.models import School, User
from competeedu.schemas.school import SchoolCreate, SchoolResponse

router = APIRouter(prefix="/schools", tags=["schools"])


@router.post("", response_model=SchoolResponse, status_code=status.HTTP_201_CREATED)
async def create_school(
        school_data: SchoolCreate,
        current_user: User = Depends(require_action(Action.MANAGE_SCHOOLS)),
        session: AsyncSession = Depends(get_session)
):
    existing = await session.execute(select(School.id).where(School.name == school_data.name))
    if existing.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="School with this name already exists"
        )

    school = School(name=school_data.name, address=school_data.address)
    session.add(school)
    await session.commit()
    return school


@router.get("", response_model=List[SchoolResponse])
async def list_schools(
        current_user: User = Depends(get_current_user),
        session: AsyncSession = Depends(get_session)
):
    result = await session.execute(select(School).order_by(School.name))
    return result.scalars().all()
