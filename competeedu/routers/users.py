import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.policy import Action, require_action
from competeedu.auth.utils import get_password_hash
from competeedu.db import get_session
from competeedu.models import EventJudge, Role, School, SubmissionScore, User, User2Roles
from competeedu.models.enums import UserRole
from competeedu.schemas.user import JudgeCreate, JudgeUpdate, StudentCreate, UserResponse

router = APIRouter(prefix="/users", tags=["users"])


async def get_role(session: AsyncSession, role: UserRole) -> Role:
    result = await session.execute(select(Role).where(Role.name == role.value))
    role_row = result.scalar_one_or_none()
    if not role_row:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Role '{role.value}' is not seeded"
        )
    return role_row


async def create_user_with_role(
        session: AsyncSession,
        email: str,
        password: str,
        full_name: str,
        role: UserRole,
        school_id: Optional[UUID] = None,
        expertise: Optional[str] = None,
        bio: Optional[str] = None
) -> User:
    """Create a user and link it to a role; the caller commits"""
    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

    role_row = await get_role(session, role)
    user = User(
        email=email,
        password=get_password_hash(password),
        full_name=full_name,
        school_id=school_id,
        expertise=expertise,
        bio=bio
    )
    user.user2roles.append(User2Roles(role=role_row))
    session.add(user)
    return user


async def load_user(session: AsyncSession, user_id: UUID) -> User:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one()


@router.post("/judges", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_judge(
        judge_data: JudgeCreate,
        current_user: User = Depends(require_action(Action.MANAGE_JUDGES)),
        session: AsyncSession = Depends(get_session)
):
    """Create a judge account"""
    judge = await create_user_with_role(
        session,
        email=judge_data.email,
        password=judge_data.password,
        full_name=judge_data.full_name,
        role=UserRole.JUDGE,
        expertise=judge_data.expertise,
        bio=judge_data.bio
    )
    await session.commit()
    logging.info(f"Judge {judge.email} created by {current_user.email}")
    return await load_user(session, judge.id)


@router.get("/judges", response_model=List[UserResponse])
async def list_judges(
        current_user: User = Depends(require_action(Action.MANAGE_JUDGES)),
        session: AsyncSession = Depends(get_session)
):
    query = (
        select(User)
        .join(User2Roles)
        .join(Role)
        .where(Role.name == UserRole.JUDGE.value)
        .order_by(User.full_name)
    )
    result = await session.execute(query)
    return result.scalars().unique().all()


async def get_judge_or_404(session: AsyncSession, judge_id: UUID) -> User:
    query = (
        select(User)
        .join(User2Roles)
        .join(Role)
        .where(User.id == judge_id, Role.name == UserRole.JUDGE.value)
    )
    judge = (await session.execute(query)).scalars().unique().one_or_none()
    if not judge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Judge not found"
        )
    return judge


@router.put("/judges/{judge_id}", response_model=UserResponse)
async def update_judge(
        judge_id: UUID,
        judge_data: JudgeUpdate,
        current_user: User = Depends(require_action(Action.MANAGE_JUDGES)),
        session: AsyncSession = Depends(get_session)
):
    """Update a judge's profile; fields left out keep their value"""
    judge = await get_judge_or_404(session, judge_id)
    changes = judge_data.model_dump(exclude_unset=True)
    if "full_name" in changes and not changes["full_name"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Full name cannot be empty"
        )

    for field, value in changes.items():
        setattr(judge, field, value)
    await session.commit()
    logging.info(f"Judge {judge.email} updated by {current_user.email}")
    return await load_user(session, judge.id)


@router.delete("/judges/{judge_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_judge(
        judge_id: UUID,
        current_user: User = Depends(require_action(Action.MANAGE_JUDGES)),
        session: AsyncSession = Depends(get_session)
):
    """
    Delete a judge account together with its event assignments.

    Judges who already scored submissions are kept, since their scores
    feed the results.
    """
    judge = await get_judge_or_404(session, judge_id)

    scored = await session.execute(
        select(func.count(SubmissionScore.id)).where(SubmissionScore.judge_id == judge_id)
    )
    if scored.scalar_one():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Judge has submitted scores and cannot be deleted"
        )

    email = judge.email
    await session.execute(delete(EventJudge).where(EventJudge.judge_id == judge_id))
    await session.execute(delete(User2Roles).where(User2Roles.user_id == judge_id))
    await session.execute(delete(User).where(User.id == judge_id))
    await session.commit()
    logging.info(f"Judge {email} deleted by {current_user.email}")


@router.post("/students", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
        student_data: StudentCreate,
        current_user: User = Depends(require_action(Action.MANAGE_USERS)),
        session: AsyncSession = Depends(get_session)
):
    """Create a student account, optionally attached to a school"""
    if student_data.school_id:
        school = await session.get(School, student_data.school_id)
        if not school:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="School not found"
            )

    student = await create_user_with_role(
        session,
        email=student_data.email,
        password=student_data.password,
        full_name=student_data.full_name,
        role=UserRole.STUDENT,
        school_id=student_data.school_id
    )
    await session.commit()
    return await load_user(session, student.id)
