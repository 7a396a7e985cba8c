import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.policy import Action, require_action
from competeedu.db import get_session
from competeedu.models import Submission, User
from competeedu.models.enums import SubmissionStatus
from competeedu.schemas.submission import SubmissionCreate, SubmissionResponse
from competeedu.utils.evaluation_utils import get_event_or_404
from competeedu.utils.lifecycle import SUBMISSION_STATES, check_results_status

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_submission(
        submission_data: SubmissionCreate,
        current_user: User = Depends(require_action(Action.CREATE_SUBMISSION)),
        session: AsyncSession = Depends(get_session)
):
    """Enter the current student into an event"""
    event = await get_event_or_404(session, submission_data.event_id)
    check_results_status(event, SUBMISSION_STATES, "Submissions are closed for this event")

    submission = Submission(
        event_id=event.id,
        student_id=current_user.id,
        title=submission_data.title,
        description=submission_data.description,
        media_type=submission_data.media_type.value,
        media_url=submission_data.media_url,
        status=SubmissionStatus.PENDING.value
    )
    session.add(submission)
    await session.commit()
    logging.info(f"Submission {submission.id} created by {current_user.email} for event {event.id}")
    return submission


@router.get("/mine", response_model=List[SubmissionResponse])
async def get_my_submissions(
        current_user: User = Depends(require_action(Action.CREATE_SUBMISSION)),
        session: AsyncSession = Depends(get_session)
):
    result = await session.execute(
        select(Submission)
        .where(Submission.student_id == current_user.id)
        .order_by(Submission.created_at.desc())
    )
    return result.scalars().all()
