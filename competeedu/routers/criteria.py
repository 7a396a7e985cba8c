import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.jwt import get_current_user
from competeedu.auth.policy import Action, require_action
from competeedu.db import get_session
from competeedu.models import EvaluationCriterion, Submission, SubmissionScore, User
from competeedu.models.enums import SubmissionStatus
from competeedu.schemas.criterion import RubricResponse, RubricSave
from competeedu.utils.evaluation_utils import get_event_or_404
from competeedu.utils.lifecycle import RUBRIC_EDIT_STATES, check_results_status

router = APIRouter(prefix="/events", tags=["criteria"])


async def load_criteria(session: AsyncSession, event_id: UUID) -> List[EvaluationCriterion]:
    result = await session.execute(
        select(EvaluationCriterion)
        .where(EvaluationCriterion.event_id == event_id)
        .order_by(EvaluationCriterion.display_order, EvaluationCriterion.label)
    )
    return list(result.scalars().all())


def rubric_response(event_id: UUID, criteria: List[EvaluationCriterion]) -> dict:
    total_weight = round(sum(criterion.weight for criterion in criteria), 2)
    return {
        "event_id": event_id,
        "criteria": criteria,
        "total_weight": total_weight,
        "weights_sum_to_100": abs(total_weight - 100) < 0.01
    }


@router.get("/{event_id}/criteria", response_model=RubricResponse)
async def get_rubric(
        event_id: UUID,
        current_user: User = Depends(get_current_user),
        session: AsyncSession = Depends(get_session)
):
    await get_event_or_404(session, event_id)
    return rubric_response(event_id, await load_criteria(session, event_id))


@router.put("/{event_id}/criteria", response_model=RubricResponse)
async def save_rubric(
        event_id: UUID,
        rubric: RubricSave,
        current_user: User = Depends(require_action(Action.MANAGE_RUBRIC)),
        session: AsyncSession = Depends(get_session)
):
    """
    Replace the rubric of an event

    Criteria sent with an id are updated, criteria without one are created
    and criteria missing from the payload are deleted together with their
    scores. The rubric is frozen once scoring is locked.
    """
    event = await get_event_or_404(session, event_id)
    check_results_status(event, RUBRIC_EDIT_STATES, "Rubric is locked once scoring is locked")

    existing = {criterion.id: criterion for criterion in await load_criteria(session, event_id)}

    unknown = [str(item.id) for item in rubric.criteria if item.id and item.id not in existing]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Criteria do not belong to this event: {', '.join(unknown)}"
        )

    kept_ids = set()
    for item in rubric.criteria:
        if item.id:
            criterion = existing[item.id]
            kept_ids.add(item.id)
        else:
            criterion = EvaluationCriterion(event_id=event_id)
            session.add(criterion)
        criterion.label = item.label
        criterion.description = item.description
        criterion.weight = item.weight
        criterion.display_order = item.display_order

    removed = [criterion for criterion_id, criterion in existing.items() if criterion_id not in kept_ids]
    if removed:
        await session.execute(
            delete(SubmissionScore).where(SubmissionScore.criterion_id.in_([criterion.id for criterion in removed]))
        )
        for criterion in removed:
            await session.delete(criterion)
        await session.flush()

        # Submissions left without any score go back to awaiting judges
        scored = select(SubmissionScore.submission_id).where(SubmissionScore.submission_id == Submission.id)
        await session.execute(
            update(Submission)
            .where(
                Submission.event_id == event_id,
                Submission.status == SubmissionStatus.REVIEWED.value,
                ~scored.exists()
            )
            .values(status=SubmissionStatus.PENDING.value)
            .execution_options(synchronize_session=False)
        )

    await session.commit()
    logging.info(
        f"Rubric of event {event_id} saved by {current_user.email}: "
        f"{len(rubric.criteria)} criteria, {len(removed)} removed"
    )
    return rubric_response(event_id, await load_criteria(session, event_id))
