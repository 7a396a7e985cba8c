from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.jwt import get_current_user
from competeedu.auth.policy import Action, authorize, is_authorized, require_action
from competeedu.db import get_session
from competeedu.models import SubmissionScore, User
from competeedu.schemas.evaluation import ScoresSubmit, SubmissionScoreResponse, SubmissionScoresResponse
from competeedu.utils.evaluation_utils import ScoreInput, get_submission_or_404, submit_scores
from competeedu.utils.scoring import ScoreRow, compute_weighted_score

router = APIRouter(prefix="/evaluations", tags=["evaluations"])


async def load_scores(
        session: AsyncSession,
        submission_id: UUID,
        judge_id: Optional[UUID] = None
) -> List[SubmissionScore]:
    query = select(SubmissionScore).where(SubmissionScore.submission_id == submission_id)
    if judge_id:
        query = query.where(SubmissionScore.judge_id == judge_id)
    query = query.order_by(SubmissionScore.created_at).execution_options(populate_existing=True)
    result = await session.execute(query)
    return list(result.unique().scalars().all())


def scores_response(submission_id: UUID, scores: List[SubmissionScore]) -> dict:
    weighted_score = compute_weighted_score(
        ScoreRow(score.judge_id, score.criterion_id, score.score, score.criterion.weight)
        for score in scores
    )
    return {
        "submission_id": submission_id,
        "weighted_score": weighted_score,
        "scores": scores
    }


@router.post("/submissions/{submission_id}/scores", response_model=SubmissionScoresResponse)
async def save_scores(
        submission_id: UUID,
        payload: ScoresSubmit,
        current_user: User = Depends(require_action(Action.SUBMIT_SCORE)),
        session: AsyncSession = Depends(get_session)
):
    """
    Save the current judge's scores for a submission

    Each criterion keeps one score per judge; sending it again overwrites it.
    Allowed only while scoring is open.
    """
    judge_id = current_user.id
    entries = [ScoreInput(entry.criterion_id, entry.score, entry.feedback) for entry in payload.scores]
    await submit_scores(session, submission_id, current_user, entries)
    return scores_response(submission_id, await load_scores(session, submission_id, judge_id))


@router.get("/submissions/{submission_id}/scores", response_model=SubmissionScoresResponse)
async def get_submission_scores(
        submission_id: UUID,
        current_user: User = Depends(get_current_user),
        session: AsyncSession = Depends(get_session)
):
    """Judges see their own scores, admins see every judge's"""
    await get_submission_or_404(session, submission_id)

    if is_authorized(current_user.role_names, Action.VIEW_ALL_SCORES):
        scores = await load_scores(session, submission_id)
    else:
        authorize(current_user, Action.SUBMIT_SCORE)
        scores = await load_scores(session, submission_id, current_user.id)

    return scores_response(submission_id, scores)


@router.get("/my-scores", response_model=List[SubmissionScoreResponse])
async def get_my_scores(
        current_user: User = Depends(require_action(Action.SUBMIT_SCORE)),
        session: AsyncSession = Depends(get_session)
):
    result = await session.execute(
        select(SubmissionScore)
        .where(SubmissionScore.judge_id == current_user.id)
        .order_by(SubmissionScore.created_at.desc())
    )
    return result.unique().scalars().all()
