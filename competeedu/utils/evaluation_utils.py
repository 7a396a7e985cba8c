import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.db import utcnow
from competeedu.models import (
    Event, EventJudge, EvaluationCriterion, Submission, SubmissionScore, User
)
from competeedu.models.enums import SubmissionStatus
from competeedu.settings import settings
from competeedu.utils.lifecycle import SCORING_STATES, check_results_status

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class ScoreInput:
    criterion_id: UUID
    score: float
    feedback: Optional[str] = None


@dataclass(frozen=True)
class JudgeProgress:
    judge_id: UUID
    full_name: str
    email: str
    scored_count: int
    total_submissions: int


async def get_submission_or_404(session: AsyncSession, submission_id: UUID) -> Submission:
    result = await session.execute(
        select(Submission).where(Submission.id == submission_id)
    )
    submission = result.scalar_one_or_none()
    if not submission:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Submission not found"
        )
    return submission


async def get_event_or_404(session: AsyncSession, event_id: UUID) -> Event:
    result = await session.execute(
        select(Event).where(Event.id == event_id)
    )
    event = result.scalar_one_or_none()
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found"
        )
    return event


async def is_judge_assigned(session: AsyncSession, event_id: UUID, judge_id: UUID) -> bool:
    result = await session.execute(
        select(EventJudge.id).where(
            EventJudge.event_id == event_id,
            EventJudge.judge_id == judge_id
        )
    )
    return result.first() is not None


def validate_score(score: float) -> None:
    if score is None or not (MIN_SCORE <= score <= MAX_SCORE):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
        )


async def _upsert_scores(
        session: AsyncSession,
        submission_id: UUID,
        judge_id: UUID,
        entries: Iterable[ScoreInput]
) -> Tuple[Submission, List[SubmissionScore]]:
    submission = await get_submission_or_404(session, submission_id)
    event = await get_event_or_404(session, submission.event_id)

    check_results_status(event, SCORING_STATES, "Scoring is locked for this event")

    if settings.enforce_judge_assignment and not await is_judge_assigned(session, event.id, judge_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Judge is not assigned to this event"
        )

    # Last entry wins when a criterion appears twice in one batch
    by_criterion: Dict[UUID, ScoreInput] = {}
    for entry in entries:
        validate_score(entry.score)
        by_criterion[entry.criterion_id] = entry

    if not by_criterion:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No scores provided"
        )

    criteria_result = await session.execute(
        select(EvaluationCriterion.id).where(EvaluationCriterion.event_id == event.id)
    )
    event_criteria_ids = set(criteria_result.scalars().all())
    unknown = [str(cid) for cid in by_criterion if cid not in event_criteria_ids]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Criteria do not belong to this event: {', '.join(unknown)}"
        )

    existing_result = await session.execute(
        select(SubmissionScore).where(
            SubmissionScore.submission_id == submission.id,
            SubmissionScore.judge_id == judge_id,
            SubmissionScore.criterion_id.in_(list(by_criterion))
        )
    )
    existing = {row.criterion_id: row for row in existing_result.scalars().all()}

    rows = []
    for criterion_id, entry in by_criterion.items():
        row = existing.get(criterion_id)
        if row:
            row.score = entry.score
            row.feedback = entry.feedback
            row.updated_at = utcnow()
        else:
            row = SubmissionScore(
                submission_id=submission.id,
                criterion_id=criterion_id,
                judge_id=judge_id,
                score=entry.score,
                feedback=entry.feedback
            )
            session.add(row)
        rows.append(row)

    if submission.status == SubmissionStatus.PENDING.value:
        submission.status = SubmissionStatus.REVIEWED.value

    await session.commit()
    return submission, rows


async def submit_scores(
        session: AsyncSession,
        submission_id: UUID,
        judge: User,
        entries: List[ScoreInput]
) -> List[SubmissionScore]:
    """
    Store a judge's scores for one submission.

    One row per (submission, criterion, judge); a repeated score overwrites
    the previous one. Nothing is written when any check fails. A unique
    constraint conflict with a concurrent write of the same judge is retried
    once as an update.
    """
    judge_id = judge.id
    try:
        submission, rows = await _upsert_scores(session, submission_id, judge_id, entries)
    except IntegrityError:
        await session.rollback()
        logging.warning(f"Concurrent score write for submission {submission_id} by judge {judge_id}, retrying")
        submission, rows = await _upsert_scores(session, submission_id, judge_id, entries)

    logging.info(f"Judge {judge_id} saved {len(rows)} score(s) for submission {submission.id}")
    return rows


async def submit_score(
        session: AsyncSession,
        submission_id: UUID,
        criterion_id: UUID,
        judge: User,
        score: float,
        feedback: Optional[str] = None
) -> SubmissionScore:
    rows = await submit_scores(session, submission_id, judge, [ScoreInput(criterion_id, score, feedback)])
    return rows[0]


async def count_event_submissions(session: AsyncSession, event_id: UUID) -> int:
    result = await session.execute(
        select(func.count(Submission.id)).where(Submission.event_id == event_id)
    )
    return result.scalar_one()


async def get_judge_progress(session: AsyncSession, event_id: UUID) -> List[JudgeProgress]:
    """Distinct submissions scored by each assigned judge, capped at the event total"""
    total_submissions = await count_event_submissions(session, event_id)

    scored_query = (
        select(
            SubmissionScore.judge_id,
            func.count(SubmissionScore.submission_id.distinct()).label("scored_count")
        )
        .join(Submission, Submission.id == SubmissionScore.submission_id)
        .where(Submission.event_id == event_id)
        .group_by(SubmissionScore.judge_id)
    )
    scored = {row.judge_id: row.scored_count for row in (await session.execute(scored_query)).all()}

    judges_query = (
        select(User)
        .join(EventJudge, EventJudge.judge_id == User.id)
        .where(EventJudge.event_id == event_id)
        .order_by(User.full_name)
    )
    judges = (await session.execute(judges_query)).scalars().all()

    return [
        JudgeProgress(
            judge_id=judge.id,
            full_name=judge.full_name,
            email=judge.email,
            scored_count=min(scored.get(judge.id, 0), total_submissions),
            total_submissions=total_submissions
        )
        for judge in judges
    ]
