import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from competeedu.db import utcnow
from competeedu.models import (
    Badge, Event, EvaluationCriterion, Submission, SubmissionResult,
    SubmissionScore, SubmissionVote, User
)
from competeedu.models.enums import ResultsStatus, SubmissionStatus
from competeedu.settings import settings
from competeedu.utils.badge_utils import issue_badge
from competeedu.utils.lifecycle import (
    COMPUTE_STATES, PUBLISH_STATES, apply_transition, check_results_status
)
from competeedu.utils.scoring import (
    RankCandidate, ScoreRow, TierPolicy, blend_final_score, compute_weighted_score,
    count_judges, public_vote_score, rank_submissions
)


async def load_score_rows(session: AsyncSession, event_id: UUID) -> Dict[UUID, List[ScoreRow]]:
    """All scores of an event joined to criterion weights, grouped by submission"""
    query = (
        select(
            SubmissionScore.submission_id,
            SubmissionScore.judge_id,
            SubmissionScore.criterion_id,
            SubmissionScore.score,
            EvaluationCriterion.weight
        )
        .join(EvaluationCriterion, EvaluationCriterion.id == SubmissionScore.criterion_id)
        .where(EvaluationCriterion.event_id == event_id)
    )
    result = await session.execute(query)

    rows_by_submission: Dict[UUID, List[ScoreRow]] = defaultdict(list)
    for row in result.all():
        rows_by_submission[row.submission_id].append(
            ScoreRow(
                judge_id=row.judge_id,
                criterion_id=row.criterion_id,
                score=row.score,
                weight=row.weight
            )
        )
    return rows_by_submission


async def load_vote_counts(session: AsyncSession, event_id: UUID) -> Dict[UUID, int]:
    query = (
        select(SubmissionVote.submission_id, func.count(SubmissionVote.id).label("votes"))
        .join(Submission, Submission.id == SubmissionVote.submission_id)
        .where(Submission.event_id == event_id)
        .group_by(SubmissionVote.submission_id)
    )
    result = await session.execute(query)
    return {row.submission_id: row.votes for row in result.all()}


async def compute_submission_score(session: AsyncSession, submission_id: UUID) -> Optional[float]:
    """Weighted 0-100 score of one submission, None when it has no scores"""
    query = (
        select(
            SubmissionScore.judge_id,
            SubmissionScore.criterion_id,
            SubmissionScore.score,
            EvaluationCriterion.weight
        )
        .join(EvaluationCriterion, EvaluationCriterion.id == SubmissionScore.criterion_id)
        .where(SubmissionScore.submission_id == submission_id)
    )
    result = await session.execute(query)
    return compute_weighted_score(ScoreRow(*row) for row in result.all())


async def compute_event_results(
        session: AsyncSession,
        event: Event,
        policy: Optional[TierPolicy] = None
) -> List[SubmissionResult]:
    """
    Aggregate, rank and store the results of an event, then move it to review.

    Results are keyed by submission and overwritten on recompute; results of
    submissions that lost all their scores are removed. Unscored submissions
    are skipped rather than failing the batch.
    """
    check_results_status(event, COMPUTE_STATES, "Results can only be computed after scoring is locked")
    policy = policy or TierPolicy.from_settings(settings)

    criteria_count = await session.execute(
        select(func.count(EvaluationCriterion.id)).where(EvaluationCriterion.event_id == event.id)
    )
    if not criteria_count.scalar_one():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No rubric criteria found for this event"
        )

    submissions_result = await session.execute(
        select(Submission).where(Submission.event_id == event.id)
    )
    submissions = {submission.id: submission for submission in submissions_result.scalars().all()}
    if not submissions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No submissions found"
        )

    rows_by_submission = await load_score_rows(session, event.id)
    vote_counts = await load_vote_counts(session, event.id)
    max_votes = max(vote_counts.values(), default=0)

    computed: Dict[UUID, Tuple[float, int, float, float, int]] = {}
    candidates = []
    for submission_id, submission in submissions.items():
        rows = rows_by_submission.get(submission_id, [])
        weighted_score = compute_weighted_score(rows)
        if weighted_score is None:
            logging.info(f"Submission {submission_id} has no scores, excluded from ranking")
            continue

        votes = vote_counts.get(submission_id, 0)
        vote_score = public_vote_score(votes, max_votes)
        final_score = blend_final_score(
            weighted_score, vote_score, event.public_vote_weight, settings.max_public_vote_weight
        )
        computed[submission_id] = (weighted_score, votes, vote_score, final_score, count_judges(rows))
        candidates.append(RankCandidate(submission_id, submission.created_at, final_score))

    ranked = rank_submissions(candidates, policy)
    if not ranked:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No scored submissions to rank"
        )

    existing_result = await session.execute(
        select(SubmissionResult).where(SubmissionResult.event_id == event.id)
    )
    existing = {result.submission_id: result for result in existing_result.scalars().all()}

    stale_ids = [submission_id for submission_id in existing if submission_id not in computed]
    if stale_ids:
        await session.execute(
            delete(SubmissionResult).where(SubmissionResult.submission_id.in_(stale_ids))
        )

    computed_at = utcnow()
    results = []
    for entry in ranked:
        weighted_score, votes, vote_score, final_score, judge_count = computed[entry.submission_id]
        result = existing.get(entry.submission_id)
        if result is None:
            result = SubmissionResult(
                submission_id=entry.submission_id,
                event_id=event.id,
                student_id=submissions[entry.submission_id].student_id
            )
            session.add(result)
        result.weighted_score = weighted_score
        result.public_vote_count = votes
        result.public_vote_score = vote_score
        result.final_score = final_score
        result.judge_count = judge_count
        result.rank = entry.rank
        result.tier = entry.tier.value
        result.computed_at = computed_at
        results.append(result)

    if event.results_status != ResultsStatus.REVIEW.value:
        apply_transition(event, ResultsStatus.REVIEW)

    await session.commit()
    logging.info(
        f"Computed results for event {event.id}: {len(results)} ranked, "
        f"{len(submissions) - len(results)} unscored"
    )
    return results


async def load_event_results(session: AsyncSession, event_id: UUID) -> List[SubmissionResult]:
    result = await session.execute(
        select(SubmissionResult)
        .options(
            selectinload(SubmissionResult.student).selectinload(User.school),
            selectinload(SubmissionResult.submission)
        )
        .where(SubmissionResult.event_id == event_id)
        .order_by(SubmissionResult.rank)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def load_event_badges(session: AsyncSession, event_id: UUID) -> List[Badge]:
    result = await session.execute(
        select(Badge).where(Badge.event_id == event_id).order_by(Badge.rank)
    )
    return list(result.scalars().all())


async def publish_event_results(
        session: AsyncSession,
        event: Event,
        issued_by: Optional[str] = None
) -> Tuple[List[Badge], int]:
    """
    Issue badges for every computed result and publish the event.

    Issuance is idempotent per submission, so publishing never mints a second
    credential for a placement. If another request published the same event
    concurrently, its badges are returned. Returns the badges of the event
    and how many were newly created.
    """
    check_results_status(event, PUBLISH_STATES, "Results must be computed before publishing")
    event_id = event.id

    results = await load_event_results(session, event_id)
    if not results:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No results computed for this event"
        )

    submissions_result = await session.execute(
        select(Submission)
        .options(selectinload(Submission.student).selectinload(User.school))
        .where(Submission.id.in_([result.submission_id for result in results]))
        .execution_options(populate_existing=True)
    )
    submissions = {submission.id: submission for submission in submissions_result.scalars().all()}

    created = 0
    badges = []
    try:
        for result in results:
            submission = submissions[result.submission_id]
            badge, is_new = await issue_badge(
                session,
                submission,
                event,
                rank=result.rank,
                tier=result.tier,
                weighted_score=result.final_score,
                issued_by=issued_by
            )
            submission.status = SubmissionStatus.AWARDED.value
            created += int(is_new)
            badges.append(badge)

        event.results_published_at = utcnow()
        apply_transition(event, ResultsStatus.PUBLISHED)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        await session.refresh(event)
        logging.warning(f"Concurrent publication of event {event_id}, returning existing badges")
        return await load_event_badges(session, event_id), 0

    logging.info(f"Published results for event {event_id}: {created} badge(s) issued, {len(badges) - created} existing")
    return badges, created
