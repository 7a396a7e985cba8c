from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.jwt import get_optional_user
from competeedu.auth.policy import Action, is_authorized, require_action
from competeedu.db import get_session
from competeedu.models import SubmissionResult, User
from competeedu.schemas.results import ComputeResultsResponse, EventResultsResponse, PublishResultsResponse
from competeedu.settings import settings
from competeedu.utils.background_tasks import BadgeNotification, send_results_published_emails
from competeedu.utils.evaluation_utils import get_event_or_404
from competeedu.utils.lifecycle import PUBLIC_RESULTS_STATES, check_results_status
from competeedu.utils.results_utils import compute_event_results, load_event_results, publish_event_results
from competeedu.utils.site_settings import SiteSettingsSnapshot, get_site_settings

router = APIRouter(prefix="/results", tags=["results"])


def serialize_result(result: SubmissionResult) -> dict:
    student = result.student
    return {
        "submission_id": result.submission_id,
        "student_id": result.student_id,
        "student_name": student.full_name if student else None,
        "school_name": student.school.name if student and student.school else None,
        "submission_title": result.submission.title if result.submission else None,
        "weighted_score": result.weighted_score,
        "public_vote_count": result.public_vote_count,
        "public_vote_score": result.public_vote_score,
        "final_score": result.final_score,
        "judge_count": result.judge_count,
        "rank": result.rank,
        "tier": result.tier,
        "computed_at": result.computed_at
    }


@router.post("/events/{event_id}/compute", response_model=ComputeResultsResponse)
async def compute_results(
        event_id: UUID,
        current_user: User = Depends(require_action(Action.COMPUTE_RESULTS)),
        session: AsyncSession = Depends(get_session)
):
    """
    Aggregate scores, rank submissions and assign tiers

    Allowed once scoring is locked; recomputing in review overwrites the
    previous results. Moves the event to review.
    """
    event = await get_event_or_404(session, event_id)
    await compute_event_results(session, event)
    results = await load_event_results(session, event_id)

    return {
        "event_id": event_id,
        "results_status": event.results_status,
        "count": len(results),
        "results": [serialize_result(result) for result in results]
    }


@router.post("/events/{event_id}/publish", response_model=PublishResultsResponse)
async def publish_results(
        event_id: UUID,
        background_tasks: BackgroundTasks,
        current_user: User = Depends(require_action(Action.PUBLISH_RESULTS)),
        site_settings: SiteSettingsSnapshot = Depends(get_site_settings),
        session: AsyncSession = Depends(get_session)
):
    """Issue badges for the computed results and make them public"""
    event = await get_event_or_404(session, event_id)
    site_name = site_settings.get("site_name", settings.badge_issuer_name)

    badges, created = await publish_event_results(session, event, issued_by=site_name)

    if created:
        students_result = await session.execute(
            select(User.id, User.email).where(User.id.in_({badge.student_id for badge in badges}))
        )
        emails = {row.id: row.email for row in students_result.all()}
        notifications = [
            BadgeNotification(
                email=emails[badge.student_id],
                student_name=badge.student_name,
                event_name=badge.event_name,
                tier=badge.tier,
                rank=badge.rank,
                credential_id=badge.credential_id
            )
            for badge in badges
            if badge.student_id in emails
        ]
        background_tasks.add_task(send_results_published_emails, notifications, site_name)

    return {
        "event_id": event_id,
        "results_status": event.results_status,
        "badge_count": len(badges),
        "created_count": created,
        "badges": badges
    }


@router.get("/events/{event_id}", response_model=EventResultsResponse)
async def get_event_results(
        event_id: UUID,
        current_user: Optional[User] = Depends(get_optional_user),
        session: AsyncSession = Depends(get_session)
):
    """Leaderboard: public once published, admins can preview it in review"""
    event = await get_event_or_404(session, event_id)

    if not (current_user and is_authorized(current_user.role_names, Action.VIEW_RESULTS_DRAFT)):
        check_results_status(event, PUBLIC_RESULTS_STATES, "Results are not published yet")

    results: List[SubmissionResult] = await load_event_results(session, event_id)
    return {
        "event_id": event.id,
        "title": event.title,
        "results_status": event.results_status,
        "results_published_at": event.results_published_at,
        "results": [serialize_result(result) for result in results]
    }
