import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.policy import Action, require_action
from competeedu.db import get_session
from competeedu.models import Event, EventJudge, Role, Submission, User, User2Roles
from competeedu.models.enums import ResultsStatus, UserRole
from competeedu.schemas.event import (
    EventCreate, EventResponse, EventJudgeResponse, EventUpdate, JudgeProgressResponse,
    ResultsStatusChange, ResultsStatusChangeResponse, ScoringAlert
)
from competeedu.schemas.submission import SubmissionResponse
from competeedu.settings import settings
from competeedu.utils.evaluation_utils import get_event_or_404, get_judge_progress, is_judge_assigned
from competeedu.utils.lifecycle import apply_transition, as_utc, days_overdue, validate_transition

router = APIRouter(
    prefix="/events",
    tags=["events"]
)


def check_event_dates(start_date, end_date):
    if start_date and end_date and as_utc(end_date) < as_utc(start_date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End date must not be before start date"
        )


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
        event_data: EventCreate,
        current_user: User = Depends(require_action(Action.MANAGE_EVENTS)),
        session: AsyncSession = Depends(get_session)
):
    """Create a competition event"""
    check_event_dates(event_data.start_date, event_data.end_date)

    event = Event(
        title=event_data.title,
        description=event_data.description,
        start_date=event_data.start_date,
        end_date=event_data.end_date,
        scoring_deadline=event_data.scoring_deadline,
        public_vote_weight=event_data.public_vote_weight,
        results_status=ResultsStatus.NOT_STARTED.value,
        created_by=current_user.id
    )
    session.add(event)
    await session.commit()
    logging.info(f"Event '{event.title}' ({event.id}) created by {current_user.email}")
    return event


@router.get("", response_model=List[EventResponse])
async def list_events(session: AsyncSession = Depends(get_session)):
    """Public list of events"""
    result = await session.execute(select(Event).order_by(Event.created_at.desc()))
    return result.scalars().all()


@router.get("/scoring-alerts", response_model=List[ScoringAlert])
async def get_scoring_alerts(
        current_user: User = Depends(require_action(Action.MANAGE_EVENTS)),
        session: AsyncSession = Depends(get_session)
):
    """Events whose scoring deadline has passed while scoring is still not locked"""
    result = await session.execute(
        select(Event).where(
            Event.results_status.in_([ResultsStatus.NOT_STARTED.value, ResultsStatus.SCORING_OPEN.value])
        )
    )

    alerts = []
    for event in result.scalars().all():
        overdue = days_overdue(event)
        if overdue is None:
            continue
        alerts.append(ScoringAlert(
            id=event.id,
            title=event.title,
            end_date=event.end_date,
            scoring_deadline=event.scoring_deadline,
            results_status=event.results_status,
            days_overdue=overdue,
            urgent=overdue > settings.scoring_overdue_days
        ))

    alerts.sort(key=lambda alert: alert.days_overdue, reverse=True)
    return alerts


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: UUID, session: AsyncSession = Depends(get_session)):
    return await get_event_or_404(session, event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
        event_id: UUID,
        event_data: EventUpdate,
        current_user: User = Depends(require_action(Action.MANAGE_EVENTS)),
        session: AsyncSession = Depends(get_session)
):
    """Update event details; results status is changed through /results-status"""
    event = await get_event_or_404(session, event_id)
    changes = event_data.model_dump(exclude_unset=True)

    for field in ("title", "public_vote_weight"):
        if field in changes and changes[field] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"'{field}' cannot be cleared"
            )
    check_event_dates(changes.get("start_date", event.start_date), changes.get("end_date", event.end_date))

    for field, value in changes.items():
        setattr(event, field, value)
    await session.commit()
    await session.refresh(event)
    logging.info(f"Event '{event.title}' ({event.id}) updated by {current_user.email}: {', '.join(changes)}")
    return event


@router.put("/{event_id}/results-status", response_model=ResultsStatusChangeResponse)
async def change_results_status(
        event_id: UUID,
        change: ResultsStatusChange,
        current_user: User = Depends(require_action(Action.CHANGE_RESULTS_STATUS)),
        session: AsyncSession = Depends(get_session)
):
    """
    Move the event through the results lifecycle (admin only)

    Only the next status can be chosen; review and published are reached by
    computing and publishing results. Going back requires override.
    """
    event = await get_event_or_404(session, event_id)
    validate_transition(event.results_status, change.status, change.override)

    previous_status = apply_transition(event, change.status)
    await session.commit()

    return {
        "message": f"Results status changed from '{previous_status}' to '{event.results_status}'",
        "previous_status": previous_status,
        "event": event
    }


@router.get("/{event_id}/judges", response_model=List[JudgeProgressResponse])
async def get_event_judges(
        event_id: UUID,
        current_user: User = Depends(require_action(Action.ASSIGN_JUDGES)),
        session: AsyncSession = Depends(get_session)
):
    """Assigned judges with their scoring progress"""
    await get_event_or_404(session, event_id)
    return await get_judge_progress(session, event_id)


@router.post("/{event_id}/judges/{judge_id}", response_model=EventJudgeResponse)
async def assign_judge(
        event_id: UUID,
        judge_id: UUID,
        current_user: User = Depends(require_action(Action.ASSIGN_JUDGES)),
        session: AsyncSession = Depends(get_session)
):
    """Assign a judge to an event; assigning twice is a no-op"""
    await get_event_or_404(session, event_id)

    judge_query = (
        select(User.id)
        .join(User2Roles)
        .join(Role)
        .where(User.id == judge_id, Role.name == UserRole.JUDGE.value)
    )
    if not (await session.execute(judge_query)).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Judge not found"
        )

    existing = await session.execute(
        select(EventJudge).where(EventJudge.event_id == event_id, EventJudge.judge_id == judge_id)
    )
    assignment = existing.scalar_one_or_none()
    if assignment:
        return assignment

    assignment = EventJudge(event_id=event_id, judge_id=judge_id, assigned_by=current_user.id)
    session.add(assignment)
    await session.commit()
    logging.info(f"Judge {judge_id} assigned to event {event_id}")
    return assignment


@router.delete("/{event_id}/judges/{judge_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_judge(
        event_id: UUID,
        judge_id: UUID,
        current_user: User = Depends(require_action(Action.ASSIGN_JUDGES)),
        session: AsyncSession = Depends(get_session)
):
    result = await session.execute(
        select(EventJudge).where(EventJudge.event_id == event_id, EventJudge.judge_id == judge_id)
    )
    assignment = result.scalar_one_or_none()
    if not assignment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Judge is not assigned to this event"
        )

    await session.delete(assignment)
    await session.commit()
    logging.info(f"Judge {judge_id} removed from event {event_id}")


@router.get("/{event_id}/submissions", response_model=List[SubmissionResponse])
async def get_event_submissions(
        event_id: UUID,
        current_user: User = Depends(require_action(Action.VIEW_EVENT_SUBMISSIONS)),
        session: AsyncSession = Depends(get_session)
):
    """Submissions of an event, for judges and admins"""
    await get_event_or_404(session, event_id)

    if (settings.enforce_judge_assignment
            and UserRole.SUPER_ADMIN.value not in current_user.role_names
            and not await is_judge_assigned(session, event_id, current_user.id)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Judge is not assigned to this event"
        )

    result = await session.execute(
        select(Submission)
        .where(Submission.event_id == event_id)
        .order_by(Submission.created_at)
    )
    return result.scalars().all()
