import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import HTTPException, status

from competeedu.db import utcnow
from competeedu.models import Event
from competeedu.models.enums import ResultsStatus

STATUS_ORDER = [
    ResultsStatus.NOT_STARTED,
    ResultsStatus.SCORING_OPEN,
    ResultsStatus.SCORING_LOCKED,
    ResultsStatus.REVIEW,
    ResultsStatus.PUBLISHED,
]

RUBRIC_EDIT_STATES = [ResultsStatus.NOT_STARTED, ResultsStatus.SCORING_OPEN]
SCORING_STATES = [ResultsStatus.SCORING_OPEN]
VOTING_STATES = [ResultsStatus.NOT_STARTED, ResultsStatus.SCORING_OPEN]
SUBMISSION_STATES = [ResultsStatus.NOT_STARTED, ResultsStatus.SCORING_OPEN]
COMPUTE_STATES = [ResultsStatus.SCORING_LOCKED, ResultsStatus.REVIEW]
PUBLISH_STATES = [ResultsStatus.REVIEW]
PUBLIC_RESULTS_STATES = [ResultsStatus.PUBLISHED]

# Entered only through compute and publish, never by a plain status change
AUTOMATIC_STATES = [ResultsStatus.REVIEW, ResultsStatus.PUBLISHED]


def status_index(value: Union[str, ResultsStatus]) -> int:
    return STATUS_ORDER.index(ResultsStatus(value))


def is_allowed(event: Event, allowed_states: List[ResultsStatus]) -> bool:
    return event.results_status in [state.value for state in allowed_states]


def check_results_status(
        event: Event,
        allowed_states: Union[ResultsStatus, List[ResultsStatus]],
        detail: Optional[str] = None
) -> None:
    """
    Check that the event's results status permits an operation

    :param event: Event being operated on
    :param allowed_states: State or list of states in which the operation is allowed
    :param detail: Error message prefix, defaults to a generic one
    :raises: HTTPException 403 if the current state is not allowed
    """
    if isinstance(allowed_states, ResultsStatus):
        allowed_states = [allowed_states]

    if not is_allowed(event, allowed_states):
        allowed_names = ", ".join(state.value for state in allowed_states)
        message = detail or "This operation is not allowed in the current results status"
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{message} (status: {event.results_status}; allowed: {allowed_names})"
        )


def validate_transition(
        current: Union[str, ResultsStatus],
        target: Union[str, ResultsStatus],
        override: bool = False
) -> None:
    """
    Validate a manual results status change.

    Forward moves go one step at a time. Going back needs an explicit
    override and is never possible once results are published.
    """
    current = ResultsStatus(current)
    target = ResultsStatus(target)

    if current == target:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Event is already in status '{current.value}'"
        )

    if current == ResultsStatus.PUBLISHED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Published results are final and cannot be reopened"
        )

    if status_index(target) < status_index(current):
        if not override:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Moving results status backwards requires an explicit override"
            )
        return

    if target in AUTOMATIC_STATES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Status '{target.value}' is set by computing or publishing results"
        )

    if status_index(target) - status_index(current) != 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Can only transition to the next results status"
        )


def apply_transition(event: Event, target: Union[str, ResultsStatus]) -> str:
    """Set the new status on the event and log it; returns the previous status"""
    previous = event.results_status
    event.results_status = ResultsStatus(target).value
    logging.info(f"Event {event.id} results status: {previous} -> {event.results_status}")
    return previous


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_overdue(event: Event, now: Optional[datetime] = None) -> Optional[int]:
    """
    Whole days since the scoring deadline (or end date when no deadline is set)
    for events whose scoring has not been locked yet. Display only.
    """
    if not is_allowed(event, [ResultsStatus.NOT_STARTED, ResultsStatus.SCORING_OPEN]):
        return None

    reference = event.scoring_deadline or event.end_date
    if reference is None:
        return None

    now = as_utc(now or utcnow())
    reference = as_utc(reference)
    if reference >= now:
        return None
    return (now - reference).days
