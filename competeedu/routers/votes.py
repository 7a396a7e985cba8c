import hashlib
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.db import get_session
from competeedu.models import SubmissionVote
from competeedu.schemas.vote import VoteCountResponse, VoteResponse
from competeedu.settings import settings
from competeedu.utils.evaluation_utils import get_event_or_404, get_submission_or_404
from competeedu.utils.lifecycle import VOTING_STATES, check_results_status

router = APIRouter(prefix="/api/vote", tags=["votes"])


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def hash_ip(ip: str, salt: Optional[str] = None) -> str:
    """Votes store only a salted digest of the voter address"""
    salt = settings.vote_salt if salt is None else salt
    return hashlib.sha256(f"{ip}{salt}".encode("utf-8")).hexdigest()


async def count_votes(session: AsyncSession, submission_id: UUID) -> int:
    result = await session.execute(
        select(func.count(SubmissionVote.id)).where(SubmissionVote.submission_id == submission_id)
    )
    return result.scalar_one()


@router.post(
    "/{submission_id}",
    response_model=VoteResponse,
    responses={409: {"description": "Already voted from this address"}}
)
async def cast_vote(
        submission_id: UUID,
        request: Request,
        session: AsyncSession = Depends(get_session)
):
    """Anonymous public vote, one per client address and submission"""
    submission = await get_submission_or_404(session, submission_id)
    event = await get_event_or_404(session, submission.event_id)
    check_results_status(event, VOTING_STATES, "Voting is closed for this event")

    session.add(SubmissionVote(submission_id=submission_id, voter_ip_hash=hash_ip(get_client_ip(request))))
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logging.info(f"Duplicate vote rejected for submission {submission_id}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "Already voted", "alreadyVoted": True}
        )

    return {"success": True, "vote_count": await count_votes(session, submission_id)}


@router.get("/{submission_id}", response_model=VoteCountResponse)
async def get_vote_count(submission_id: UUID, session: AsyncSession = Depends(get_session)):
    await get_submission_or_404(session, submission_id)
    return {"vote_count": await count_votes(session, submission_id)}
