from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.db import get_session
from competeedu.models import Badge
from competeedu.schemas.badge import BadgeResponse, BadgeVerificationResponse
from competeedu.settings import settings
from competeedu.utils.badge_utils import get_badge_by_credential, render_badge_png, verify_credential_hash

router = APIRouter(tags=["badges"])


async def get_badge_or_404(session: AsyncSession, credential_id: str) -> Badge:
    badge = await get_badge_by_credential(session, credential_id.strip().upper())
    if not badge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Credential not found"
        )
    return badge


@router.get("/verify/{credential_id}", response_model=BadgeVerificationResponse)
async def verify_badge(credential_id: str, session: AsyncSession = Depends(get_session)):
    """Public verification of a credential; is_valid is false when the stored record was altered"""
    badge = await get_badge_or_404(session, credential_id)
    return {
        "is_valid": verify_credential_hash(badge),
        "badge": badge,
        "image_url": f"{settings.public_base_url.rstrip('/')}/api/badge/{badge.credential_id}"
    }


@router.get(
    "/api/badge/{credential_id}",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}}
)
async def get_badge_image(credential_id: str, session: AsyncSession = Depends(get_session)):
    badge = await get_badge_or_404(session, credential_id)
    return Response(
        content=render_badge_png(badge),
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=86400"}
    )


@router.get("/badges/gallery", response_model=List[BadgeResponse])
async def get_badge_gallery(
        event_id: Optional[UUID] = None,
        limit: int = Query(50, ge=1, le=200),
        session: AsyncSession = Depends(get_session)
):
    """Public badges, newest first"""
    query = select(Badge).where(Badge.is_public.is_(True))
    if event_id:
        query = query.where(Badge.event_id == event_id)
    result = await session.execute(query.order_by(Badge.issued_at.desc(), Badge.rank).limit(limit))
    return result.scalars().all()
