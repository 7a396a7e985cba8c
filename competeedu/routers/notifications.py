import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.jwt import get_current_user
from competeedu.auth.policy import Action, require_action
from competeedu.db import get_session
from competeedu.models import Notification, User
from competeedu.schemas.notification import NotificationCreate, NotificationResponse
from competeedu.utils.evaluation_utils import get_event_or_404

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
        notification_data: NotificationCreate,
        current_user: User = Depends(require_action(Action.SEND_NOTIFICATIONS)),
        session: AsyncSession = Depends(get_session)
):
    """Announce something to every user with the given role"""
    if notification_data.event_id:
        await get_event_or_404(session, notification_data.event_id)

    notification = Notification(
        title=notification_data.title,
        message=notification_data.message,
        type=notification_data.type,
        recipient_role=notification_data.recipient_role.value,
        event_id=notification_data.event_id,
        sender_id=current_user.id
    )
    session.add(notification)
    await session.commit()
    logging.info(
        f"Notification '{notification.title}' sent to role {notification.recipient_role} by {current_user.email}"
    )

    result = await session.execute(
        select(Notification)
        .where(Notification.id == notification.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
        current_user: User = Depends(get_current_user),
        session: AsyncSession = Depends(get_session)
):
    """Notifications addressed to any of the caller's roles, newest first"""
    result = await session.execute(
        select(Notification)
        .where(Notification.recipient_role.in_(list(current_user.role_names)))
        .order_by(Notification.created_at.desc())
    )
    return result.scalars().all()
