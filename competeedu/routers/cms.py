import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.auth.policy import Action, require_action
from competeedu.db import get_session
from competeedu.models import SiteSetting, User
from competeedu.schemas.cms import SiteSettingsResponse, SiteSettingsUpdate
from competeedu.utils.site_settings import SiteSettingsSnapshot, get_site_settings, load_site_settings

router = APIRouter(prefix="/cms", tags=["cms"])


@router.get("/settings", response_model=SiteSettingsResponse)
async def read_site_settings(site_settings: SiteSettingsSnapshot = Depends(get_site_settings)):
    """Public site settings"""
    return {"settings": site_settings.as_dict()}


@router.put("/settings", response_model=SiteSettingsResponse)
async def update_site_settings(
        update: SiteSettingsUpdate,
        current_user: User = Depends(require_action(Action.MANAGE_SITE_SETTINGS)),
        session: AsyncSession = Depends(get_session)
):
    """Upsert site settings by key"""
    result = await session.execute(
        select(SiteSetting).where(SiteSetting.key.in_(list(update.settings)))
    )
    existing = {setting.key: setting for setting in result.scalars().all()}

    for key, value in update.settings.items():
        if key in existing:
            existing[key].value = value
        else:
            session.add(SiteSetting(key=key, value=value))

    await session.commit()
    logging.info(f"Site settings updated by {current_user.email}: {', '.join(sorted(update.settings))}")

    snapshot = await load_site_settings(session)
    return {"settings": snapshot.as_dict()}
