from types import MappingProxyType
from typing import Dict, Mapping, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.db import get_session
from competeedu.models import SiteSetting

DEFAULT_SITE_SETTINGS: Dict[str, str] = {
    "site_name": "CompeteEdu",
    "contact_email": "",
    "hero_title": "School competitions, judged fairly",
}


class SiteSettingsSnapshot:
    """Read-only view of the CMS settings taken at the start of a request"""

    def __init__(self, values: Mapping[str, str]):
        self._values = MappingProxyType(dict(values))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._values.get(key)
        if value is None or value == "":
            return default
        return value

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __contains__(self, key: str) -> bool:
        return key in self._values


async def load_site_settings(session: AsyncSession) -> SiteSettingsSnapshot:
    result = await session.execute(select(SiteSetting))
    values = dict(DEFAULT_SITE_SETTINGS)
    for setting in result.scalars():
        values[setting.key] = setting.value
    return SiteSettingsSnapshot(values)


async def get_site_settings(session: AsyncSession = Depends(get_session)) -> SiteSettingsSnapshot:
    """Dependency: one settings snapshot per request"""
    return await load_site_settings(session)
