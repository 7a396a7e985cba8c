from typing import Dict
from pydantic import BaseModel, Field


class SiteSettingsResponse(BaseModel):
    settings: Dict[str, str]


class SiteSettingsUpdate(BaseModel):
    settings: Dict[str, str] = Field(..., min_length=1)
