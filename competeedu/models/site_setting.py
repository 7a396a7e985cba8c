from sqlalchemy import Column, String, Text, DateTime

from competeedu.db import Base, utcnow


class SiteSetting(Base):
    """CMS key/value setting"""
    __tablename__ = 'site_settings'

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
