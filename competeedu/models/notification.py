from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
import uuid

from competeedu.db import Base, utcnow


class Notification(Base):
    """In-app announcement addressed to every user holding a role"""
    __tablename__ = 'notifications'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, default="event_alert")
    recipient_role = Column(String(50), nullable=False, index=True)
    event_id = Column(Uuid(as_uuid=True), ForeignKey('events.id', ondelete='CASCADE'), nullable=True)
    sender_id = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    event = relationship("Event", lazy="joined")

    @property
    def event_title(self):
        return self.event.title if self.event else None
