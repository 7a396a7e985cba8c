from sqlalchemy import Column, String, Integer, Float, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
import uuid

from competeedu.db import Base


class EvaluationCriterion(Base):
    """One weighted rubric line of an event"""
    __tablename__ = 'evaluation_criteria'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    label = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    weight = Column(Float, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)

    # Relationships
    event = relationship("Event", back_populates="criteria")
