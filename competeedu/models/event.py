from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid

from competeedu.db import Base, utcnow
from competeedu.models.enums import ResultsStatus


class Event(Base):
    """A competition instance"""
    __tablename__ = 'events'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    scoring_deadline = Column(DateTime(timezone=True), nullable=True)
    results_status = Column(String(50), nullable=False, default=ResultsStatus.NOT_STARTED.value)
    # Share of the final score taken from public votes, in percent
    public_vote_weight = Column(Integer, nullable=False, default=0)
    results_published_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    criteria = relationship(
        "EvaluationCriterion",
        back_populates="event",
        order_by="EvaluationCriterion.display_order",
        cascade="all, delete-orphan"
    )
    judges = relationship("EventJudge", back_populates="event", cascade="all, delete-orphan")
    submissions = relationship("Submission", back_populates="event")


class EventJudge(Base):
    """Assignment of a judge to an event"""
    __tablename__ = 'event_judges'
    __table_args__ = (
        UniqueConstraint('event_id', 'judge_id', name='uq_event_judge'),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    judge_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    assigned_by = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=True)
    assigned_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    event = relationship("Event", back_populates="judges")
    judge = relationship("User", foreign_keys=[judge_id])
