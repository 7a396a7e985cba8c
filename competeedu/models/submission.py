from sqlalchemy import Column, String, DateTime, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid

from competeedu.db import Base, utcnow
from competeedu.models.enums import SubmissionStatus


class Submission(Base):
    """A student's entry into an event"""
    __tablename__ = 'submissions'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey('events.id'), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    media_type = Column(String(50), nullable=False)
    media_url = Column(String(1024), nullable=True)
    status = Column(String(50), nullable=False, default=SubmissionStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    event = relationship("Event", back_populates="submissions")
    student = relationship("User")
    scores = relationship("SubmissionScore", back_populates="submission", cascade="all, delete-orphan")


class SubmissionVote(Base):
    """Anonymous public vote, one per hashed client IP"""
    __tablename__ = 'submission_votes'
    __table_args__ = (
        UniqueConstraint('submission_id', 'voter_ip_hash', name='uq_submission_vote'),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id = Column(Uuid(as_uuid=True), ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False)
    voter_ip_hash = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
