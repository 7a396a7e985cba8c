import uuid
from sqlalchemy import Column, ForeignKey, Integer, Float, String, Text, DateTime, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from competeedu.db import Base, utcnow


class SubmissionScore(Base):
    """One judge's score of one submission against one criterion"""
    __tablename__ = 'submission_scores'
    __table_args__ = (
        UniqueConstraint('submission_id', 'criterion_id', 'judge_id', name='uq_submission_criterion_judge'),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id = Column(Uuid(as_uuid=True), ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False)
    criterion_id = Column(Uuid(as_uuid=True), ForeignKey('evaluation_criteria.id', ondelete='CASCADE'), nullable=False)
    judge_id = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=False)

    score = Column(Float, nullable=False)
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    submission = relationship("Submission", back_populates="scores")
    criterion = relationship("EvaluationCriterion", lazy="joined")
    judge = relationship("User")


class SubmissionResult(Base):
    """Computed placement of a submission, rewritten on every recompute"""
    __tablename__ = 'submission_results'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id = Column(Uuid(as_uuid=True), ForeignKey('submissions.id', ondelete='CASCADE'),
                           nullable=False, unique=True)
    event_id = Column(Uuid(as_uuid=True), ForeignKey('events.id'), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=False)

    weighted_score = Column(Float, nullable=False)
    public_vote_count = Column(Integer, nullable=False, default=0)
    public_vote_score = Column(Float, nullable=False, default=0)
    final_score = Column(Float, nullable=False)
    judge_count = Column(Integer, nullable=False)
    rank = Column(Integer, nullable=False)
    tier = Column(String(20), nullable=False)
    computed_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    submission = relationship("Submission")
    student = relationship("User")
