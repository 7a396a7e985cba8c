import uuid
from sqlalchemy import Column, ForeignKey, Integer, Float, String, Boolean, DateTime, Uuid

from competeedu.db import Base, utcnow


class Badge(Base):
    """
    Issued credential for a placement.

    Display fields are copied at issuance so the badge never changes when
    a student or a school is renamed later. Rows are never updated.
    """
    __tablename__ = 'badges'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    credential_id = Column(String(64), unique=True, nullable=False, index=True)
    credential_hash = Column(String(64), nullable=False)
    submission_id = Column(Uuid(as_uuid=True), ForeignKey('submissions.id'), nullable=False, unique=True)
    event_id = Column(Uuid(as_uuid=True), ForeignKey('events.id'), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=False)

    tier = Column(String(20), nullable=False)
    rank = Column(Integer, nullable=False)
    weighted_score = Column(Float, nullable=False)

    student_name = Column(String(255), nullable=False)
    school_name = Column(String(255), nullable=False)
    event_name = Column(String(255), nullable=False)
    issued_by = Column(String(255), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
