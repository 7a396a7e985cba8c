from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid

from competeedu.db import Base, utcnow


class School(Base):
    __tablename__ = 'schools'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    address = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    users = relationship("User", back_populates="school")
