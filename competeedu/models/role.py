from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
import uuid

from competeedu.db import Base


class Role(Base):
    """User role reference table"""
    __tablename__ = 'roles'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(String(512), nullable=True)

    # Relationships
    user2roles = relationship("User2Roles", back_populates="role")
