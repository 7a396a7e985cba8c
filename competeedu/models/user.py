from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid

from competeedu.db import Base, utcnow


class User(Base):
    """User account: admins, judges, teachers and students"""
    __tablename__ = 'users'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(512), nullable=False)
    full_name = Column(String(255), nullable=False, index=True)
    school_id = Column(Uuid(as_uuid=True), ForeignKey('schools.id'), nullable=True)
    expertise = Column(String(255), nullable=True)
    bio = Column(String(2048), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    user2roles = relationship("User2Roles", back_populates="user", lazy="selectin")
    school = relationship("School", back_populates="users")

    @property
    def roles(self):
        return [user2role.role for user2role in self.user2roles]

    @property
    def role_names(self):
        return {role.name for role in self.roles}


class User2Roles(Base):
    """Link between a user and a role"""
    __tablename__ = 'user_2_roles'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=False)
    role_id = Column(Uuid(as_uuid=True), ForeignKey('roles.id'), nullable=False)

    # Relationships
    user = relationship("User", back_populates="user2roles")
    role = relationship("Role", back_populates="user2roles", lazy="joined")
