import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker

from competeedu.auth.utils import get_password_hash
from competeedu.db import Base
from competeedu.models import Role, SiteSetting, User, User2Roles
from competeedu.models.enums import UserRole
from competeedu.settings import settings
from competeedu.utils.site_settings import DEFAULT_SITE_SETTINGS

ROLES_DATA = [
    {"name": UserRole.SUPER_ADMIN.value, "description": "Platform administrator"},
    {"name": UserRole.SCHOOL_ADMIN.value, "description": "School administrator"},
    {"name": UserRole.TEACHER.value, "description": "Teacher"},
    {"name": UserRole.STUDENT.value, "description": "Student"},
    {"name": UserRole.JUDGE.value, "description": "Competition judge"}
]


async def seed_roles(session: AsyncSession) -> None:
    for role_data in ROLES_DATA:
        existing_role = await session.execute(
            Role.__table__.select().where(Role.name == role_data["name"])
        )
        if not list(existing_role):
            session.add(Role(
                id=uuid.uuid4(),
                name=role_data["name"],
                description=role_data["description"]
            ))


async def seed_site_settings(session: AsyncSession) -> None:
    for key, value in DEFAULT_SITE_SETTINGS.items():
        existing_setting = await session.execute(
            SiteSetting.__table__.select().where(SiteSetting.key == key)
        )
        if not list(existing_setting):
            session.add(SiteSetting(key=key, value=value))


async def seed_bootstrap_admin(session: AsyncSession) -> None:
    """Create the first super admin from settings, once"""
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return

    existing_user = await session.execute(
        select(User.id).where(User.email == settings.bootstrap_admin_email)
    )
    if existing_user.first():
        return

    role_result = await session.execute(select(Role).where(Role.name == UserRole.SUPER_ADMIN.value))
    admin = User(
        email=settings.bootstrap_admin_email,
        password=get_password_hash(settings.bootstrap_admin_password),
        full_name="Administrator"
    )
    admin.user2roles.append(User2Roles(role=role_result.scalar_one()))
    session.add(admin)
    logging.info(f"Bootstrap super admin {settings.bootstrap_admin_email} created")


async def init_models(engine: AsyncEngine):
    """Create tables and seed reference data"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        await seed_roles(session)
        await seed_site_settings(session)
        await session.flush()
        await seed_bootstrap_admin(session)
        await session.commit()
