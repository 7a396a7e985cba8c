import os
import tempfile
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the environment goes first
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'competeedu-unused.db')}")
os.environ.setdefault("BADGE_SECRET", "test-badge-secret")
os.environ.setdefault("VOTE_SALT", "test-salt")
os.environ.setdefault("SMTP_HOST", "")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app import app
from competeedu.auth.jwt import create_access_token
from competeedu.db import Base, get_session
from competeedu.init_db import seed_roles, seed_site_settings
from competeedu.models import User
from competeedu.models.enums import UserRole
from competeedu.routers.users import create_user_with_role


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_roles(session)
        await seed_site_settings(session)
        await session.commit()

    yield factory
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=app, client=("203.0.113.10", 50000))
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def factory(role: UserRole, full_name: str = None, school_id=None) -> User:
        counter["n"] += 1
        user = await create_user_with_role(
            db,
            email=f"{role.value}{counter['n']}@school.edu",
            password="password123",
            full_name=full_name or f"{role.value.title()} {counter['n']}",
            role=role,
            school_id=school_id
        )
        await db.commit()
        return user

    return factory


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.SUPER_ADMIN, "Ada Admin")


@pytest.fixture
async def judge(make_user):
    return await make_user(UserRole.JUDGE, "Jane Judge")


@pytest.fixture
async def student(make_user):
    return await make_user(UserRole.STUDENT, "Sam Student")


def days_ago(days: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


@pytest.fixture
def create_event(client, admin):
    async def factory(criteria=(("Creativity", 60), ("Technique", 40)), judges=(), **fields):
        headers = auth_headers(admin)
        payload = {"title": "Regional Science Fair", **fields}
        response = await client.post("/events", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        event = response.json()

        rubric = {
            "criteria": [
                {"label": label, "weight": weight, "display_order": order}
                for order, (label, weight) in enumerate(criteria)
            ]
        }
        response = await client.put(f"/events/{event['id']}/criteria", json=rubric, headers=headers)
        assert response.status_code == 200, response.text
        event["criteria"] = response.json()["criteria"]

        for judge in judges:
            response = await client.post(f"/events/{event['id']}/judges/{judge.id}", headers=headers)
            assert response.status_code == 200, response.text
        return event

    return factory


@pytest.fixture
def set_status(client, admin):
    async def change(event_id, status, override=False):
        return await client.put(
            f"/events/{event_id}/results-status",
            json={"status": status, "override": override},
            headers=auth_headers(admin)
        )

    return change


@pytest.fixture
def create_submission(client):
    async def factory(student, event_id, title="My entry"):
        payload = {
            "event_id": event_id,
            "title": title,
            "media_type": "video",
            "media_url": "https://cdn.example.org/entry.mp4"
        }
        response = await client.post("/submissions", json=payload, headers=auth_headers(student))
        assert response.status_code == 201, response.text
        return response.json()

    return factory


@pytest.fixture
def post_scores(client):
    async def post(judge, submission_id, scores):
        payload = {"scores": [{"criterion_id": criterion_id, "score": value} for criterion_id, value in scores]}
        return await client.post(
            f"/evaluations/submissions/{submission_id}/scores",
            json=payload,
            headers=auth_headers(judge)
        )

    return post
