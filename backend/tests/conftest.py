"""Shared fixtures.

Every test gets its own app (and so its own in-memory SQLite database),
an httpx client talking to it over ASGI, and helpers for users and
catalog content.
"""

import os


# Settings are cached on first import; configure them before importing olw
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTH_SECRET_KEY"] = "test-secret-key-for-olw-suite"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from olw.auth.security import create_access_token, get_password_hash
from olw.database.init import drop_database, init_database
from olw.main import create_app
from olw.middleware.security import limiter
from olw.stacks.models import Stack, Topic, Video
from olw.users.models import Role, User


TEST_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """The limiter keeps its counters in process memory; start every test clean."""
    limiter.reset()


@pytest_asyncio.fixture
async def app() -> AsyncGenerator[FastAPI, None]:
    application = create_app()
    await init_database(application.state.engine)
    yield application
    await drop_database(application.state.engine)
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    async with app.state.session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http_client:
        yield http_client


async def make_user(
    session: AsyncSession,
    email: str,
    *,
    role: Role = Role.STUDENT,
    name: str | None = None,
    password: str = TEST_PASSWORD,
) -> User:
    user = User(email=email, password_hash=get_password_hash(password), name=name, role=role)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def student(db_session: AsyncSession) -> User:
    return await make_user(db_session, "student@learn.io", name="Student One")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "admin@learn.io", name="Admin", role=Role.ADMIN)


@pytest.fixture
def student_headers(student: User) -> dict[str, str]:
    return auth_headers(student)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@dataclass
class Catalog:
    """Seeded catalog rows."""

    react: Stack
    node: Stack
    empty: Stack
    basics: Topic
    hooks: Topic
    videos: list[Video]


@pytest_asyncio.fixture
async def catalog(db_session: AsyncSession) -> Catalog:
    """Two populated stacks and one empty one, inserted out of order on purpose."""
    node = Stack(slug="node-basics", title="Node", description="Server-side JavaScript", sort_order=2)
    react = Stack(slug="react-fundamentals", title="React", description="Components and hooks", sort_order=1)
    empty = Stack(slug="coming-soon", title="Coming Soon", sort_order=3)
    db_session.add_all([node, react, empty])
    await db_session.flush()

    hooks = Topic(title="Hooks", sort_order=2, stack_id=react.id)
    basics = Topic(title="Basics", sort_order=1, stack_id=react.id)
    runtime = Topic(title="Runtime", sort_order=1, stack_id=node.id)
    db_session.add_all([hooks, basics, runtime])
    await db_session.flush()

    videos = [
        Video(title="JSX", youtube_id="yt-jsx", duration=300, sort_order=2, topic_id=basics.id),
        Video(title="Intro", youtube_id="yt-intro", duration=120, sort_order=1, topic_id=basics.id),
        Video(title="useState", youtube_id="yt-state", duration=600, sort_order=1, topic_id=hooks.id),
        Video(title="Event Loop", youtube_id="yt-loop", duration=900, sort_order=1, topic_id=runtime.id),
    ]
    db_session.add_all(videos)
    await db_session.commit()

    return Catalog(react=react, node=node, empty=empty, basics=basics, hooks=hooks, videos=videos)
