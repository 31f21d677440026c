import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

from contextlib import AsyncExitStack
from typing import AsyncGenerator, Awaitable, Callable, Dict, List

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import staffpanel.core.email as email_module
from staffpanel.auth.models import User
from staffpanel.auth.security import hash_password
from staffpanel.core.broadcaster import Broadcaster
from staffpanel.core.config import settings
from staffpanel.db.session import Base, get_db
from staffpanel.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"
DEFAULT_PASSWORD = "StrongPass123"


@pytest.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test; every request gets its own session on it."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and asserting on it directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    target = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(target))
    return target


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch) -> List[Dict[str, str]]:
    """Replace SMTP delivery with an in-memory outbox."""
    sent: List[Dict[str, str]] = []

    async def fake_send_email(to: str, subject: str, body_html: str) -> bool:
        sent.append({"to": to, "subject": subject, "html": body_html})
        return True

    monkeypatch.setattr(email_module, "send_email", fake_send_email)
    return sent


@pytest.fixture(autouse=True)
def broadcaster() -> Broadcaster:
    fresh = Broadcaster()
    app.state.broadcaster = fresh
    return fresh


async def make_user(
    db: AsyncSession,
    username: str,
    *,
    password: str = DEFAULT_PASSWORD,
    is_admin: bool = False,
    is_approved: bool = True,
    name: str = "",
    email: str = "",
) -> User:
    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email or f"{username}@example.com",
        name=name or username.title(),
        is_admin=is_admin,
        is_approved=is_approved,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture()
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "boss", is_admin=True, name="Big Boss")


@pytest.fixture()
async def staff(db_session: AsyncSession) -> User:
    return await make_user(db_session, "alice", name="Alice Staff")


@pytest.fixture()
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def login(session_factory) -> AsyncGenerator[Callable[..., Awaitable[AsyncClient]], None]:
    """Factory: a separate client (cookie jar) logged in as the given user."""
    async with AsyncExitStack() as stack:

        async def _login(username: str, password: str = DEFAULT_PASSWORD) -> AsyncClient:
            ac = await stack.enter_async_context(
                AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
            )
            resp = await ac.post("/api/login", json={"username": username, "password": password})
            assert resp.status_code == 200, resp.text
            return ac

        yield _login


@pytest.fixture()
async def admin_client(admin: User, login) -> AsyncClient:
    return await login(admin.username)


@pytest.fixture()
async def staff_client(staff: User, login) -> AsyncClient:
    return await login(staff.username)
