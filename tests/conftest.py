"""Shared fixtures: in-memory database, controllable clock, seeded rows and an HTTP client."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy import event

import internhub.domain  # noqa: F401  (registers every model on Base.metadata)
from internhub.core.config import Settings
from internhub.db.base import Base, build_engine, build_session_factory
from internhub.domain.audit import AuditLog
from internhub.domain.candidate import Candidate
from internhub.domain.domain_preference import DomainPreference
from internhub.main import create_app

ADMIN_PASSWORD = "let-me-in"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "app_env": "test",
        "admin_password": ADMIN_PASSWORD,
        "session_secret": "test-secret",
        "session_cookie_secure": False,
        "frontend_url": "https://hire.example.com",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def failing_audit_inserts():
    """Make every audit_logs INSERT fail at flush time."""

    def refuse(mapper, connection, target):
        raise RuntimeError("audit table unavailable")

    event.listen(AuditLog, "before_insert", refuse)
    yield
    event.remove(AuditLog, "before_insert", refuse)


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with build_session_factory(engine)() as session:
        yield session


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------

async def add_candidate(session, **fields) -> Candidate:
    values = {
        "full_name": "jane.DOE",
        "email": "jane@example.com",
        "mobile": "9000000001",
        "college_name": "North College",
        "degree": "B.Tech",
        "branch": "CSE",
        "year_of_study": "3",
        "preferred_domain": "Web",
        "technical_skills": ["Python", "SQL"],
        "prior_experience": "Hackathons",
    }
    values.update(fields)
    candidate = Candidate(**values)
    session.add(candidate)
    await session.flush()
    return candidate


async def add_preference(session, **fields) -> DomainPreference:
    values = {
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "college_name": "North College",
        "domain": "Backend",
        "skill_level": "Intermediate",
        "technologies": ["FastAPI"],
        "portfolio_url": "https://jane.dev",
    }
    values.update(fields)
    preference = DomainPreference(**values)
    session.add(preference)
    await session.flush()
    return preference


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@asynccontextmanager
async def app_client(settings: Settings, *, login: bool = True, **transports):
    """Yield ``(client, app)`` for an app on a fresh in-memory database."""
    app = create_app(settings, **transports)
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        if login:
            response = await client.post("/api/v1/auth/login", json={"password": ADMIN_PASSWORD})
            assert response.status_code == 200
        yield client, app
    await app.state.engine.dispose()


@pytest.fixture
async def client(settings):
    async with app_client(settings) as (client, _):
        yield client


@pytest.fixture
async def app_and_client(settings):
    async with app_client(settings) as (client, app):
        yield app, client
