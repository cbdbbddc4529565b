from __future__ import annotations

import os

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault("DATABASE_URL_ASYNC", "sqlite+aiosqlite://")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("EMAIL_SEND_DELAY_SECONDS", "0")
os.environ.setdefault("CRON_SECRET", "")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from synergies.db.session import engine_options, get_db
from synergies.services.mailer import EmailDeliveryError, get_mailer

# Ensure Base + models are registered before create_all
from synergies.db.base import Base  # noqa: F401
import synergies.models  # noqa: F401


class FakeMailer:
    """Records every message instead of calling the provider."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail_with: EmailDeliveryError | None = None
        # recipients whose sends fail; the rest go through
        self.fail_for: set[str] = set()

    async def send(self, *, to, subject, html, cc=None) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        recipients = [to] if isinstance(to, str) else list(to)
        if any(r in self.fail_for for r in recipients):
            raise EmailDeliveryError(f"rejected {to}", status_code=422)
        self.sent.append({"to": to, "cc": cc, "subject": subject, "html": html})


# ---------------------------------------------------------
# Database config
# ---------------------------------------------------------
@pytest.fixture()
def database_url_async() -> str:
    # In-memory SQLite by default; set TEST_DATABASE_URL to run against Postgres.
    return os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


# ---------------------------------------------------------
# Engine + schema lifecycle (fresh schema per test)
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def engine(database_url_async: str):
    options = engine_options(database_url_async)
    if database_url_async.startswith("sqlite"):
        # one shared connection, or each session would see its own empty :memory: db
        options["poolclass"] = StaticPool
    engine = create_async_engine(database_url_async, **options)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
def sessionmaker(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )


# ---------------------------------------------------------
# DB session for assertions / setup
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def db(sessionmaker):
    """
    Session for test setup & assertions ONLY.
    """
    async with sessionmaker() as session:
        yield session
        await session.rollback()


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


# ---------------------------------------------------------
# FastAPI app + dependency overrides
# ---------------------------------------------------------
@pytest.fixture()
def app(sessionmaker, mailer):
    from synergies.main import app as fastapi_app

    async def _override_get_db():
        async with sessionmaker() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    fastapi_app.dependency_overrides[get_mailer] = lambda: mailer
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


# ---------------------------------------------------------
# HTTP client
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
    ) as ac:
        yield ac
