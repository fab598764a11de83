"""Shared pytest fixtures for the Workflow Automation Engine test suite.

Provides:
- Per-test async SQLite database file (no external database needed)
- AsyncSession factory
- Recording fake collaborators for every action type
- Workflow engine wired to the fakes
- FastAPI test client (httpx.AsyncClient) with lifespan started
"""

import asyncio
import os
from typing import Any, AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

# Override settings BEFORE any app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("SEED_TEMPLATES", "true")

from db.base import Base  # noqa: E402
from db.database import create_session_factory  # noqa: E402
from core.exceptions import ActionError  # noqa: E402
from integrations.base import (  # noqa: E402
    AlertCreator,
    ChatPoster,
    EmailSender,
    HttpClient,
    HttpResponse,
    NotificationSender,
    WidgetUpdater,
)
from integrations.registry import Collaborators  # noqa: E402

WORKSPACE_ID = "ws-test"


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------

class _Recorder:
    """Records calls; optionally fails or stalls on demand."""

    def __init__(self):
        self.calls: list[dict] = []
        self.fail_with: Optional[str] = None
        self.delay: float = 0

    async def _record(self, **call: Any) -> None:
        self.calls.append(call)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with:
            raise ActionError(self.fail_with)


class FakeEmailSender(_Recorder, EmailSender):
    async def send(self, to, subject, body):
        await self._record(to=to, subject=subject, body=body)
        return {"sent": True, "to": to}


class FakeNotificationSender(_Recorder, NotificationSender):
    async def send(self, message, workspace_id, **extra):
        await self._record(message=message, workspace_id=workspace_id, **extra)
        return {"sent": True, "message": message}


class FakeAlertCreator(_Recorder, AlertCreator):
    async def create(self, name, workspace_id, **config):
        await self._record(name=name, workspace_id=workspace_id, **config)
        return {"created": True, "id": f"alert-{len(self.calls)}", "alert": name}


class FakeWidgetUpdater(_Recorder, WidgetUpdater):
    async def update(self, widget_id, workspace_id, **changes):
        await self._record(widget_id=widget_id, workspace_id=workspace_id, **changes)
        return {"updated": True, "widgetId": widget_id}


class FakeHttpClient(_Recorder, HttpClient):
    def __init__(self):
        super().__init__()
        self.status = 200
        self.raise_exc: Optional[Exception] = None

    async def request(self, url, method, headers=None, body=None):
        await self._record(url=url, method=method, headers=headers, body=body)
        if self.raise_exc is not None:
            raise self.raise_exc
        return HttpResponse(status=self.status, ok=200 <= self.status < 300)


class FakeChatPoster(_Recorder, ChatPoster):
    async def post(self, channel, message):
        await self._record(channel=channel, message=message)
        return {"sent": True, "channel": channel}


@pytest.fixture
def collaborators() -> Collaborators:
    """One recording fake per external system."""
    return Collaborators(
        email=FakeEmailSender(),
        notifications=FakeNotificationSender(),
        alerts=FakeAlertCreator(),
        widgets=FakeWidgetUpdater(),
        http=FakeHttpClient(),
        chat=FakeChatPoster(),
    )


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Async engine on a throwaway SQLite file, tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    # Import all models so Base.metadata knows about them
    import db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for arranging and inspecting data.

    Commit before handing control to the engine; the engine writes
    through its own sessions.
    """
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    from app.config import get_settings

    return get_settings()


@pytest.fixture
def action_registry(collaborators, settings):
    from actions.registry import ActionRegistry

    return ActionRegistry(collaborators, settings)


@pytest.fixture
def dispatcher(action_registry):
    from actions.dispatcher import ActionDispatcher

    return ActionDispatcher(action_registry, default_timeout=2.0)


@pytest_asyncio.fixture
async def workflow_engine(session_factory, dispatcher):
    from workflow.engine import WorkflowEngine

    engine = WorkflowEngine(session_factory, dispatcher)
    yield engine
    await engine.drain()


@pytest.fixture
def make_workflow(db_session):
    """Factory: persist and commit a workflow, return it."""
    from services.workflow_service import WorkflowService

    async def _make(**overrides):
        data = {
            "workspace_id": WORKSPACE_ID,
            "name": "Test Workflow",
            "trigger": {"type": "EVENT"},
            "actions": [],
        }
        data.update(overrides)
        wf = await WorkflowService(db_session).create_workflow(**data)
        await db_session.commit()
        return wf

    return _make


# ---------------------------------------------------------------------------
# App / HTTP client fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def app(db_engine, collaborators):
    """FastAPI app wired to the test database and fake collaborators."""
    from app.main import create_app

    test_app = create_app(db_engine=db_engine, collaborators=collaborators)
    async with test_app.router.lifespan_context(test_app):
        yield test_app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client sending the test workspace header."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-Workspace-ID": WORKSPACE_ID},
        follow_redirects=True,
    ) as ac:
        yield ac
