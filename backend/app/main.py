"""Workflow Automation Engine - FastAPI Application."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from actions.dispatcher import ActionDispatcher
from actions.registry import ActionRegistry
from api.routes import health
from api.v1.router import api_v1_router
from app.config import get_settings
from core.logging_config import setup_logging
from core.middleware import RequestTrackingMiddleware, setup_exception_handlers
from db import database
from integrations.registry import Collaborators, build_collaborators
from services.template_library import seed_templates
from workflow.engine import WorkflowEngine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup
    settings = get_settings()
    setup_logging()

    db_engine = app.state.db_engine
    await database.init_db(db_engine)
    session_factory = database.create_session_factory(db_engine)
    app.state.session_factory = session_factory

    if settings.SEED_TEMPLATES:
        async with session_factory() as session:
            await seed_templates(session)
            await session.commit()
        print("[startup] Template library seeded")

    collaborators = app.state.collaborators or build_collaborators(settings)
    registry = ActionRegistry(collaborators, settings)
    dispatcher = ActionDispatcher(registry, default_timeout=settings.ACTION_TIMEOUT_SECONDS)
    app.state.action_registry = registry
    app.state.workflow_engine = WorkflowEngine(session_factory, dispatcher)
    print(f"[startup] Workflow engine ready ({len(registry.available_types)} action types)")

    print(f"[startup] {settings.APP_NAME} v{settings.APP_VERSION} started ({settings.ENVIRONMENT})")
    yield
    # Shutdown
    print("[shutdown] Waiting for running executions...")
    await app.state.workflow_engine.drain()
    await database.close_db(db_engine)
    print("[shutdown] Application shutting down...")


def create_app(
    db_engine: Optional[AsyncEngine] = None,
    collaborators: Optional[Collaborators] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_engine: Database engine to use instead of the configured one
        collaborators: External systems for the action handlers; built
            from settings when omitted
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Event-driven workflow automation: conditions, actions, "
                    "execution history and a template library.",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.db_engine = db_engine or database.engine
    app.state.collaborators = collaborators

    # Request tracking middleware
    app.add_middleware(RequestTrackingMiddleware)

    # Global exception handlers
    setup_exception_handlers(app)

    # Root health check, unversioned for load balancers and k8s probes
    app.include_router(health.router)

    # Versioned API: all business endpoints under /api/v1
    app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_app()
