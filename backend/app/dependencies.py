"""FastAPI dependency injection functions."""

import logging

from fastapi import Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from workflow.engine import WorkflowEngine

logger = logging.getLogger(__name__)


async def get_db(request: Request) -> AsyncSession:
    """
    Provide a database session for API endpoints.

    Yields an async SQLAlchemy session that is automatically
    committed on success or rolled back on error.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Database error: {str(e)}")
            await session.rollback()
            raise


async def get_workspace_id(
    x_workspace_id: str = Header(..., alias="X-Workspace-ID", min_length=1),
) -> str:
    """Workspace partition key for the request.

    Authentication happens upstream; the gateway forwards the
    caller's workspace in this header.
    """
    return x_workspace_id


def get_engine(request: Request) -> WorkflowEngine:
    """The application's workflow engine."""
    return request.app.state.workflow_engine
