"""Execution read and retry endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import ErrorResponse
from api.schemas.execution import ExecutionResponse
from app.dependencies import get_db, get_engine, get_workspace_id
from services.workflow_service import ExecutionService
from workflow.engine import WorkflowEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["executions"], responses={404: {"model": ErrorResponse}})


@router.get("/{execution_id}", response_model=ExecutionResponse)
async def get_execution(
    execution_id: str,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> ExecutionResponse:
    """
    Get an execution with its step log.
    """
    execution = await ExecutionService(db).get_execution(execution_id, workspace_id)
    return ExecutionResponse.model_validate(execution)


@router.post(
    "/{execution_id}/retry",
    response_model=ExecutionResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def retry_execution(
    execution_id: str,
    workspace_id: str = Depends(get_workspace_id),
    engine: WorkflowEngine = Depends(get_engine),
) -> ExecutionResponse:
    """
    Re-run a FAILED execution's payload as a new execution.
    """
    execution = await engine.retry(execution_id, workspace_id)
    logger.info(f"Execution {execution_id} retried as {execution.id}")
    return ExecutionResponse.model_validate(execution)
