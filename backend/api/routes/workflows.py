"""Workflow endpoints: CRUD, toggle, execute, execution history."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import ErrorResponse
from api.schemas.execution import ExecuteRequest, ExecutionListResponse, ExecutionResponse
from api.schemas.workflow import (
    WorkflowCreate,
    WorkflowDetailResponse,
    WorkflowListResponse,
    WorkflowResponse,
    WorkflowToggle,
    WorkflowUpdate,
)
from app.config import get_settings
from app.dependencies import get_db, get_engine, get_workspace_id
from services.workflow_service import ExecutionService, WorkflowService
from workflow.engine import WorkflowEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["workflows"], responses={404: {"model": ErrorResponse}})

# Fields an update may explicitly clear with null
NULLABLE_FIELDS = {"description", "conditions"}


def _workflow_to_response(wf) -> WorkflowResponse:
    """Convert a Workflow ORM object to response schema."""
    return WorkflowResponse.model_validate(wf)


@router.get("/", response_model=WorkflowListResponse)
async def list_workflows(
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> WorkflowListResponse:
    """
    List the workspace's workflows, newest first.
    """
    workflows = await WorkflowService(db).list_workflows(workspace_id)
    return WorkflowListResponse(
        workflows=[_workflow_to_response(wf) for wf in workflows],
        total=len(workflows),
    )


@router.post("/", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
async def create_workflow(
    request: WorkflowCreate,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """
    Create a new workflow in the workspace.
    """
    wf = await WorkflowService(db).create_workflow(
        workspace_id=workspace_id,
        name=request.name,
        description=request.description,
        trigger=request.trigger,
        conditions=request.conditions,
        actions=[a.model_dump(exclude_none=True) for a in request.actions],
        nodes=request.nodes,
        edges=request.edges,
        is_active=request.is_active,
    )
    return _workflow_to_response(wf)


@router.get("/{workflow_id}", response_model=WorkflowDetailResponse)
async def get_workflow(
    workflow_id: str,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> WorkflowDetailResponse:
    """
    Get a workflow with its most recent executions.
    """
    wf = await WorkflowService(db).get_workflow(workflow_id, workspace_id)
    recent = await ExecutionService(db).list_executions(
        workflow_id, limit=get_settings().RECENT_EXECUTIONS_LIMIT
    )
    return WorkflowDetailResponse(
        **_workflow_to_response(wf).model_dump(),
        recent_executions=[ExecutionResponse.model_validate(ex) for ex in recent],
    )


@router.put("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: str,
    request: WorkflowUpdate,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """
    Replace the supplied fields. Every update bumps the version by one.
    """
    patch = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    if request.actions is not None:
        patch["actions"] = [a.model_dump(exclude_none=True) for a in request.actions]

    wf = await WorkflowService(db).update_workflow(workflow_id, workspace_id, patch)
    return _workflow_to_response(wf)


@router.delete("/{workflow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workflow(
    workflow_id: str,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a workflow and its execution history.
    """
    await WorkflowService(db).delete_workflow(workflow_id, workspace_id)


@router.patch("/{workflow_id}/toggle", response_model=WorkflowResponse)
async def toggle_workflow(
    workflow_id: str,
    request: WorkflowToggle,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """
    Activate or deactivate a workflow. Does not change the version.
    """
    wf = await WorkflowService(db).toggle_workflow(workflow_id, workspace_id, request.is_active)
    return _workflow_to_response(wf)


@router.post(
    "/{workflow_id}/execute",
    response_model=ExecutionResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def execute_workflow(
    workflow_id: str,
    request: ExecuteRequest,
    workspace_id: str = Depends(get_workspace_id),
    engine: WorkflowEngine = Depends(get_engine),
) -> ExecutionResponse:
    """
    Fire a workflow. Returns the RUNNING execution immediately;
    poll GET /executions/{id} for the outcome.
    """
    execution = await engine.execute(workflow_id, request.trigger_data, workspace_id)
    return ExecutionResponse.model_validate(execution)


@router.get("/{workflow_id}/executions", response_model=ExecutionListResponse)
async def list_workflow_executions(
    workflow_id: str,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> ExecutionListResponse:
    """
    Newest executions of a workflow.
    """
    await WorkflowService(db).get_workflow(workflow_id, workspace_id)
    executions = await ExecutionService(db).list_executions(
        workflow_id, limit=get_settings().EXECUTION_HISTORY_LIMIT
    )
    return ExecutionListResponse(
        executions=[ExecutionResponse.model_validate(ex) for ex in executions],
        total=len(executions),
    )
