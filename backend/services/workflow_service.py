"""Workflow service: definition storage, execution records, run statistics."""

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, select, update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import ExecutionStatus
from core.exceptions import NotFoundError, ValidationError
from db.models.execution import WorkflowExecution
from db.models.workflow import Workflow
from services.base import BaseService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"name", "description", "trigger", "conditions", "actions", "nodes", "edges", "is_active"}
)


class WorkflowService(BaseService[Workflow]):
    """Service for workflow definitions and their aggregate statistics."""

    def __init__(self, db: AsyncSession):
        super().__init__(Workflow, db)

    async def create_workflow(
        self,
        workspace_id: str,
        name: str,
        trigger: dict = None,
        actions: list = None,
        conditions: Optional[dict] = None,
        nodes: list = None,
        edges: list = None,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> Workflow:
        """Create a new workflow at version 1 with zeroed statistics."""
        wf = await self.create({
            "workspace_id": workspace_id,
            "name": name,
            "description": description,
            "trigger": trigger or {},
            "conditions": conditions,
            "actions": actions or [],
            "nodes": nodes or [],
            "edges": edges or [],
            "is_active": is_active,
            "version": 1,
        })
        logger.info(f"Workflow {wf.id} created in workspace {workspace_id}")
        return wf

    async def list_workflows(self, workspace_id: str) -> Sequence[Workflow]:
        """List a workspace's workflows, newest first."""
        return await self.find(workspace_id=workspace_id)

    async def get_workflow(self, workflow_id: str, workspace_id: Optional[str] = None) -> Workflow:
        """Get a workflow, scoped to a workspace when one is given.

        Raises:
            NotFoundError: If the id does not resolve
        """
        if workspace_id is None:
            wf = await self.get_by_id(workflow_id)
        else:
            wf = await self.get_by_id_and_workspace(workflow_id, workspace_id)
        if not wf:
            raise NotFoundError("Workflow not found")
        return wf

    async def _reload(self, workflow_id: str) -> Workflow:
        result = await self.db.execute(
            select(Workflow)
            .where(Workflow.id == workflow_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def update_workflow(
        self,
        workflow_id: str,
        workspace_id: str,
        patch: dict[str, Any],
    ) -> Workflow:
        """Replace the given fields and bump the version by exactly one.

        The bump happens even when the patch is empty.
        """
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        await self.get_workflow(workflow_id, workspace_id)
        await self.db.execute(
            sa_update(Workflow)
            .where(Workflow.id == workflow_id)
            .values(**patch, version=Workflow.version + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.flush()
        return await self._reload(workflow_id)

    async def toggle_workflow(self, workflow_id: str, workspace_id: str, is_active: bool) -> Workflow:
        """Set the active flag without bumping the version."""
        await self.get_workflow(workflow_id, workspace_id)
        await self.db.execute(
            sa_update(Workflow)
            .where(Workflow.id == workflow_id)
            .values(is_active=is_active)
            .execution_options(synchronize_session=False)
        )
        await self.db.flush()
        return await self._reload(workflow_id)

    async def delete_workflow(self, workflow_id: str, workspace_id: str) -> None:
        """Delete a workflow together with its execution history."""
        await self.get_workflow(workflow_id, workspace_id)
        await self.db.execute(
            delete(WorkflowExecution).where(WorkflowExecution.workflow_id == workflow_id)
        )
        await self.hard_delete(workflow_id)
        logger.info(f"Workflow {workflow_id} deleted with its executions")

    async def increment_stats(
        self,
        workflow_id: str,
        success: bool,
        duration: int,
        completed_at: datetime,
    ) -> bool:
        """Record one settled run in a single UPDATE statement.

        Every column is computed from its pre-update value inside the
        statement, so concurrent settlements never lose increments.

        Returns:
            False if the workflow no longer exists
        """
        previous_average = func.coalesce(Workflow.average_execution_time, 0.0)
        values = {
            "execution_count": Workflow.execution_count + 1,
            "last_executed_at": completed_at,
            "average_execution_time": (
                (previous_average * Workflow.execution_count + duration)
                / (Workflow.execution_count + 1)
            ),
        }
        if success:
            values["success_count"] = Workflow.success_count + 1
        else:
            values["failure_count"] = Workflow.failure_count + 1

        result = await self.db.execute(
            sa_update(Workflow)
            .where(Workflow.id == workflow_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0


class ExecutionService(BaseService[WorkflowExecution]):
    """Service for execution records."""

    def __init__(self, db: AsyncSession):
        super().__init__(WorkflowExecution, db)

    async def create_execution(
        self,
        workflow_id: str,
        trigger_data: Any,
        retry_count: int = 0,
    ) -> WorkflowExecution:
        """Persist a new RUNNING execution with an empty step log."""
        return await self.create({
            "workflow_id": workflow_id,
            "trigger_data": trigger_data,
            "status": ExecutionStatus.RUNNING.value,
            "steps": [],
            "retry_count": retry_count,
        })

    async def get_execution(
        self,
        execution_id: str,
        workspace_id: Optional[str] = None,
    ) -> WorkflowExecution:
        """Get an execution, scoped through its workflow's workspace when given.

        Raises:
            NotFoundError: If the id does not resolve
        """
        query = select(WorkflowExecution).where(WorkflowExecution.id == execution_id)
        if workspace_id is not None:
            query = query.join(Workflow, Workflow.id == WorkflowExecution.workflow_id).where(
                Workflow.workspace_id == workspace_id
            )
        result = await self.db.execute(query.execution_options(populate_existing=True))
        execution = result.scalar_one_or_none()
        if not execution:
            raise NotFoundError("Execution not found")
        return execution

    async def list_executions(self, workflow_id: str, limit: int) -> Sequence[WorkflowExecution]:
        """Newest executions of a workflow, by start time."""
        return await self.find(
            limit=limit,
            order_by="started_at",
            filters={"workflow_id": workflow_id},
        )

    async def settle(
        self,
        execution_id: str,
        status: ExecutionStatus,
        steps: list,
        completed_at: datetime,
        duration: int,
        error: Optional[str] = None,
        error_step: Optional[str] = None,
    ) -> bool:
        """Attach the step log and terminal status to a RUNNING execution.

        The RUNNING filter makes the transition one-way.

        Returns:
            False if the execution is gone or already terminal
        """
        result = await self.db.execute(
            sa_update(WorkflowExecution)
            .where(
                WorkflowExecution.id == execution_id,
                WorkflowExecution.status == ExecutionStatus.RUNNING.value,
            )
            .values(
                status=status.value,
                steps=steps,
                completed_at=completed_at,
                duration=duration,
                error=error,
                error_step=error_step,
            )
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0
